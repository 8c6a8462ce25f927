"""
Core module for cross-cutting concerns.

This module provides:
- Structured logging configuration
- Request tracing middleware
- The pipeline error taxonomy
"""

from core.errors import (
    CollaboratorError,
    InputError,
    InsufficientCandidatesError,
    NotFoundError,
    ShoppingEngineError,
    TemplateResolutionError,
)
from core.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "ShoppingEngineError",
    "InputError",
    "NotFoundError",
    "InsufficientCandidatesError",
    "TemplateResolutionError",
    "CollaboratorError",
]
