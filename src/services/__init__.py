"""
Services module for business logic.

Provides request orchestration (ShoppingService), tiered outfit bundle
assembly and the optional LLM assistant.
"""

from services.assistant import AssistantCollaborator, get_assistant
from services.bundle_builder import Bundle, BundleAssembler, CartItem, classify_role
from services.shopping_service import ShoppingService, get_shopping_service

__all__ = [
    "AssistantCollaborator",
    "Bundle",
    "BundleAssembler",
    "CartItem",
    "ShoppingService",
    "classify_role",
    "get_assistant",
    "get_shopping_service",
]
