"""
Configuration module for the outfit search service.

This module provides centralized configuration management using pydantic-settings.
All environment variables and configuration values should be accessed through this module.

Usage:
    from config import get_settings

    # Get settings instance (cached)
    settings = get_settings()

    # Access values
    ttl = settings.catalog_ttl_seconds
    is_dev = settings.is_development
"""

from config.settings import Settings, get_settings, get_settings_for_testing

__all__ = ["Settings", "get_settings", "get_settings_for_testing"]
