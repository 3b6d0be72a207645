"""
Configuration module for the event task workflow backend.

Provides centralized configuration loaded from environment variables
and the optional .env file.
"""

from backend.src.config.settings import AppSettings, get_settings

__all__ = [
    "AppSettings",
    "get_settings",
]
