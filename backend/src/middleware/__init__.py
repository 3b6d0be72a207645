"""
Middleware components for the event task workflow backend.

This module provides:
- Identity: Dataclass representing the authenticated person for a request
- get_identity: FastAPI dependency requiring authentication
- get_optional_identity: FastAPI dependency for optional authentication
- NavigationGuardMiddleware: Redirects page navigation based on role
"""

from backend.src.middleware.identity import Identity, get_identity, get_optional_identity
from backend.src.middleware.navigation import NavigationGuardMiddleware

__all__ = [
    "Identity",
    "get_identity",
    "get_optional_identity",
    "NavigationGuardMiddleware",
]
