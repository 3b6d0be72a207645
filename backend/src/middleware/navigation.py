"""
Navigational guard for page routes.

Redirects (never errors) when a browser navigates to a page the current
identity may not see:
- Anonymous requests to guarded pages are redirected to /login
- Non-organizers requesting /organizer pages are redirected to /dashboard

API routes under /api and the health probe are never touched; they enforce
access through the authorization guard instead.
"""

from typing import Callable, Optional, Tuple

from fastapi import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse

from backend.src.middleware.identity import Identity, resolve_identity
from backend.src.utils.logging_config import get_logger

logger = get_logger("api")

LOGIN_PATH = "/login"
DASHBOARD_PATH = "/dashboard"
ORGANIZER_PREFIX = "/organizer"

# Page prefixes that require a signed-in identity
GUARDED_PREFIXES: Tuple[str, ...] = (DASHBOARD_PATH, "/events", ORGANIZER_PREFIX)

# Never redirected
EXEMPT_PREFIXES: Tuple[str, ...] = ("/api", "/health", "/docs", "/openapi.json", "/redoc")


def _matches(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def default_identity_resolver(request: Request) -> Optional[Identity]:
    """Resolve the request identity with a short-lived database session."""
    from backend.src.db.database import SessionLocal

    db = SessionLocal()
    try:
        return resolve_identity(request, db)
    except HTTPException:
        return None
    finally:
        db.close()


class NavigationGuardMiddleware(BaseHTTPMiddleware):
    """
    Middleware that redirects page navigation based on role.

    Args:
        app: ASGI application
        identity_resolver: Callable returning the request's Identity or None
    """

    def __init__(
        self,
        app,
        identity_resolver: Callable[[Request], Optional[Identity]] = default_identity_resolver,
    ):
        super().__init__(app)
        self.identity_resolver = identity_resolver

    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        if any(_matches(path, prefix) for prefix in EXEMPT_PREFIXES):
            return await call_next(request)

        if not any(_matches(path, prefix) for prefix in GUARDED_PREFIXES):
            return await call_next(request)

        # Import here to avoid circular imports
        from backend.src.services.authorization import Action, is_allowed

        identity = self.identity_resolver(request)

        if identity is None:
            logger.info(f"Navigation guard: anonymous request to {path} redirected to login")
            return RedirectResponse(url=LOGIN_PATH, status_code=307)

        if _matches(path, ORGANIZER_PREFIX) and not is_allowed(identity, Action.ORGANIZER_VIEW):
            logger.info(
                f"Navigation guard: {identity.user_guid} redirected from {path} to dashboard",
                extra={"user_guid": identity.user_guid, "path": path},
            )
            return RedirectResponse(url=DASHBOARD_PATH, status_code=307)

        return await call_next(request)
