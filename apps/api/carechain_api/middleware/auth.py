"""Authentication middleware to resolve the acting user."""

import logging

from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from carechain_api.models import User

logger = logging.getLogger(__name__)

PUBLIC_PATHS = ["/health", "/ready", "/metrics", "/docs", "/openapi.json", "/"]


class AuthMiddleware(BaseHTTPMiddleware):
    """Resolve the x-user-id header to a portal user.

    Token issuance is handled outside this service; by the time a request
    reaches us the gateway has already placed the authenticated user id in
    the header.
    """

    async def dispatch(self, request: Request, call_next):
        """Process request with actor extraction."""
        path = request.url.path
        if path in PUBLIC_PATHS or path.startswith("/metrics"):
            return await call_next(request)

        # Admin endpoints carry their own key check
        if path.startswith("/admin"):
            return await call_next(request)

        user_id = request.headers.get("x-user-id")
        if not user_id:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Missing user id. Provide x-user-id header."},
            )

        db = request.app.state.session_factory()
        try:
            user = db.query(User).filter(User.id == user_id).first()
            if not user:
                return JSONResponse(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    content={"detail": "Unknown user."},
                )

            request.state.user_id = user.id
            request.state.user_role = user.role

            correlation_id = getattr(request.state, "correlation_id", None)
            logger.info(
                "Authenticated request",
                extra={
                    "user_id": user.id,
                    "role": user.role,
                    "correlation_id": correlation_id,
                    "path": path,
                },
            )
        finally:
            db.close()

        return await call_next(request)
