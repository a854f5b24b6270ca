"""Role enforcement middleware."""

import logging
import re
from typing import Optional

from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from carechain_api.auth.roles import DOCTOR, GRANTEE_ROLES, INSURANCE, PATIENT, PHARMACY, has_role
from carechain_api.middleware.auth import PUBLIC_PATHS

logger = logging.getLogger(__name__)

# Ordered (path_regex, method) -> allowed roles; first match wins
ROLE_MAP = [
    # Medical records
    (r"^/v1/medical-records/shared$", "GET", sorted(GRANTEE_ROLES)),
    (r"^/v1/medical-records$", "POST", [PATIENT]),
    (r"^/v1/medical-records$", "GET", [PATIENT]),
    # Access permissions (owner operations)
    (r"^/v1/access-permissions(/[^/]+)?$", "POST", [PATIENT]),
    (r"^/v1/access-permissions(/[^/]+)?$", "GET", [PATIENT]),
    (r"^/v1/access-permissions/[^/]+$", "DELETE", [PATIENT]),
    # Prescriptions
    (r"^/v1/prescriptions/[^/]+/dispense$", "POST", [PHARMACY]),
    (r"^/v1/prescriptions$", "POST", [DOCTOR]),
    # Claims
    (r"^/v1/claims$", "POST", [PATIENT]),
    (r"^/v1/claims/[^/]+$", "PATCH", [INSURANCE]),
]

_COMPILED = [(re.compile(pattern), method, roles) for pattern, method, roles in ROLE_MAP]


def get_required_roles(path: str, method: str) -> Optional[list[str]]:
    """Get allowed roles for a path and HTTP method, or None if any role may call it."""
    normalized_path = path.rstrip("/") or "/"
    for pattern, pattern_method, roles in _COMPILED:
        if pattern_method == method and pattern.match(normalized_path):
            return roles
    return None


class RoleMiddleware(BaseHTTPMiddleware):
    """Enforce the caller's role per endpoint."""

    async def dispatch(self, request: Request, call_next):
        """Check the authenticated role before processing request."""
        if request.url.path in PUBLIC_PATHS or request.url.path.startswith("/admin"):
            return await call_next(request)

        required_roles = get_required_roles(request.url.path, request.method)
        if not required_roles:
            return await call_next(request)

        role = getattr(request.state, "user_role", None)
        if role is None:
            return await call_next(request)  # Auth middleware will handle this

        if not has_role(role, required_roles):
            logger.warning(
                "Role check failed",
                extra={"role": role, "path": request.url.path, "method": request.method},
            )
            return JSONResponse(
                status_code=status.HTTP_403_FORBIDDEN,
                content={
                    "detail": f"Insufficient permissions. Required roles: {required_roles}, "
                    f"user has: {role}",
                },
            )

        return await call_next(request)
