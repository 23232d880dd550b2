"""Security middleware for FastAPI - shared-secret guard on staff routes."""

import hmac

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from api.base import error_response, ErrorCodes


class AdminAuthMiddleware(BaseHTTPMiddleware):
    """Middleware that requires the admin secret on every non-public path.

    Staff send `Authorization: Bearer <admin secret>`. Donor intake, the
    health check and API docs are public.
    """

    PUBLIC_PATHS = [
        "/api/intake",
        "/health",
        "/docs",
        "/openapi.json",
    ]

    def __init__(self, app, admin_secret: str):
        super().__init__(app)
        if not admin_secret:
            raise ValueError("admin_secret is required")
        self._admin_secret = admin_secret.encode("utf-8")

    def _is_public_path(self, path: str) -> bool:
        """Check if path is in public paths list."""
        for public_path in self.PUBLIC_PATHS:
            if path == public_path or path.startswith(public_path + "/"):
                return True
        return False

    def _bearer_token(self, request: Request) -> str | None:
        header = request.headers.get("Authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            return None
        return token.strip()

    async def dispatch(self, request: Request, call_next):
        """Process request through middleware."""
        if self._is_public_path(request.url.path):
            return await call_next(request)

        token = self._bearer_token(request)
        if token is None:
            return JSONResponse(
                status_code=401,
                content=error_response(
                    ErrorCodes.NOT_AUTHENTICATED,
                    "Authentication required",
                ).model_dump(mode="json"),
            )

        if not hmac.compare_digest(token.encode("utf-8"), self._admin_secret):
            return JSONResponse(
                status_code=401,
                content=error_response(
                    ErrorCodes.INVALID_TOKEN,
                    "Invalid admin secret",
                ).model_dump(mode="json"),
            )

        request.state.is_admin = True
        return await call_next(request)
