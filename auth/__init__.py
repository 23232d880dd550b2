"""Authorization for staff routes."""

from auth.security_middleware import AdminAuthMiddleware
