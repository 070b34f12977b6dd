import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from jose import JWTError

from ticketwise.config import settings
from ticketwise.core.security import decode_access_token

logger = logging.getLogger(__name__)


class AuthMiddleware(BaseHTTPMiddleware):
    """
    Identifies the user on EVERY authenticated API request

    Flow:
    1. Reads the JWT from the Authorization header
    2. Decodes it and gets user_id and role
    3. Stores them on request.state for the dependencies (api/deps.py)

    IMPORTANT: every /api/ route except the public ones below requires a
    valid token. Errors are answered here as JSON, exceptions raised in a
    middleware would not reach FastAPI's handlers.
    """

    # Public routes (no authentication)
    PUBLIC_PATHS = [
        "/",
        "/health",
        "/docs",
        "/redoc",
        f"{settings.API_V1_STR}/openapi.json",
        f"{settings.API_V1_STR}/auth/login",
    ]

    def _unauthorized(self, detail: str) -> JSONResponse:
        return JSONResponse(status_code=401, content={"detail": detail})

    async def dispatch(self, request: Request, call_next):
        """
        Runs before every route
        """
        path = request.url.path

        # CORS preflight
        if request.method == "OPTIONS":
            return await call_next(request)

        # Public routes and anything outside the API go straight through
        if path in self.PUBLIC_PATHS or not path.startswith("/api/"):
            return await call_next(request)

        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            return self._unauthorized("Authentication token not provided")

        token = auth_header[len("Bearer "):]

        try:
            payload = decode_access_token(token)
        except JWTError as e:
            logger.info(f"[AUTH] Rejected token on {path}: {e}")
            return self._unauthorized(str(e))

        user_id = payload.get("user_id")
        if not user_id:
            return self._unauthorized("Invalid token: user not identified")

        request.state.user_id = user_id
        request.state.user_role = payload.get("role")

        return await call_next(request)
