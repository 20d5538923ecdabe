"""Clerk JWT verification middleware for FastAPI.

Validates the Bearer token on every request (except public routes),
extracts claims, and sets ``request.state.auth`` with the authenticated
user context that downstream route handlers consume via ``get_current_user``.

Failures answer 401 here so an auth problem is never reported as a storage
or data problem further down.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

import jwt as pyjwt
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from jwt import PyJWKClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.config import Settings, get_settings
from src.dependencies import AuthContext

logger = logging.getLogger("bloom.auth")

# Paths that do not require authentication
PUBLIC_PATHS: set[str] = {"/health", "/docs", "/openapi.json", "/redoc"}


def _is_public(path: str) -> bool:
    return path in PUBLIC_PATHS or path.startswith("/docs") or path.startswith("/redoc")


def _unauthenticated(detail: str) -> Response:
    return JSONResponse({"detail": detail}, status_code=401)


def _parse_uuid(value: Any) -> uuid.UUID | None:
    if not value:
        return None
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class ClerkAuthMiddleware(BaseHTTPMiddleware):
    """Verify Clerk-issued JWTs and populate request.state.auth."""

    def __init__(self, app: Any, settings: Settings | None = None) -> None:
        super().__init__(app)
        self._settings = settings or get_settings()
        self._jwks_client = PyJWKClient(
            self._settings.clerk_jwks_url,
            cache_keys=True,
            lifespan=3600,
        )

    def _decode(self, token: str) -> dict[str, Any]:
        signing_key = self._jwks_client.get_signing_key_from_jwt(token)
        return pyjwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            options={"verify_aud": False},  # Clerk tokens use azp, not aud
        )

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # OPTIONS requests pass through (CORS preflight)
        if _is_public(request.url.path) or request.method == "OPTIONS":
            return await call_next(request)

        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith("Bearer "):
            return _unauthenticated("Missing or invalid Authorization header")

        token = auth_header.removeprefix("Bearer ").strip()

        try:
            payload = self._decode(token)
        except pyjwt.ExpiredSignatureError:
            return _unauthenticated("Token expired")
        except pyjwt.PyJWTError as exc:
            logger.warning("JWT validation failed: %s", exc)
            return _unauthenticated("Invalid token")

        # Custom claim set via the Clerk session token template
        app_user_id = _parse_uuid(payload.get("app_user_id"))
        if app_user_id is None:
            logger.warning("Token for %s carries no app_user_id claim", payload.get("sub"))
            return _unauthenticated("Account not provisioned")

        request.state.auth = AuthContext(
            user_id=payload.get("sub", ""),
            app_user_id=app_user_id,
            email=payload.get("email"),
            session_id=payload.get("sid"),
        )

        return await call_next(request)
