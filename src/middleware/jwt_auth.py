"""Bearer JWT verification middleware for FastAPI.

Validates the RS256 token on every request (except public routes) against
the identity provider's JWKS, and sets ``request.state.auth`` with the
authenticated user context that route handlers consume via
``get_current_user``.
"""

from __future__ import annotations

import logging
from typing import Any

import jwt as pyjwt
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from jwt import PyJWKClient
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.config import Settings, get_settings
from src.dependencies import AuthContext

logger = logging.getLogger("cyclecare.auth")

PUBLIC_PATHS = frozenset({"/health", "/openapi.json"})
PUBLIC_PREFIXES = ("/docs", "/redoc")


def _is_public(path: str) -> bool:
    return path in PUBLIC_PATHS or path.startswith(PUBLIC_PREFIXES)


def _bearer_token(request: Request) -> str | None:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme != "Bearer" or not token.strip():
        return None
    return token.strip()


def _unauthorized(detail: str) -> Response:
    return JSONResponse({"detail": detail}, status_code=401)


class JWTAuthMiddleware(BaseHTTPMiddleware):
    """Verify bearer JWTs and populate request.state.auth."""

    def __init__(self, app: Any, settings: Settings | None = None) -> None:
        super().__init__(app)
        self._settings = settings or get_settings()
        self._jwks_client = PyJWKClient(
            self._settings.auth_jwks_url,
            cache_keys=True,
            lifespan=3600,
        )

    def _decode(self, token: str) -> dict[str, Any]:
        signing_key = self._jwks_client.get_signing_key_from_jwt(token)
        return pyjwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            issuer=self._settings.auth_issuer,
            options={
                "verify_aud": False,
                "verify_iss": self._settings.auth_issuer is not None,
            },
        )

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # CORS preflight carries no credentials
        if request.method == "OPTIONS" or _is_public(request.url.path):
            return await call_next(request)

        token = _bearer_token(request)
        if token is None:
            return _unauthorized("Missing or invalid Authorization header")

        try:
            # JWKS lookup may hit the network on a key-cache miss
            payload = await run_in_threadpool(self._decode, token)
        except pyjwt.ExpiredSignatureError:
            return _unauthorized("Token expired")
        except (pyjwt.InvalidTokenError, pyjwt.PyJWKClientError) as exc:
            logger.warning("JWT validation failed: %s", exc)
            return _unauthorized("Invalid token")

        subject: str = payload.get("sub", "")
        if not subject:
            return _unauthorized("Invalid token")

        request.state.auth = AuthContext(
            user_id=subject,
            email=payload.get("email"),
            session_id=payload.get("sid"),
        )

        return await call_next(request)
