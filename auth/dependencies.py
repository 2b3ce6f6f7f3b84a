"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

The only accepted credential is an Authorization: Bearer <token> header.
Extraction and the missing/malformed-header check happen here, before the
token ever reaches AuthService.parse_token().

get_auth_service() returns the AuthService stored on app.state by the lifespan.
get_current_user_id() returns the token's subject without a store round-trip.
get_current_user() additionally loads the User record.

Layer rule: auth/dependencies.py may import from fastapi because this module
is part of the FastAPI dependency injection system. No imports from api/.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from auth.models import User
from auth.service import AuthService

_BEARER_PREFIX = "Bearer "


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def extract_bearer_token(request: Request) -> str:
    """Return the raw token from the Authorization header.

    Raises HTTP 401 when the header is missing, uses another scheme, or
    carries an empty token.
    """
    auth_header = request.headers.get("Authorization", "")
    token = auth_header[len(_BEARER_PREFIX) :].strip() if auth_header.startswith(_BEARER_PREFIX) else ""
    if not token:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Missing or invalid Authorization header."},
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token


def get_current_user_id(
    token: str = Depends(extract_bearer_token),
    service: AuthService = Depends(get_auth_service),
) -> int:
    """Verify the bearer token. InvalidCredentialError propagates to the app handler (401)."""
    return service.parse_token(token)


def get_current_user(
    user_id: int = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service),
) -> User:
    """Require authentication and load the user. Use as a FastAPI dependency:

    @router.get("/protected")
    async def route(user: User = Depends(get_current_user)): ...
    """
    return service.get_user_by_id(user_id)
