"""
api/routes/v1/auth.py -- Registration, login and identity REST endpoints.

Routes:
  POST /api/v1/auth/register  -- create an account; 201 {id, email}
  POST /api/v1/auth/login     -- verify credentials; 200 {token}
  GET  /api/v1/auth/me        -- current user info (requires Bearer token)

Errors are not caught here. AuthService raises AuthError subclasses and the
app-level handler in api/main.py turns them into the standard error envelope:
  EmailExistsError -> 400, InvalidCredentialError -> 401,
  NotFoundError -> 404, StorageFailureError -> 500.

Security:
  Login returns the same "invalid_credentials" error for unknown email and
  wrong password. Login responses carry Cache-Control: no-store.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from api.models import LoginRequest, LoginResponse, RegisterRequest, UserResponse
from auth.dependencies import get_auth_service, get_current_user
from auth.models import User
from auth.service import AuthService

# Auth policy:
# - POST /api/v1/auth/register: public
# - POST /api/v1/auth/login:    public
# - GET  /api/v1/auth/me:       requires Bearer token (get_current_user)
router = APIRouter()


@router.post("/auth/register", response_model=UserResponse, status_code=201)
def register(body: RegisterRequest, service: AuthService = Depends(get_auth_service)) -> UserResponse:
    """Create a user account with an email and password."""
    user = service.register(body.email, body.password)
    return UserResponse.from_user(user)


@router.post("/auth/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """Authenticate with email and password; return a signed session token."""
    token = service.login(body.email, body.password)
    response.headers["Cache-Control"] = "no-store"
    return LoginResponse(token=token)


@router.get("/auth/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)) -> UserResponse:
    """Return identity information for the currently authenticated user."""
    return UserResponse.from_user(current_user)
