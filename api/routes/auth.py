"""
api/routes/auth.py -- Session authentication REST endpoints.

Routes:
  POST /auth/login     -- email + password -> sessionId, expiresAt, user
  POST /auth/validate  -- sessionId -> {valid, user?}; always 200
  POST /auth/logout    -- destroys the session named in the body or bearer header
  GET  /auth/me        -- current user (requires session)

Security:
  Login failures are uniform: unknown email and wrong password return the same
  401 body (AuthService raises the same error for both).
  Successful login responses carry Cache-Control: no-store so the session id is not cached.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from api.models import (
    LoginRequest,
    LoginResponse,
    LogoutRequest,
    MessageResponse,
    UserResponse,
    ValidateRequest,
    ValidateResponse,
)
from auth.dependencies import bearer_token, get_auth_service, get_current_user
from auth.service import AuthService
from core.errors import UnauthorizedError
from users.models import User

# Auth policy:
# - POST /auth/login:    public
# - POST /auth/validate: public -- answers valid/invalid, never 401
# - POST /auth/logout:   public -- possession of the session id is the credential
# - GET  /auth/me:       requires session (get_current_user)
router = APIRouter(prefix="/auth")


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """Verify credentials and issue a session valid for the configured TTL (24h default)."""
    response.headers["Cache-Control"] = "no-store"
    result = auth.login(body.email, body.password)
    return LoginResponse(
        session_id=result.session_id,
        expires_at=result.expires_at,
        user=UserResponse.from_user(result.user),
    )


@router.post("/validate", response_model=ValidateResponse, response_model_exclude_none=True)
def validate(body: ValidateRequest, auth: AuthService = Depends(get_auth_service)) -> ValidateResponse:
    """Report whether a session id is currently valid. Invalid ids are not an error."""
    result = auth.validate(body.session_id)
    if not result.valid:
        return ValidateResponse(valid=False)
    return ValidateResponse(valid=True, user=UserResponse.from_user(result.user))


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    body: Optional[LogoutRequest] = None,
    auth: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Destroy a session. Unknown ids still log out successfully (idempotent).

    The session id comes from the body when given, otherwise from the
    Authorization: Bearer header. A request carrying neither is rejected.
    """
    session_id = body.session_id if body is not None and body.session_id else bearer_token(request)
    if not session_id:
        raise UnauthorizedError("No session to log out.", code="missing_session")
    auth.logout(session_id)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)) -> UserResponse:
    """Return the public record of the user who owns the presented session."""
    return UserResponse.from_user(current_user)
