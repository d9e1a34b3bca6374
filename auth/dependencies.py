"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Credential: Authorization: Bearer <sessionId>. The scheme is matched
case-insensitively; anything else (missing header, other scheme, empty token)
counts as unauthenticated.

bearer_token() is the soft extractor (returns None on failure).
try_get_current_user() resolves the token through AuthService.validate().
get_current_user() wraps it and raises UnauthorizedError (401) -- this is the
guard every protected route declares. FastAPI resolves dependencies before
the route body runs, so a rejected request never reaches route logic.

The services are constructed once in the application lifespan and read from
request.app.state here; nothing in auth/ builds its own storage handle.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from fastapi import Depends, Request

from auth.service import AuthService
from core.errors import UnauthorizedError
from users.models import User


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def bearer_token(request: Request) -> str | None:
    """Return the bearer credential from the Authorization header, or None."""
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        return None
    return token


def try_get_current_user(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> User | None:
    """Return the session's user, or None if the request carries no valid session."""
    token = bearer_token(request)
    if token is None:
        return None
    result = auth.validate(token)
    return result.user if result.valid else None


def get_current_user(user: User | None = Depends(try_get_current_user)) -> User:
    """Require a valid session. Raises UnauthorizedError if there is none.

    Use as a FastAPI dependency:
        @router.post("/protected")
        def route(current_user: User = Depends(get_current_user)): ...
    """
    if user is None:
        raise UnauthorizedError("A valid session is required.", code="invalid_session")
    return user
