"""
api/routes/users.py -- User management REST endpoints.

Routes:
  GET    /users        -- list public user records (public)
  GET    /users/{id}   -- one public user record, 404 if missing (public)
  POST   /users        -- create user (requires session)
  PUT    /users/{id}   -- partial update (requires session)
  DELETE /users/{id}   -- delete user and, by cascade, their sessions (requires session)

Every response goes through UserResponse, which has no password field.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from api.dependencies import get_user_service
from api.models import MessageResponse, UserCreate, UserResponse, UserUpdate
from auth.dependencies import get_current_user
from users.models import User
from users.service import UserService

# Auth policy:
# - GET    /users, /users/{id}: public
# - POST   /users:              requires session (get_current_user)
# - PUT    /users/{id}:         requires session (get_current_user)
# - DELETE /users/{id}:         requires session (get_current_user)
router = APIRouter()


@router.get("/users", response_model=list[UserResponse])
def list_users(users: UserService = Depends(get_user_service)) -> list[UserResponse]:
    return [UserResponse.from_user(u) for u in users.list_users()]


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(user_id: int, users: UserService = Depends(get_user_service)) -> UserResponse:
    return UserResponse.from_user(users.get_user(user_id))


@router.post("/users", response_model=UserResponse)
def create_user(
    body: UserCreate,
    current_user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> UserResponse:
    """Create a user account. 409 if the email is already registered."""
    created = users.create_user(email=body.email, name=body.name, password=body.password)
    return UserResponse.from_user(created)


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    body: UserUpdate,
    current_user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> UserResponse:
    """Partially update a user. Only fields present in the body are changed."""
    updated = users.update_user(user_id, email=body.email, name=body.name, password=body.password)
    return UserResponse.from_user(updated)


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> MessageResponse:
    users.delete_user(user_id)
    return MessageResponse(message="User deleted successfully")
