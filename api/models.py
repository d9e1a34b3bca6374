"""
API request and response models for the User Auth REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in users/models.py and
auth/models.py, which own the internal domain representation. Route handlers
map between the two.

Wire format: JSON keys are camelCase (sessionId, createdAt). Field names stay
snake_case in Python; the alias generator handles the translation and
populate_by_name lets tests and internal callers use either form.

Separation of concerns: domain models = domain truth; api/ models = API contract.
UserResponse has no password field, so a password hash cannot leak through
any response built from it.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from auth.tokens import MAX_PASSWORD_BYTES
from users.models import User

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Pragmatic shape check: one "@", no whitespace, a dot in the domain part.
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
MIN_PASSWORD_LENGTH = 8


def _normalize_email(value):
    return value.strip().lower() if isinstance(value, str) else value


def _check_password_bytes(value: Optional[str]) -> Optional[str]:
    if value is not None and len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


class _RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _ResponseModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LoginRequest(_RequestModel):
    """Request body for POST /auth/login.

    Password length is not policed beyond being non-empty -- an over-long
    password simply fails verification with the usual 401.
    """

    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(min_length=1, max_length=1024)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return _normalize_email(value)


class UserCreate(_RequestModel):
    """Request body for POST /users."""

    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    name: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return _normalize_email(value)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("password")
    @classmethod
    def check_password_bytes(cls, value: str) -> str:
        return _check_password_bytes(value)


class UserUpdate(_RequestModel):
    """Request body for PUT /users/{id}. Every field is optional; omitted fields are left alone."""

    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN, max_length=255)
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    password: Optional[str] = Field(default=None, min_length=MIN_PASSWORD_LENGTH)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return _normalize_email(value)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("password")
    @classmethod
    def check_password_bytes(cls, value: Optional[str]) -> Optional[str]:
        return _check_password_bytes(value)


class ValidateRequest(_RequestModel):
    """Request body for POST /auth/validate. Any string is accepted; unknown ids are simply invalid."""

    session_id: str


class LogoutRequest(_RequestModel):
    """Optional body for POST /auth/logout. When absent, the bearer header is used."""

    session_id: Optional[str] = None


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(_ResponseModel):
    """Public user fields. id is a string on the wire."""

    id: str
    email: str
    name: str
    created_at: str
    updated_at: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        """Build the public representation from a domain User (drops password_hash)."""
        return cls(
            id=str(user.id),
            email=user.email,
            name=user.name,
            created_at=user.created_at or "",
            updated_at=user.updated_at or "",
        )


class LoginResponse(_ResponseModel):
    session_id: str
    expires_at: str
    user: UserResponse


class ValidateResponse(_ResponseModel):
    """Response for POST /auth/validate. user is omitted when valid is false."""

    valid: bool
    user: Optional[UserResponse] = None


class MessageResponse(_ResponseModel):
    message: str


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
    timestamp: str
