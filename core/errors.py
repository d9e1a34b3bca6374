"""
core/errors.py -- Domain error taxonomy.

Services and stores raise these; api/main.py maps every AppError onto the
shared ErrorResponse envelope using the error's status code. Nothing below
api/ knows about HTTP beyond the status number carried on the error.

  ValidationError    422  malformed or missing input
  UnauthorizedError  401  missing, invalid, or expired credentials
  NotFoundError      404  entity does not exist
  ConflictError      409  uniqueness violation
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Optional


class AppError(Exception):
    """Base class for errors that map onto a client-facing response."""

    status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
    code: str = "internal_error"
    message: str = "An unexpected error occurred."

    def __init__(self, message: Optional[str] = None, *, code: Optional[str] = None, detail: Optional[str] = None):
        self.message = message or self.message
        self.code = code or self.code
        self.detail = detail
        super().__init__(self.message)


class ValidationError(AppError):
    status = HTTPStatus.UNPROCESSABLE_ENTITY
    code = "validation_error"
    message = "Request validation failed."


class UnauthorizedError(AppError):
    status = HTTPStatus.UNAUTHORIZED
    code = "unauthorized"
    message = "Authentication required."


class NotFoundError(AppError):
    status = HTTPStatus.NOT_FOUND
    code = "not_found"
    message = "Resource not found."


class ConflictError(AppError):
    status = HTTPStatus.CONFLICT
    code = "conflict"
    message = "Resource already exists."
