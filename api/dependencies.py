"""
api/dependencies.py -- Depends() providers for application services.

The lifespan in api/main.py builds every service once, with its storage
handle passed in explicitly, and parks it on app.state. These providers only
hand those instances to route functions; they never construct anything.
"""

from __future__ import annotations

from fastapi import Request

from core.config import Settings
from db.database import Database
from users.service import UserService


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service
