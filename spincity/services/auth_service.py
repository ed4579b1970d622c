"""
Authentication and user-account use cases.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from spincity.core.security import hash_password, is_hashed, plain_text_matches, verify_password
from spincity.domain.entities import ROLE_USER, default_admin_user
from spincity.repositories.base import CollectionStore
from spincity.services.settings_service import SettingsStore

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Base class for authentication-related exceptions."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidCredentialsError(AuthError):
    pass


class InvalidAdminKeyError(AuthError):
    pass


class AdminUserMissingError(AuthError):
    pass


def _normalize_email(value: Any) -> str:
    return str(value or "").strip().lower()


@dataclass
class AuthService:
    """Login, admin-key checks and password handling for user records."""

    users: CollectionStore
    settings_store: SettingsStore
    default_admin_email: str

    async def find_by_email(self, email: str) -> Optional[dict]:
        wanted = _normalize_email(email)
        if not wanted:
            return None
        for user in await self.users.list():
            if _normalize_email(user.get("email")) == wanted:
                return user
        return None

    async def authenticate(self, email: str, password: str) -> dict:
        user = await self.find_by_email(email)
        if user is None or not verify_password(password or "", user.get("password")):
            logger.info("login rejected for %s", _normalize_email(email) or "<blank>")
            raise InvalidCredentialsError("Invalid email or password.")
        return user

    async def check_admin_key(self, key: str) -> bool:
        return plain_text_matches(key, await self.settings_store.get_admin_key())

    async def require_admin_key(self, key: str) -> None:
        if not await self.check_admin_key(key):
            logger.info("admin key confirmation rejected")
            raise InvalidAdminKeyError("Invalid Admin Key.")

    async def login_with_admin_key(self, key: str) -> dict:
        """Resolve the default admin account after a successful admin-key check."""
        if not await self.check_admin_key(key):
            logger.info("admin key login rejected")
            raise InvalidAdminKeyError("Invalid Admin Registration Key.")
        admin = await self.find_by_email(self.default_admin_email)
        if admin is None:
            raise AdminUserMissingError("Default admin user not found. Please contact support.")
        return admin

    async def ensure_default_admin(self) -> Optional[dict]:
        """Seed the default admin record when no user exists yet."""
        if await self.users.list():
            return None
        logger.info("No users found; seeding default admin %s", self.default_admin_email)
        return await self.users.create(default_admin_user(self.default_admin_email))

    async def create_user(self, data: dict) -> Optional[dict]:
        payload = dict(data)
        payload.setdefault("role", ROLE_USER)
        password = payload.get("password")
        if password and not is_hashed(password):
            payload["password"] = hash_password(password)
        return await self.users.create(payload)

    async def update_user(self, user: dict) -> dict:
        """Replace a user record; a blank password keeps the stored credential."""
        payload = dict(user)
        password = payload.get("password")
        if not password:
            existing = await self.users.get(payload.get("id"))
            if existing is not None and existing.get("password"):
                payload["password"] = existing["password"]
            else:
                payload.pop("password", None)
        elif not is_hashed(password):
            payload["password"] = hash_password(password)
        await self.users.update(payload)
        return payload
