"""
Singleton settings (SMS gateway, admin pass-key, logos) on top of a KeyValueStore.

Each getter seeds its default on first read. The admin pass-key is kept in
plain text and compared by equality (see core/security.py); this mirrors
data written by earlier versions and is a known weakness.
"""

from __future__ import annotations

import copy
from typing import Optional

from spincity.domain.entities import ADMIN_KEY_MIN_LENGTH, DEFAULT_ADMIN_KEY, DEFAULT_SMS_SETTINGS
from spincity.repositories.base import KeyValueStore

SMS_SETTINGS_KEY = "sms_settings"
ADMIN_KEY_KEY = "admin_key"
APP_LOGO_KEY = "app_logo"
SPLASH_LOGO_KEY = "splash_logo"


class SettingsError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def default_settings() -> dict:
    return {
        "sms": copy.deepcopy(DEFAULT_SMS_SETTINGS),
        "adminKey": DEFAULT_ADMIN_KEY,
        "appLogo": None,
        "splashLogo": None,
    }


class SettingsStore:
    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv

    async def get_sms_settings(self) -> dict:
        value = await self._kv.get(SMS_SETTINGS_KEY, copy.deepcopy(DEFAULT_SMS_SETTINGS))
        if not isinstance(value, dict):
            return copy.deepcopy(DEFAULT_SMS_SETTINGS)
        return value

    async def set_sms_settings(self, settings: dict) -> None:
        await self._kv.set(SMS_SETTINGS_KEY, dict(settings))

    async def get_admin_key(self) -> str:
        value = await self._kv.get(ADMIN_KEY_KEY, DEFAULT_ADMIN_KEY)
        return value if isinstance(value, str) and value else DEFAULT_ADMIN_KEY

    async def set_admin_key(self, key: str, *, validate: bool = True) -> None:
        if validate and len(key or "") < ADMIN_KEY_MIN_LENGTH:
            raise SettingsError(f"Admin key must be at least {ADMIN_KEY_MIN_LENGTH} characters long.")
        await self._kv.set(ADMIN_KEY_KEY, key)

    async def get_app_logo(self) -> Optional[str]:
        return await self._get_logo(APP_LOGO_KEY)

    async def set_app_logo(self, logo: Optional[str]) -> None:
        await self._set_logo(APP_LOGO_KEY, logo)

    async def get_splash_logo(self) -> Optional[str]:
        return await self._get_logo(SPLASH_LOGO_KEY)

    async def set_splash_logo(self, logo: Optional[str]) -> None:
        await self._set_logo(SPLASH_LOGO_KEY, logo)

    async def export(self) -> dict:
        return {
            "sms": await self.get_sms_settings(),
            "adminKey": await self.get_admin_key(),
            "appLogo": await self.get_app_logo(),
            "splashLogo": await self.get_splash_logo(),
        }

    async def restore(self, values: dict) -> None:
        """Overwrite every setting; keys absent from ``values`` get their defaults."""
        merged = {**default_settings(), **{k: v for k, v in values.items() if v is not None}}
        sms = merged["sms"] if isinstance(merged["sms"], dict) else copy.deepcopy(DEFAULT_SMS_SETTINGS)
        admin_key = merged["adminKey"] if isinstance(merged["adminKey"], str) and merged["adminKey"] else DEFAULT_ADMIN_KEY
        await self.set_sms_settings(sms)
        await self.set_admin_key(admin_key, validate=False)
        await self.set_app_logo(merged["appLogo"])
        await self.set_splash_logo(merged["splashLogo"])

    async def _get_logo(self, key: str) -> Optional[str]:
        value = await self._kv.get(key, None)
        return value if isinstance(value, str) and value else None

    async def _set_logo(self, key: str, logo: Optional[str]) -> None:
        if logo:
            await self._kv.set(key, logo)
        else:
            await self._kv.remove(key)
