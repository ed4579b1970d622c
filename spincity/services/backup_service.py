"""
Whole-dataset backup and restore.

The snapshot is one UTF-8 JSON document:

    {"version": 1, "users": [...], "contacts": [...], "rentals": [...],
     "repairs": [...], "inventory": [...], "sales": [...], "vendors": [...],
     "settings": {"sms": {...}, "adminKey": "...", "appLogo": ..., "splashLogo": ...}}

Restore checks the structure before it writes anything. The writes
themselves are not transactional across collections; once validation
passes every collection and setting is overwritten, and the caller must
reload the session.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from spincity.domain.entities import COLLECTIONS, CONTACTS, USERS
from spincity.repositories.factory import Stores
from spincity.services.settings_service import SettingsStore

logger = logging.getLogger(__name__)

BACKUP_VERSION = 1
REQUIRED_KEYS = (USERS, CONTACTS, "settings")


@dataclass
class RestoreResult:
    success: bool
    message: str


class BackupService:
    def __init__(self, stores: Stores, settings_store: SettingsStore) -> None:
        self._stores = stores
        self._settings = settings_store

    async def snapshot(self) -> dict:
        payload: dict = {"version": BACKUP_VERSION}
        for name in COLLECTIONS:
            payload[name] = await self._stores.collection(name).list()
        payload["settings"] = await self._settings.export()
        return payload

    async def export_backup(self) -> str:
        return json.dumps(await self.snapshot(), ensure_ascii=False, indent=2, sort_keys=True)

    async def import_backup(self, text: str | bytes) -> RestoreResult:
        try:
            payload = json.loads(text)
        except (TypeError, ValueError) as exc:
            logger.warning("Rejected backup: not valid JSON (%s)", exc)
            return RestoreResult(False, f"Backup file is not valid JSON: {exc}")

        problem = validate_snapshot(payload)
        if problem:
            logger.warning("Rejected backup: %s", problem)
            return RestoreResult(False, problem)

        for name in COLLECTIONS:
            await self._stores.collection(name).replace_all(payload.get(name) or [])
        await self._settings.restore(payload.get("settings") or {})
        counts = ", ".join(f"{len(payload.get(name) or [])} {name}" for name in COLLECTIONS)
        logger.info("Backup restored: %s", counts)
        return RestoreResult(True, f"Backup restored successfully ({counts}). Reload to see the restored data.")


def validate_snapshot(payload) -> str | None:
    """Return a human-readable problem, or None when the snapshot is acceptable."""
    if not isinstance(payload, dict):
        return "Backup must be a JSON object."
    missing = [key for key in REQUIRED_KEYS if key not in payload]
    if missing:
        return f"Backup is missing required section(s): {', '.join(missing)}."
    for name in COLLECTIONS:
        value = payload.get(name)
        if value is None:
            continue
        if not isinstance(value, list) or not all(isinstance(item, dict) for item in value):
            return f"Backup section '{name}' must be a list of records."
    if not isinstance(payload["settings"], dict):
        return "Backup section 'settings' must be an object."
    version = payload.get("version", BACKUP_VERSION)
    if isinstance(version, int) and version > BACKUP_VERSION:
        return f"Backup version {version} is newer than this application supports ({BACKUP_VERSION})."
    return None
