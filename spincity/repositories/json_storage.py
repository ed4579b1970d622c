"""
Local persistence adapter backed by a single JSON file.

The file maps slot keys to JSON-encoded strings, one slot per setting and
one slot per collection (a serialized array), so a damaged slot only
affects its own key. Operations are synchronous; the coroutine signatures
exist so that callers can treat both backends alike.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
from pathlib import Path
from typing import Any, Iterable, List, Optional

from spincity.core.utils import new_record_id, same_id
from spincity.repositories.base import CollectionStore, KeyValueStore

logger = logging.getLogger(__name__)


class LocalFile:
    """Slot map persisted as one JSON object."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                slots = json.load(f)
        except (OSError, ValueError):
            logger.exception("Failed to read local store %s", self.path)
            self._quarantine()
            return {}
        if not isinstance(slots, dict):
            logger.warning("Local store %s is not a JSON object; ignoring it", self.path)
            self._quarantine()
            return {}
        return slots

    def save(self, slots: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(json.dumps(slots, ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(tmp, self.path)

    def read_slot(self, key: str) -> Optional[str]:
        raw = self.load().get(key)
        if raw is None:
            return None
        if not isinstance(raw, str):
            # Slots hold JSON text; anything else was written by hand.
            return json.dumps(raw)
        return raw

    def write_slot(self, key: str, raw: str) -> None:
        slots = self.load()
        slots[key] = raw
        self.save(slots)

    def drop_slot(self, key: str) -> None:
        slots = self.load()
        if key in slots:
            del slots[key]
            self.save(slots)

    def _quarantine(self) -> None:
        backup = self.path.with_name(self.path.name + ".corrupt")
        if backup.exists():
            return
        try:
            shutil.copyfile(self.path, backup)
            logger.warning("Copied unreadable local store to %s", backup)
        except OSError:
            logger.exception("Could not copy unreadable local store %s", self.path)


class LocalKeyValueStore(KeyValueStore):
    def __init__(self, file: LocalFile, prefix: str = "") -> None:
        self._file = file
        self._prefix = prefix

    def _slot(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str, default: Any = None) -> Any:
        slot = self._slot(key)
        try:
            raw = self._file.read_slot(slot)
        except OSError:
            logger.exception("Failed to read %s from local store", slot)
            return default
        if raw is None:
            if default is not None:
                await self.set(key, default)
            return default
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Malformed value under %s; using default", slot)
            return default

    async def set(self, key: str, value: Any) -> None:
        slot = self._slot(key)
        try:
            self._file.write_slot(slot, json.dumps(value, ensure_ascii=False))
        except (OSError, TypeError, ValueError):
            logger.exception("Failed to save %s to local store", slot)

    async def remove(self, key: str) -> None:
        slot = self._slot(key)
        try:
            self._file.drop_slot(slot)
        except OSError:
            logger.exception("Failed to clear %s from local store", slot)


class LocalCollectionStore(CollectionStore):
    """One collection serialized as an array under a single slot."""

    def __init__(self, file: LocalFile, name: str, prefix: str = "") -> None:
        self._file = file
        self.name = name
        self._slot = f"{prefix}{name}"

    def _read(self) -> List[dict]:
        try:
            raw = self._file.read_slot(self._slot)
        except OSError:
            logger.exception("Failed to load %s from local store", self.name)
            return []
        if raw is None:
            return []
        try:
            records = json.loads(raw)
        except ValueError:
            logger.warning("Malformed %s payload in local store; treating as empty", self.name)
            return []
        if not isinstance(records, list):
            logger.warning("Expected a list for %s, got %s; treating as empty", self.name, type(records).__name__)
            return []
        return [dict(r) for r in records if isinstance(r, dict)]

    def _write(self, records: List[dict]) -> bool:
        try:
            self._file.write_slot(self._slot, json.dumps(records, ensure_ascii=False))
            return True
        except (OSError, TypeError, ValueError):
            logger.exception("Failed to save %s to local store", self.name)
            return False

    async def list(self) -> List[dict]:
        return self._read()

    async def create(self, data: dict) -> Optional[dict]:
        record = {**data, "id": new_record_id()}
        records = self._read()
        records.insert(0, record)
        if not self._write(records):
            return None
        return dict(record)

    async def update(self, record: dict) -> None:
        records = self._read()
        for idx, existing in enumerate(records):
            if same_id(existing.get("id"), record.get("id")):
                records[idx] = dict(record)
                self._write(records)
                return
        logger.debug("update ignored: %s has no record %r", self.name, record.get("id"))

    async def delete(self, record_id: Any) -> None:
        records = self._read()
        remaining = [r for r in records if not same_id(r.get("id"), record_id)]
        if len(remaining) != len(records):
            self._write(remaining)

    async def replace_all(self, records: Iterable[dict]) -> None:
        rows = []
        for record in records:
            row = dict(record)
            if row.get("id") in (None, ""):
                row["id"] = new_record_id()
            rows.append(row)
        self._write(rows)
