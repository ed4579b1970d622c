"""Storage contracts shared by the local and remote adapters.

Both adapters expose coroutine methods so that services never need to know
which backend is active. Reads never raise: missing or malformed data
degrades to the caller's default (or an empty list) and is logged.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Optional

from spincity.core.utils import same_id


class KeyValueStore(ABC):
    """Primitive get/set/remove over named slots."""

    @abstractmethod
    async def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value, seeding ``default`` when the slot is empty.

        Seeding is skipped when ``default`` is None.
        """

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        ...

    @abstractmethod
    async def remove(self, key: str) -> None:
        ...


class CollectionStore(ABC):
    """CRUD over one named collection of plain dict records with an ``id``."""

    name: str

    @abstractmethod
    async def list(self) -> List[dict]:
        ...

    @abstractmethod
    async def create(self, data: dict) -> Optional[dict]:
        """Persist ``data`` under a fresh id and return the stored record.

        Returns None when the write failed (already logged).
        """

    @abstractmethod
    async def update(self, record: dict) -> None:
        """Replace the record with the same id; unknown ids are ignored."""

    @abstractmethod
    async def delete(self, record_id: Any) -> None:
        ...

    @abstractmethod
    async def replace_all(self, records: Iterable[dict]) -> None:
        """Overwrite the whole collection, keeping the ids of the given records."""

    async def get(self, record_id: Any) -> Optional[dict]:
        for record in await self.list():
            if same_id(record.get("id"), record_id):
                return record
        return None
