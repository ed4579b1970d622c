"""Backend selection: build every store once, from configuration."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict

from spincity.core.config import Settings
from spincity.db.create_tables import create_all
from spincity.domain.entities import COLLECTIONS
from spincity.repositories.base import CollectionStore, KeyValueStore
from spincity.repositories.json_storage import LocalCollectionStore, LocalFile, LocalKeyValueStore
from spincity.repositories.sql_repository import DocumentRepository, RemoteCollectionStore, RemoteKeyValueStore

logger = logging.getLogger(__name__)


@dataclass
class Stores:
    kv: KeyValueStore
    collections: Dict[str, CollectionStore] = field(default_factory=dict)
    remote: bool = False

    def collection(self, name: str) -> CollectionStore:
        return self.collections[name]


def build_local_stores(settings: Settings) -> Stores:
    file = LocalFile(settings.local_store_path)
    prefix = settings.key_prefix
    return Stores(
        kv=LocalKeyValueStore(file, prefix=prefix),
        collections={name: LocalCollectionStore(file, name, prefix=prefix) for name in COLLECTIONS},
        remote=False,
    )


def build_remote_stores(settings: Settings, *, create_schema: bool = True) -> Stores:
    if create_schema:
        create_all()
    repo = DocumentRepository()
    return Stores(
        kv=RemoteKeyValueStore(repo),
        collections={name: RemoteCollectionStore(repo, name) for name in COLLECTIONS},
        remote=True,
    )


def build_stores(settings: Settings) -> Stores:
    if settings.remote_enabled:
        logger.info("Using remote document store")
        return build_remote_stores(settings)
    logger.info("Using local store at %s", settings.local_store_path)
    return build_local_stores(settings)
