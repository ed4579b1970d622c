"""Remote document store backed by SQLAlchemy.

DocumentRepository holds the blocking session helpers; the Remote* adapters
run them in a worker thread so the event loop is never blocked.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError

from spincity.db.models import SETTINGS_NAMESPACE, Document
from spincity.db.session import get_session
from spincity.repositories.base import CollectionStore, KeyValueStore

logger = logging.getLogger(__name__)


def _as_record(entity: Document) -> dict:
    data = entity.data if isinstance(entity.data, dict) else {}
    return {**data, "id": entity.doc_id}


def _payload(record: dict) -> dict:
    return {k: v for k, v in record.items() if k != "id"}


class DocumentRepository:
    """CRUD helpers wrapping the SQLAlchemy session."""

    def list_documents(self, namespace: str) -> list[Document]:
        with get_session() as session:
            stmt = select(Document).where(Document.namespace == namespace).order_by(Document.pk.desc())
            return session.execute(stmt).scalars().all()

    def get_document(self, namespace: str, doc_id: str) -> Optional[Document]:
        with get_session() as session:
            stmt = select(Document).where(Document.namespace == namespace, Document.doc_id == doc_id)
            return session.execute(stmt).scalar_one_or_none()

    def insert_document(self, namespace: str, data: dict, doc_id: Optional[str] = None) -> Document:
        entity = Document(namespace=namespace, data=data)
        if doc_id:
            entity.doc_id = doc_id
        with get_session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    def update_document(self, namespace: str, doc_id: str, data: dict) -> bool:
        with get_session() as session:
            stmt = (
                update(Document)
                .where(Document.namespace == namespace, Document.doc_id == doc_id)
                .values(data=data, updated_at=datetime.now(timezone.utc))
            )
            result = session.execute(stmt)
            session.commit()
            return bool(result.rowcount)

    def upsert_document(self, namespace: str, doc_id: str, data: dict) -> None:
        if not self.update_document(namespace, doc_id, data):
            self.insert_document(namespace, data, doc_id=doc_id)

    def delete_document(self, namespace: str, doc_id: str) -> None:
        with get_session() as session:
            session.execute(delete(Document).where(Document.namespace == namespace, Document.doc_id == doc_id))
            session.commit()

    def replace_namespace(self, namespace: str, rows: list[tuple[Optional[str], dict]]) -> None:
        """Swap a namespace's documents in one transaction.

        Rows are inserted last-to-first so that newest-first listing returns
        them in the given order.
        """
        with get_session() as session:
            session.execute(delete(Document).where(Document.namespace == namespace))
            for doc_id, data in reversed(rows):
                entity = Document(namespace=namespace, data=data)
                if doc_id:
                    entity.doc_id = doc_id
                session.add(entity)
            session.commit()


class RemoteKeyValueStore(KeyValueStore):
    """Values live in the settings namespace as ``{"value": ...}`` documents."""

    def __init__(self, repository: DocumentRepository, namespace: str = SETTINGS_NAMESPACE) -> None:
        self._repo = repository
        self._namespace = namespace

    async def get(self, key: str, default: Any = None) -> Any:
        try:
            entity = await asyncio.to_thread(self._repo.get_document, self._namespace, key)
        except SQLAlchemyError:
            logger.exception("Failed to read setting %s", key)
            return default
        if entity is None:
            if default is not None:
                await self.set(key, default)
            return default
        data = entity.data
        if not isinstance(data, dict) or "value" not in data:
            logger.warning("Malformed setting document %s; using default", key)
            return default
        return data["value"]

    async def set(self, key: str, value: Any) -> None:
        try:
            await asyncio.to_thread(self._repo.upsert_document, self._namespace, key, {"value": value})
        except SQLAlchemyError:
            logger.exception("Failed to save setting %s", key)

    async def remove(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._repo.delete_document, self._namespace, key)
        except SQLAlchemyError:
            logger.exception("Failed to remove setting %s", key)


class RemoteCollectionStore(CollectionStore):
    """One document per record; the document id is the record id."""

    def __init__(self, repository: DocumentRepository, name: str) -> None:
        self._repo = repository
        self.name = name

    async def list(self) -> List[dict]:
        try:
            entities = await asyncio.to_thread(self._repo.list_documents, self.name)
        except SQLAlchemyError:
            logger.exception("Failed to fetch %s", self.name)
            return []
        return [_as_record(e) for e in entities]

    async def create(self, data: dict) -> Optional[dict]:
        try:
            entity = await asyncio.to_thread(self._repo.insert_document, self.name, _payload(data))
        except SQLAlchemyError:
            logger.exception("Failed to create %s record", self.name)
            return None
        return _as_record(entity)

    async def update(self, record: dict) -> None:
        doc_id = record.get("id")
        if doc_id in (None, ""):
            return
        try:
            found = await asyncio.to_thread(self._repo.update_document, self.name, str(doc_id), _payload(record))
        except SQLAlchemyError:
            logger.exception("Failed to update %s/%s", self.name, doc_id)
            return
        if not found:
            logger.debug("update ignored: %s has no record %r", self.name, doc_id)

    async def delete(self, record_id: Any) -> None:
        if record_id in (None, ""):
            return
        try:
            await asyncio.to_thread(self._repo.delete_document, self.name, str(record_id))
        except SQLAlchemyError:
            logger.exception("Failed to delete %s/%s", self.name, record_id)

    async def replace_all(self, records: Iterable[dict]) -> None:
        rows = []
        for record in records:
            doc_id = record.get("id")
            rows.append((str(doc_id) if doc_id not in (None, "") else None, _payload(record)))
        try:
            await asyncio.to_thread(self._repo.replace_namespace, self.name, rows)
        except SQLAlchemyError:
            logger.exception("Failed to replace %s", self.name)
