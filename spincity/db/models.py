"""SQLAlchemy model for the document store.

Every record lives in one row: the namespace is the collection name (or
"settings" for singleton values) and the payload is a JSON document.
"""
from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, Integer, JSON, String, UniqueConstraint, func

from .session import Base

SETTINGS_NAMESPACE = "settings"


def _new_doc_id() -> str:
    return uuid.uuid4().hex


class Document(Base):
    __tablename__ = "documents"
    __table_args__ = (UniqueConstraint("namespace", "doc_id", name="uq_documents_namespace_doc"),)

    pk = Column(Integer, primary_key=True, autoincrement=True)
    namespace = Column(String(64), nullable=False, index=True)
    doc_id = Column(String(64), nullable=False, default=_new_doc_id)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
