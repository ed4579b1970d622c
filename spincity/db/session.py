"""Engine and session plumbing for the remote document store.

The engine is built lazily from ``Settings.database_url`` and cached.
Point DATABASE_URL elsewhere and call reset_engine() to rebuild it.
"""
from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from spincity.core.config import get_settings

Base = declarative_base()


@lru_cache
def get_engine() -> Engine:
    url = get_settings().database_url
    if not url:
        raise RuntimeError("DATABASE_URL is not set; the remote document store is unavailable.")
    options = {"future": True, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        # store calls run in worker threads
        options["connect_args"] = {"check_same_thread": False}
    return create_engine(url, **options)


@lru_cache
def _get_sessionmaker() -> sessionmaker:
    return sessionmaker(bind=get_engine(), autoflush=False, expire_on_commit=False, future=True)


@contextmanager
def get_session() -> Iterator[Session]:
    session = _get_sessionmaker()()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def reset_engine() -> None:
    """Dispose the cached engine so the next use re-reads the configuration."""
    if get_engine.cache_info().currsize:
        get_engine().dispose()
    get_engine.cache_clear()
    _get_sessionmaker.cache_clear()
