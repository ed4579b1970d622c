from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the spincity package importable when running the tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from spincity.core import config as core_config  # noqa: E402
from spincity.core.config import Settings  # noqa: E402
from spincity.db import create_tables  # noqa: E402
from spincity.db import session as db_session  # noqa: E402
from spincity.repositories.factory import build_local_stores, build_remote_stores  # noqa: E402


def make_settings(tmp_path: Path, **overrides) -> Settings:
    values = dict(
        app_env="test",
        database_url="",
        local_store_path=tmp_path / "store.json",
        key_prefix="spincity_",
        default_admin_email="admin@spincity.com",
        reconcile_on_load=True,
        identity_hook_secret="hook-secret",
        log_level="INFO",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def temp_db(tmp_path, monkeypatch):
    """Point DATABASE_URL at a temporary SQLite file and reset the settings and engine caches."""
    db_file = tmp_path / "test.db"
    url = f"sqlite:///{db_file}"
    monkeypatch.setenv("DATABASE_URL", url)
    core_config.get_settings.cache_clear()
    db_session.reset_engine()

    engine = db_session.get_engine()
    create_tables.drop_all(engine)
    create_tables.create_all(engine)

    yield url

    try:
        create_tables.drop_all(engine)
    finally:
        db_session.reset_engine()
        core_config.get_settings.cache_clear()


@pytest.fixture()
def local_settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture()
def local_stores(local_settings):
    return build_local_stores(local_settings)


@pytest.fixture()
def remote_settings(tmp_path, temp_db) -> Settings:
    return make_settings(tmp_path, database_url=temp_db)


@pytest.fixture()
def remote_stores(remote_settings):
    return build_remote_stores(remote_settings, create_schema=False)


@pytest.fixture(params=["local", "remote"])
def stores(request):
    """Run the test once per backend."""
    return request.getfixturevalue(f"{request.param}_stores")
