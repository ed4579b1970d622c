from __future__ import annotations

import asyncio
import json

import pytest

from spincity.domain.entities import COLLECTIONS, CONTACTS, INVENTORY, SALES, USERS
from spincity.services.backup_service import BACKUP_VERSION, BackupService, validate_snapshot
from spincity.services.settings_service import SettingsStore


async def _seed(stores, settings_store):
    await stores.collection(USERS).create({"name": "Admin User", "email": "admin@spincity.com", "role": "Admin"})
    await stores.collection(CONTACTS).create({"name": "Ama", "createdAt": "2024-05-01"})
    item = await stores.collection(INVENTORY).create({"name": "Washer", "status": "Sold"})
    await stores.collection(SALES).create({"itemId": item["id"], "amount": 300})
    await settings_store.set_admin_key("s3cret")
    await settings_store.set_app_logo("data:image/png;base64,AAAA")


async def _state(stores, settings_store):
    state = {name: await stores.collection(name).list() for name in COLLECTIONS}
    state["settings"] = await settings_store.export()
    return state


def _sorted(state):
    return {
        key: sorted(value, key=lambda r: str(r["id"])) if isinstance(value, list) else value
        for key, value in state.items()
    }


def test_export_import_round_trip_is_a_no_op(stores):
    settings_store = SettingsStore(stores.kv)
    svc = BackupService(stores, settings_store)

    async def scenario():
        await _seed(stores, settings_store)
        before = await _state(stores, settings_store)
        result = await svc.import_backup(await svc.export_backup())
        return before, result, await _state(stores, settings_store)

    before, result, after = asyncio.run(scenario())
    assert result.success, result.message
    assert _sorted(after) == _sorted(before)


def test_export_document_shape(stores):
    settings_store = SettingsStore(stores.kv)
    svc = BackupService(stores, settings_store)

    async def scenario():
        await _seed(stores, settings_store)
        return await svc.export_backup()

    text = asyncio.run(scenario())
    payload = json.loads(text)
    assert payload["version"] == BACKUP_VERSION
    assert set(payload) == set(COLLECTIONS) | {"version", "settings"}
    assert payload["settings"]["adminKey"] == "s3cret"
    assert payload["settings"]["appLogo"] == "data:image/png;base64,AAAA"
    assert payload["settings"]["splashLogo"] is None
    assert text.startswith('{\n  "contacts"')


@pytest.mark.parametrize("missing", [USERS, CONTACTS, "settings"])
def test_restore_rejects_missing_sections_without_writing(stores, missing):
    settings_store = SettingsStore(stores.kv)
    svc = BackupService(stores, settings_store)

    async def scenario():
        await _seed(stores, settings_store)
        before = await _state(stores, settings_store)
        payload = {name: [] for name in COLLECTIONS}
        payload["settings"] = {"adminKey": "other"}
        del payload[missing]
        result = await svc.import_backup(json.dumps(payload))
        return before, result, await _state(stores, settings_store)

    before, result, after = asyncio.run(scenario())
    assert result.success is False
    assert missing in result.message
    assert after == before


def test_restore_rejects_invalid_json(local_stores):
    svc = BackupService(local_stores, SettingsStore(local_stores.kv))
    result = asyncio.run(svc.import_backup("{not json"))
    assert result.success is False
    assert "not valid JSON" in result.message


def test_restore_fills_absent_settings_and_collections_with_defaults(local_stores):
    settings_store = SettingsStore(local_stores.kv)
    svc = BackupService(local_stores, settings_store)

    async def scenario():
        await _seed(local_stores, settings_store)
        payload = {"users": [{"id": "u1", "name": "Only"}], "contacts": [], "settings": {}}
        result = await svc.import_backup(json.dumps(payload))
        return result, await _state(local_stores, settings_store)

    result, state = asyncio.run(scenario())
    assert result.success
    assert state[USERS] == [{"id": "u1", "name": "Only"}]
    assert state[SALES] == []
    assert state[INVENTORY] == []
    assert state["settings"]["adminKey"] == "admin"
    assert state["settings"]["appLogo"] is None
    assert state["settings"]["sms"]["domain"] == "smsonlinegh.com"


@pytest.mark.parametrize(
    "payload, fragment",
    [
        ([], "JSON object"),
        ({"users": {}, "contacts": [], "settings": {}}, "'users'"),
        ({"users": [], "contacts": [1, 2], "settings": {}}, "'contacts'"),
        ({"users": [], "contacts": [], "settings": []}, "'settings'"),
        ({"users": [], "contacts": [], "settings": {}, "version": BACKUP_VERSION + 1}, "newer"),
    ],
)
def test_validate_snapshot_problems(payload, fragment):
    assert fragment in validate_snapshot(payload)


def test_validate_snapshot_accepts_versionless_backups():
    assert validate_snapshot({"users": [], "contacts": [], "settings": {}}) is None
