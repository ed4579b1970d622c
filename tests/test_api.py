from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from spincity.app import create_app
from spincity.services.container import build_container


@pytest.fixture()
def client(local_settings, local_stores):
    app = create_app(local_settings, container=build_container(local_settings, stores=local_stores))
    with TestClient(app) as client:
        yield client


def _login(client, email="admin@spincity.com", password="admin"):
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()


def test_session_starts_signed_out_with_security_headers(client):
    resp = client.get("/session")
    assert resp.status_code == 200
    assert resp.json()["state"] == "Unauthenticated"
    assert resp.headers["X-Frame-Options"] == "DENY"
    assert client.get("/records/contacts").status_code == 401


def test_login_and_logout(client):
    body = _login(client)
    assert body["state"] == "Authenticated"
    assert "password" not in body["user"]

    assert client.post("/auth/login", json={"email": "admin@spincity.com", "password": "x"}).status_code == 401
    assert client.post("/auth/logout").json()["state"] == "Unauthenticated"


def test_admin_key_login(client):
    assert client.post("/auth/admin-key", json={"key": "nope"}).status_code == 401
    resp = client.post("/auth/admin-key", json={"key": "admin"})
    assert resp.status_code == 200
    assert resp.json()["user"]["email"] == "admin@spincity.com"


def test_sale_endpoints_keep_inventory_in_step(client):
    _login(client)
    item = client.post("/records/inventory", json={"name": "Washer", "status": "Available"}).json()
    other = client.post("/records/inventory", json={"name": "Dryer", "status": "Available"}).json()

    sale = client.post("/records/sales", json={"itemId": item["id"], "amount": 300})
    assert sale.status_code == 201
    sale = sale.json()

    def statuses():
        return {i["id"]: i["status"] for i in client.get("/records/inventory").json()}

    assert statuses() == {item["id"]: "Sold", other["id"]: "Available"}

    resp = client.put(f"/records/sales/{sale['id']}", json={**sale, "itemId": other["id"]})
    assert resp.json() == {"updated": True}
    assert statuses() == {item["id"]: "Available", other["id"]: "Sold"}

    assert client.delete(f"/records/sales/{sale['id']}").json() == {"deleted": True}
    assert statuses() == {item["id"]: "Available", other["id"]: "Available"}
    assert client.get("/session/data").json()["data"]["sales"] == []


def test_update_of_unknown_record_is_reported(client):
    _login(client)
    resp = client.put("/records/contacts/missing", json={"name": "Ghost"})
    assert resp.json() == {"updated": False}
    assert client.get("/records/contacts").json() == []


def test_protected_deletes_need_the_admin_key(client):
    _login(client)
    item = client.post("/records/inventory", json={"name": "Washer"}).json()

    assert client.delete(f"/records/inventory/{item['id']}").status_code == 403
    assert client.delete(f"/records/inventory/{item['id']}", headers={"X-Admin-Key": "wrong"}).status_code == 403
    resp = client.delete(f"/records/inventory/{item['id']}", headers={"X-Admin-Key": "admin"})
    assert resp.json() == {"deleted": True}


def test_user_records_hide_passwords_and_require_admin(client):
    _login(client)
    created = client.post(
        "/records/users", json={"name": "Staff", "email": "staff@x.com", "password": "pw1234", "role": "User"}
    )
    assert created.status_code == 201
    assert "password" not in created.json()
    assert all("password" not in u for u in client.get("/records/users").json())

    _login(client, "staff@x.com", "pw1234")
    assert client.get("/records/users").status_code == 403
    assert client.get("/backup").status_code == 403
    assert client.get("/records/payments").status_code == 404


def test_backup_download_and_rejected_restore(client):
    _login(client)
    client.post("/records/contacts", json={"name": "Ama"})

    resp = client.get("/backup")
    assert resp.status_code == 200
    assert resp.headers["content-disposition"].startswith('attachment; filename="spincity_backup_')
    snapshot = resp.json()
    assert [c["name"] for c in snapshot["contacts"]] == ["Ama"]

    broken = {k: v for k, v in snapshot.items() if k != "users"}
    resp = client.post("/backup", content=json.dumps(broken))
    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert [c["name"] for c in client.get("/records/contacts").json()] == ["Ama"]
    assert client.get("/session/messages").json()["messages"][-1] == resp.json()["message"]


def test_backup_restore_replaces_data(client):
    _login(client)
    snapshot = client.get("/backup").json()
    client.post("/records/contacts", json={"name": "Added later"})

    resp = client.post("/backup", content=json.dumps(snapshot))
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert client.get("/records/contacts").json() == []
    assert client.get("/session").json()["state"] == "Authenticated"


def test_settings_endpoints(client):
    assert client.get("/settings/splash-logo").json() == {"logo": None}
    _login(client)
    assert client.put("/settings/admin-key", json={"key": "abc"}).status_code == 400
    assert client.put("/settings/admin-key", json={"key": "n3w-key"}).json() == {"updated": True}
    assert client.get("/settings/admin-key").json() == {"key": "n3w-key"}
    client.put("/settings/splash-logo", json={"logo": "splash.png"})
    assert client.get("/session").json()["splashLogo"] == "splash.png"
    assert client.get("/settings/sms").json()["port"] == "443"


def test_reports_endpoints(client):
    _login(client)
    assert client.get("/reports/daily").json()["period"] == "daily"
    resp = client.get("/reports/yearly/csv")
    assert resp.status_code == 200
    assert resp.text.startswith("Metric,Value")
    assert client.get("/reports/weekly").status_code == 404


def test_identity_hook_refused_for_local_backend(client):
    resp = client.post("/hooks/identity", json={"email": "a@b.c"}, headers={"X-Hook-Secret": "hook-secret"})
    assert resp.status_code == 409
    assert client.post("/hooks/identity", json={"email": "a@b.c"}).status_code == 403


def test_identity_hook_signs_in_remote_user(remote_settings, remote_stores):
    app = create_app(remote_settings, container=build_container(remote_settings, stores=remote_stores))
    headers = {"X-Hook-Secret": "hook-secret"}
    with TestClient(app) as client:
        resp = client.post("/hooks/identity", json={"email": "ADMIN@spincity.com"}, headers=headers)
        assert resp.json() == {"ok": True, "state": "Authenticated"}
        assert client.get("/session").json()["user"]["email"] == "admin@spincity.com"

        resp = client.post("/hooks/identity", json={"email": None}, headers=headers)
        assert resp.json()["state"] == "Unauthenticated"
