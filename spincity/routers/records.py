from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, Header, HTTPException

from spincity.domain.entities import INVENTORY, USERS, VENDORS, is_admin, public_user
from spincity.routers.deps import current_user, get_container
from spincity.services.auth_service import AuthError
from spincity.services.container import ServiceContainer
from spincity.services.record_service import UnknownCollectionError

router = APIRouter(prefix="/records", tags=["records"])

# Deleting from these collections asks for the admin key again.
ADMIN_KEY_DELETES = {USERS, VENDORS, INVENTORY}


def _guard(collection: str, user: dict) -> None:
    if collection == USERS and not is_admin(user):
        raise HTTPException(403, "Admin access required.")


def _shape(collection: str, record: Optional[dict]) -> Optional[dict]:
    return public_user(record) if collection == USERS else record


@router.get("/{collection}")
async def list_records(
    collection: str,
    container: ServiceContainer = Depends(get_container),
    user: dict = Depends(current_user),
):
    _guard(collection, user)
    try:
        records = await container.records.list(collection)
    except UnknownCollectionError as exc:
        raise HTTPException(404, exc.message) from exc
    return [_shape(collection, r) for r in records]


@router.post("/{collection}", status_code=201)
async def create_record(
    collection: str,
    payload: dict = Body(...),
    container: ServiceContainer = Depends(get_container),
    user: dict = Depends(current_user),
):
    _guard(collection, user)
    try:
        record = await container.records.create(collection, payload)
    except UnknownCollectionError as exc:
        raise HTTPException(404, exc.message) from exc
    if record is None:
        raise HTTPException(503, "The record could not be saved. Try again.")
    return _shape(collection, record)


@router.put("/{collection}/{record_id}")
async def update_record(
    collection: str,
    record_id: str,
    payload: dict = Body(...),
    container: ServiceContainer = Depends(get_container),
    user: dict = Depends(current_user),
):
    _guard(collection, user)
    existing = None
    try:
        for record in await container.records.list(collection):
            if str(record.get("id")) == record_id:
                existing = record
                break
    except UnknownCollectionError as exc:
        raise HTTPException(404, exc.message) from exc
    if existing is None:
        # Stores ignore unknown ids; report it rather than pretending it worked.
        return {"updated": False}
    await container.records.update(collection, {**payload, "id": existing["id"]})
    return {"updated": True}


@router.delete("/{collection}/{record_id}")
async def delete_record(
    collection: str,
    record_id: str,
    container: ServiceContainer = Depends(get_container),
    user: dict = Depends(current_user),
    x_admin_key: str = Header(""),
):
    _guard(collection, user)
    if collection in ADMIN_KEY_DELETES:
        try:
            await container.auth.require_admin_key(x_admin_key)
        except AuthError as exc:
            raise HTTPException(403, exc.message) from exc
    try:
        records = await container.records.list(collection)
    except UnknownCollectionError as exc:
        raise HTTPException(404, exc.message) from exc
    match = next((r for r in records if str(r.get("id")) == record_id), None)
    await container.records.delete(collection, match["id"] if match else record_id)
    return {"deleted": match is not None}
