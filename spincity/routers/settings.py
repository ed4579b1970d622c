from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel

from spincity.routers.deps import admin_user, current_user, get_container
from spincity.services.container import ServiceContainer
from spincity.services.settings_service import SettingsError

router = APIRouter(prefix="/settings", tags=["settings"])


class AdminKeyUpdate(BaseModel):
    key: str


class LogoUpdate(BaseModel):
    logo: Optional[str] = None


@router.get("/sms")
async def get_sms(container: ServiceContainer = Depends(get_container), _: dict = Depends(current_user)):
    return await container.settings_store.get_sms_settings()


@router.put("/sms")
async def put_sms(
    payload: dict = Body(...),
    container: ServiceContainer = Depends(get_container),
    _: dict = Depends(admin_user),
):
    await container.settings_store.set_sms_settings(payload)
    container.session.context.sms_settings = payload
    container.messages.announce("SMS settings saved.")
    return payload


@router.get("/admin-key")
async def get_admin_key(container: ServiceContainer = Depends(get_container), _: dict = Depends(admin_user)):
    return {"key": await container.settings_store.get_admin_key()}


@router.put("/admin-key")
async def put_admin_key(
    payload: AdminKeyUpdate,
    container: ServiceContainer = Depends(get_container),
    _: dict = Depends(admin_user),
):
    try:
        await container.settings_store.set_admin_key(payload.key)
    except SettingsError as exc:
        raise HTTPException(400, exc.message) from exc
    container.messages.announce("Admin Registration Key updated successfully!")
    return {"updated": True}


@router.get("/app-logo")
async def get_app_logo(container: ServiceContainer = Depends(get_container)):
    return {"logo": await container.settings_store.get_app_logo()}


@router.put("/app-logo")
async def put_app_logo(
    payload: LogoUpdate,
    container: ServiceContainer = Depends(get_container),
    _: dict = Depends(admin_user),
):
    await container.settings_store.set_app_logo(payload.logo)
    container.session.context.app_logo = payload.logo or None
    return {"logo": payload.logo or None}


@router.get("/splash-logo")
async def get_splash_logo(container: ServiceContainer = Depends(get_container)):
    return {"logo": await container.settings_store.get_splash_logo()}


@router.put("/splash-logo")
async def put_splash_logo(
    payload: LogoUpdate,
    container: ServiceContainer = Depends(get_container),
    _: dict = Depends(admin_user),
):
    await container.settings_store.set_splash_logo(payload.logo)
    container.session.context.splash_logo = payload.logo or None
    if payload.logo:
        container.messages.announce("Splash screen logo updated successfully!")
    else:
        container.messages.announce("Splash screen logo has been reset to default.")
    return {"logo": payload.logo or None}
