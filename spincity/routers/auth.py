from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from spincity.routers.deps import current_user, get_container
from spincity.services.auth_service import AdminUserMissingError, AuthError
from spincity.services.container import ServiceContainer

router = APIRouter(tags=["auth"])


class LoginRequest(BaseModel):
    email: str
    password: str


class AdminKeyRequest(BaseModel):
    key: str


@router.get("/session")
def session_state(container: ServiceContainer = Depends(get_container)):
    return container.session.context.describe()


@router.get("/session/messages")
def session_messages(container: ServiceContainer = Depends(get_container)):
    return {"messages": container.messages.drain()}


@router.get("/session/data")
def session_data(container: ServiceContainer = Depends(get_container), _: dict = Depends(current_user)):
    context = container.session.context
    return {"data": context.data, "smsSettings": context.sms_settings, "appLogo": context.app_logo}


@router.post("/auth/login")
async def login(payload: LoginRequest, container: ServiceContainer = Depends(get_container)):
    try:
        user = await container.auth.authenticate(payload.email, payload.password)
    except AuthError as exc:
        raise HTTPException(401, exc.message) from exc
    await container.session.login(user)
    return container.session.context.describe()


@router.post("/auth/admin-key")
async def login_with_admin_key(payload: AdminKeyRequest, container: ServiceContainer = Depends(get_container)):
    try:
        user = await container.auth.login_with_admin_key(payload.key)
    except AdminUserMissingError as exc:
        raise HTTPException(404, exc.message) from exc
    except AuthError as exc:
        raise HTTPException(401, exc.message) from exc
    await container.session.login(user)
    return container.session.context.describe()


@router.post("/auth/logout")
async def logout(container: ServiceContainer = Depends(get_container)):
    await container.session.logout()
    return container.session.context.describe()
