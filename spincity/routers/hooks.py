from __future__ import annotations

import secrets
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel

from spincity.core.identity import Identity
from spincity.routers.deps import get_container
from spincity.services.container import ServiceContainer

router = APIRouter(prefix="/hooks", tags=["hooks"])


class IdentityEvent(BaseModel):
    email: Optional[str] = None
    displayName: str = ""


@router.post("/identity")
async def identity_changed(
    payload: IdentityEvent,
    container: ServiceContainer = Depends(get_container),
    x_hook_secret: str = Header(""),
):
    expected = container.settings.identity_hook_secret
    if not expected or not secrets.compare_digest(x_hook_secret.encode(), expected.encode()):
        raise HTTPException(403, "Invalid hook secret")
    if not container.session.uses_remote_identity:
        raise HTTPException(409, "Remote identity is not active")
    email = (payload.email or "").strip()
    await container.identity.publish(Identity(email=email, display_name=payload.displayName) if email else None)
    return {"ok": True, "state": container.session.context.state.value}
