"""Request dependencies shared by the routers."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from spincity.domain.entities import is_admin
from spincity.services.container import ServiceContainer
from spincity.services.session_service import SessionNotReady, SessionState


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def current_user(container: ServiceContainer = Depends(get_container)) -> dict:
    try:
        return container.session.require_authenticated()
    except SessionNotReady as exc:
        status = 401 if exc.state is SessionState.UNAUTHENTICATED else 409
        raise HTTPException(status, exc.message) from exc


def admin_user(user: dict = Depends(current_user)) -> dict:
    if not is_admin(user):
        raise HTTPException(403, "Admin access required.")
    return user
