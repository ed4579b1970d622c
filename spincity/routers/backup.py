from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from spincity.core.utils import today_string
from spincity.routers.deps import admin_user, get_container
from spincity.services.container import ServiceContainer

router = APIRouter(prefix="/backup", tags=["backup"])


@router.get("")
async def export_backup(container: ServiceContainer = Depends(get_container), _: dict = Depends(admin_user)):
    text = await container.backup.export_backup()
    filename = f"spincity_backup_{today_string()}.json"
    return Response(
        content=text.encode("utf-8"),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("")
async def import_backup(
    request: Request,
    container: ServiceContainer = Depends(get_container),
    _: dict = Depends(admin_user),
):
    body = await request.body()
    result = await container.backup.import_backup(body)
    container.messages.announce(result.message)
    if result.success:
        # The restored snapshot replaces everything the session had loaded.
        await container.session.reload()
    return JSONResponse(asdict(result), status_code=200 if result.success else 400)
