from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from spincity.routers.deps import current_user, get_container
from spincity.services.container import ServiceContainer
from spincity.services.report_service import ReportError

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/{period}")
async def activity(period: str, container: ServiceContainer = Depends(get_container), _: dict = Depends(current_user)):
    try:
        return await container.reports.activity(period)
    except ReportError as exc:
        raise HTTPException(404, str(exc)) from exc


@router.get("/{period}/csv", response_class=PlainTextResponse)
async def activity_csv(period: str, container: ServiceContainer = Depends(get_container), _: dict = Depends(current_user)):
    try:
        filename, text = await container.reports.activity_csv(period)
    except ReportError as exc:
        raise HTTPException(404, str(exc)) from exc
    return PlainTextResponse(
        text,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
