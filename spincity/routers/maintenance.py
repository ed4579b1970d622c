from __future__ import annotations

from fastapi import APIRouter, Depends

from spincity.routers.deps import admin_user, current_user, get_container
from spincity.services.container import ServiceContainer

router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@router.post("/reconcile")
async def reconcile_inventory(container: ServiceContainer = Depends(get_container), _: dict = Depends(admin_user)):
    changed = await container.sales.reconcile_inventory()
    await container.session.reload()
    return {"changed": changed}


@router.post("/link-vendors")
async def link_vendors(container: ServiceContainer = Depends(get_container), _: dict = Depends(admin_user)):
    linked = await container.vendors.link_inventory_vendors()
    await container.session.reload()
    return {"linked": linked}


@router.get("/vendor-items")
async def vendor_items(container: ServiceContainer = Depends(get_container), _: dict = Depends(current_user)):
    return await container.vendors.items_per_vendor()
