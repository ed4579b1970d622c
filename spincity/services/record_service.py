"""
CRUD entry point for every collection.

Most collections go straight to their store. A few carry extra rules:
sales keep inventory status in step (SalesService), users hash passwords
(AuthService), vendors get a code (VendorService), contacts get a creation
date and rentals a monthly rate derived from their plan. After each
mutation the signed-in session's copy of the touched collections is
refreshed.
"""

from __future__ import annotations

from typing import Any, List, Optional

from spincity.core.utils import Clock, today_string
from spincity.domain.entities import (
    COLLECTIONS,
    CONTACTS,
    INVENTORY,
    RENTALS,
    SALES,
    USERS,
    VENDORS,
    monthly_rate_for,
    public_user,
)
from spincity.repositories.factory import Stores
from spincity.services.auth_service import AuthService
from spincity.services.sales_service import SalesService
from spincity.services.session_service import SessionBootstrapper
from spincity.services.vendor_service import VendorService


class UnknownCollectionError(KeyError):
    def __init__(self, name: str):
        super().__init__(name)
        self.message = f"Unknown collection: {name}"


class RecordService:
    def __init__(
        self,
        stores: Stores,
        *,
        sales: SalesService,
        auth: AuthService,
        vendors: VendorService,
        session: SessionBootstrapper,
        clock: Optional[Clock] = None,
    ) -> None:
        self._stores = stores
        self._sales = sales
        self._auth = auth
        self._vendors = vendors
        self._session = session
        self._clock = clock

    def _store(self, name: str):
        if name not in COLLECTIONS:
            raise UnknownCollectionError(name)
        return self._stores.collection(name)

    async def list(self, name: str) -> List[dict]:
        records = await self._store(name).list()
        if name == CONTACTS:
            today = today_string(self._clock)
            records = [r if r.get("createdAt") else {**r, "createdAt": today} for r in records]
        return records

    async def create(self, name: str, data: dict) -> Optional[dict]:
        store = self._store(name)
        payload = {k: v for k, v in dict(data).items() if k != "id"}
        if name == SALES:
            record = await self._sales.create(payload)
        elif name == USERS:
            record = await self._auth.create_user(payload)
        elif name == VENDORS:
            record = await self._vendors.create(payload)
        else:
            if name == CONTACTS and not payload.get("createdAt"):
                payload["createdAt"] = today_string(self._clock)
            if name == RENTALS:
                payload = _with_rate(payload)
            record = await store.create(payload)
        await self._refresh(name)
        return record

    async def update(self, name: str, record: dict) -> None:
        store = self._store(name)
        if name == SALES:
            await self._sales.update(record)
        elif name == USERS:
            stored = await self._auth.update_user(record)
            self._session.refresh_user(stored)
        else:
            if name == RENTALS:
                record = _with_rate(record)
            await store.update(record)
        await self._refresh(name)

    async def delete(self, name: str, record_id: Any) -> None:
        store = self._store(name)
        if name == SALES:
            await self._sales.delete(record_id)
        else:
            await store.delete(record_id)
        await self._refresh(name)

    async def _refresh(self, name: str) -> None:
        context = self._session.context
        if not context.authenticated:
            return
        names = (SALES, INVENTORY) if name == SALES else (name,)
        for each in names:
            if each == USERS:
                if USERS in context.data:
                    context.data[USERS] = [public_user(u) for u in await self._stores.collection(USERS).list()]
                continue
            context.data[each] = await self._stores.collection(each).list()


def _with_rate(rental: dict) -> dict:
    rate = monthly_rate_for(rental.get("plan"))
    if rate is None:
        return rental
    return {**rental, "monthlyRate": rate}
