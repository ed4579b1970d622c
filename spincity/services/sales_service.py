"""
Sale mutations and the inventory status they imply.

An inventory item referenced by a sale is "Sold"; once no sale references
it, it goes back to "Available" (never to whatever it was before the sale).
The sale is always written first and the item second. The two writes are
not atomic, so reconcile_inventory() can recompute every status from the
sale set after a crash or a manual edit.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, List, Optional

from spincity.core.utils import same_id
from spincity.domain.entities import STATUS_AVAILABLE, STATUS_SOLD
from spincity.repositories.base import CollectionStore

logger = logging.getLogger(__name__)


def _blank(value: Any) -> bool:
    return value is None or value == ""


class SalesService:
    def __init__(self, sales: CollectionStore, inventory: CollectionStore) -> None:
        self._sales = sales
        self._inventory = inventory

    async def list(self) -> List[dict]:
        return await self._sales.list()

    async def create(self, data: dict) -> Optional[dict]:
        sale = await self._sales.create(data)
        if sale is None:
            return None
        await self._set_item_status(sale.get("itemId"), STATUS_SOLD)
        return sale

    async def update(self, sale: dict) -> None:
        previous = await self._sales.get(sale.get("id"))
        await self._sales.update(sale)
        if previous is None:
            return
        old_item, new_item = previous.get("itemId"), sale.get("itemId")
        if (_blank(old_item) and _blank(new_item)) or same_id(old_item, new_item):
            return
        await self._set_item_status(old_item, STATUS_AVAILABLE)
        await self._set_item_status(new_item, STATUS_SOLD)

    async def delete(self, sale_id: Any) -> None:
        previous = await self._sales.get(sale_id)
        await self._sales.delete(sale_id)
        if previous is not None:
            await self._set_item_status(previous.get("itemId"), STATUS_AVAILABLE)

    async def reconcile_inventory(self) -> List[str]:
        """Recompute item statuses from the current sales. Returns changed item ids."""
        sales = await self._sales.list()
        items = await self._inventory.list()
        refs = Counter(str(s.get("itemId")) for s in sales if not _blank(s.get("itemId")))
        known = {str(item.get("id")) for item in items}

        for item_id, count in refs.items():
            if count > 1:
                logger.warning("Inventory item %s is referenced by %d sales", item_id, count)
            if item_id not in known:
                logger.warning("Sale references missing inventory item %s", item_id)

        changed: List[str] = []
        for item in items:
            item_id = str(item.get("id"))
            status = item.get("status")
            if item_id in refs and status != STATUS_SOLD:
                target = STATUS_SOLD
            elif item_id not in refs and status == STATUS_SOLD:
                target = STATUS_AVAILABLE
            else:
                continue
            await self._inventory.update({**item, "status": target})
            changed.append(item_id)
        if changed:
            logger.info("Reconciled %d inventory item(s): %s", len(changed), ", ".join(changed))
        return changed

    async def _set_item_status(self, item_id: Any, status: str) -> None:
        if _blank(item_id):
            return
        item = await self._inventory.get(item_id)
        if item is None:
            logger.warning("Inventory item %s not found; sale kept without status change", item_id)
            return
        if item.get("status") == status:
            return
        await self._inventory.update({**item, "status": status})
