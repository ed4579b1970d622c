"""
Vendor records and their link to inventory.

Inventory items historically name their vendor (``vendor``) instead of
pointing at the vendor record, so renaming a vendor detaches its items.
Items now carry ``vendorRef`` (the vendor record id); link_inventory_vendors()
fills it once from the legacy name, and joins prefer it over the name.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from spincity.core.utils import same_id
from spincity.domain.entities import VENDOR_CODE_FLOOR, VENDOR_CODE_PREFIX, vendor_code_number
from spincity.repositories.base import CollectionStore

logger = logging.getLogger(__name__)


def next_vendor_code(vendors: List[dict]) -> str:
    highest = VENDOR_CODE_FLOOR
    for vendor in vendors:
        number = vendor_code_number(vendor.get("vendorId"))
        if number is not None and number > highest:
            highest = number
    return f"{VENDOR_CODE_PREFIX}{highest + 1}"


def vendor_for_item(item: dict, vendors: List[dict]) -> Optional[dict]:
    ref = item.get("vendorRef")
    if ref not in (None, ""):
        for vendor in vendors:
            if same_id(vendor.get("id"), ref):
                return vendor
    name = item.get("vendor")
    if name:
        for vendor in vendors:
            if vendor.get("vendorName") == name:
                return vendor
    return None


class VendorService:
    def __init__(self, vendors: CollectionStore, inventory: CollectionStore) -> None:
        self._vendors = vendors
        self._inventory = inventory

    async def create(self, data: dict) -> Optional[dict]:
        payload = dict(data)
        if not payload.get("vendorId"):
            payload["vendorId"] = next_vendor_code(await self._vendors.list())
        return await self._vendors.create(payload)

    async def items_per_vendor(self) -> Dict[str, int]:
        """Count inventory items per vendor record id; unmatched items are skipped."""
        vendors = await self._vendors.list()
        counts: Dict[str, int] = {str(v.get("id")): 0 for v in vendors}
        for item in await self._inventory.list():
            vendor = vendor_for_item(item, vendors)
            if vendor is not None:
                counts[str(vendor.get("id"))] += 1
        return counts

    async def link_inventory_vendors(self) -> int:
        """Fill ``vendorRef`` on items that only name their vendor. Returns items linked."""
        vendors = await self._vendors.list()
        by_name = {v.get("vendorName"): v for v in vendors if v.get("vendorName")}
        linked = 0
        unmatched = set()
        for item in await self._inventory.list():
            if item.get("vendorRef") not in (None, ""):
                continue
            vendor = by_name.get(item.get("vendor"))
            if vendor is None:
                if item.get("vendor"):
                    unmatched.add(item["vendor"])
                continue
            await self._inventory.update({**item, "vendorRef": vendor.get("id")})
            linked += 1
        if unmatched:
            logger.warning("No vendor record for: %s", ", ".join(sorted(unmatched)))
        logger.info("Linked %d inventory item(s) to vendor records", linked)
        return linked
