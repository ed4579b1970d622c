from __future__ import annotations

import asyncio

from spincity.domain.entities import INVENTORY, SALES, STATUS_AVAILABLE, STATUS_IN_REPAIR, STATUS_SOLD
from spincity.services.sales_service import SalesService


def _service(stores) -> SalesService:
    return SalesService(stores.collection(SALES), stores.collection(INVENTORY))


async def _status(stores, item_id):
    item = await stores.collection(INVENTORY).get(item_id)
    return item["status"]


def test_sale_lifecycle_moves_item_statuses(stores):
    svc = _service(stores)
    inventory = stores.collection(INVENTORY)

    async def scenario():
        i1 = await inventory.create({"name": "Washer", "status": STATUS_AVAILABLE})
        i2 = await inventory.create({"name": "Dryer", "status": STATUS_AVAILABLE})
        sale = await svc.create({"itemId": i1["id"], "amount": 300})
        after_create = (await _status(stores, i1["id"]), await _status(stores, i2["id"]))

        await svc.update({**sale, "itemId": i2["id"]})
        after_retarget = (await _status(stores, i1["id"]), await _status(stores, i2["id"]))

        await svc.delete(sale["id"])
        after_delete = (await _status(stores, i1["id"]), await _status(stores, i2["id"]))
        return after_create, after_retarget, after_delete

    after_create, after_retarget, after_delete = asyncio.run(scenario())
    assert after_create == (STATUS_SOLD, STATUS_AVAILABLE)
    assert after_retarget == (STATUS_AVAILABLE, STATUS_SOLD)
    assert after_delete == (STATUS_AVAILABLE, STATUS_AVAILABLE)


def test_update_without_item_change_leaves_statuses(stores):
    svc = _service(stores)
    inventory = stores.collection(INVENTORY)

    async def scenario():
        item = await inventory.create({"name": "Washer", "status": STATUS_AVAILABLE})
        sale = await svc.create({"itemId": item["id"], "amount": 300})
        # someone marks the item for repair by hand; a price edit must not undo it
        await inventory.update({**(await inventory.get(item["id"])), "status": STATUS_IN_REPAIR})
        await svc.update({**sale, "amount": 250})
        return await _status(stores, item["id"]), (await stores.collection(SALES).get(sale["id"]))["amount"]

    assert asyncio.run(scenario()) == (STATUS_IN_REPAIR, 250)


def test_delete_reverts_to_available_whatever_the_prior_status(stores):
    svc = _service(stores)
    inventory = stores.collection(INVENTORY)

    async def scenario():
        item = await inventory.create({"name": "Washer", "status": STATUS_IN_REPAIR})
        sale = await svc.create({"itemId": item["id"]})
        await inventory.update({**(await inventory.get(item["id"])), "status": STATUS_IN_REPAIR})
        await svc.delete(sale["id"])
        return await _status(stores, item["id"])

    assert asyncio.run(scenario()) == STATUS_AVAILABLE


def test_sale_for_missing_item_is_kept(stores):
    svc = _service(stores)

    async def scenario():
        sale = await svc.create({"itemId": "missing", "amount": 10})
        return sale, await stores.collection(SALES).list()

    sale, sales = asyncio.run(scenario())
    assert sale is not None
    assert [s["id"] for s in sales] == [sale["id"]]
    assert asyncio.run(stores.collection(INVENTORY).list()) == []


def test_update_of_unknown_sale_touches_nothing(stores):
    svc = _service(stores)
    inventory = stores.collection(INVENTORY)

    async def scenario():
        item = await inventory.create({"name": "Washer", "status": STATUS_AVAILABLE})
        await svc.update({"id": "nope", "itemId": item["id"]})
        return await _status(stores, item["id"]), await stores.collection(SALES).list()

    assert asyncio.run(scenario()) == (STATUS_AVAILABLE, [])


def test_reconcile_repairs_drifted_statuses(stores):
    svc = _service(stores)
    inventory = stores.collection(INVENTORY)
    sales = stores.collection(SALES)

    async def scenario():
        await inventory.replace_all(
            [
                {"id": "i1", "name": "Sold but unmarked", "status": STATUS_AVAILABLE},
                {"id": "i2", "name": "Marked but unsold", "status": STATUS_SOLD},
                {"id": "i3", "name": "In repair", "status": STATUS_IN_REPAIR},
            ]
        )
        # written directly, as an interrupted sale would leave them
        await sales.replace_all([{"id": "s1", "itemId": "i1"}, {"id": "s2", "itemId": "ghost"}])
        changed = await svc.reconcile_inventory()
        statuses = {i["id"]: i["status"] for i in await inventory.list()}
        again = await svc.reconcile_inventory()
        return changed, statuses, again

    changed, statuses, again = asyncio.run(scenario())
    assert sorted(changed) == ["i1", "i2"]
    assert statuses == {"i1": STATUS_SOLD, "i2": STATUS_AVAILABLE, "i3": STATUS_IN_REPAIR}
    assert again == []
