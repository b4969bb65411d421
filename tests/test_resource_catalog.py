"""Resource catalog lookups."""

from uuid import uuid4

from slotbook.models import Resource
from slotbook.services.resource_catalog import ResourceCatalog


async def test_get_resource_returns_capacity_and_price(db, make_resource):
    resource = await make_resource(capacity=4, price=2500, name="Studio B")

    found = await ResourceCatalog().get_resource(db, resource.id)

    assert found.name == "Studio B"
    assert found.capacity == 4
    assert found.price == 2500


async def test_unknown_resource_is_none(db):
    catalog = ResourceCatalog()

    assert await catalog.get_resource(db, uuid4()) is None
    assert await catalog.lock_resource(db, uuid4()) is None


async def test_lock_resource_reloads_current_row(db, session_factory, make_resource):
    resource = await make_resource(capacity=2)
    catalog = ResourceCatalog()
    await catalog.get_resource(db, resource.id)

    async with session_factory() as other:
        stored = await other.get(Resource, resource.id)
        stored.capacity = 6
        await other.commit()

    locked = await catalog.lock_resource(db, resource.id)

    assert locked.capacity == 6
