"""Read access to the resource ledger.

Resources are created and edited by the catalog service; the booking engine
only reads capacity and price.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from slotbook.models.resource import Resource


class ResourceCatalog:
    """Lookup of resources by id."""

    async def get_resource(self, db: AsyncSession, resource_id: UUID) -> Resource | None:
        """Load a resource without locking it."""
        result = await db.execute(select(Resource).where(Resource.id == resource_id))
        return result.scalar_one_or_none()

    async def lock_resource(self, db: AsyncSession, resource_id: UUID) -> Resource | None:
        """Load a resource holding an exclusive row lock until the transaction ends.

        Concurrent admissions on the same resource queue here; admissions on
        other resources are unaffected.
        """
        result = await db.execute(
            select(Resource)
            .where(Resource.id == resource_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()


resource_catalog = ResourceCatalog()
