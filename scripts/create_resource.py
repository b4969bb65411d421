#!/usr/bin/env python3
"""Create or update a bookable resource."""

import asyncio

from sqlalchemy import select

from slotbook.database import get_db_context
from slotbook.models.resource import Resource


async def create_resource(
    name: str,
    capacity: int = 1,
    price: int = 0,
    location: str | None = None,
    description: str | None = None,
) -> None:
    """Create a resource, or update the one with the same name."""
    async with get_db_context() as session:
        result = await session.execute(select(Resource).where(Resource.name == name))
        resource = result.scalar_one_or_none()

        if resource:
            resource.capacity = capacity
            resource.price = price
            resource.location = location
            resource.description = description
            print(f"Updated existing resource: {name}")
        else:
            resource = Resource(
                name=name,
                capacity=capacity,
                price=price,
                location=location,
                description=description,
            )
            session.add(resource)
            print(f"Created resource: {name}")

        await session.flush()
        print(f"ID: {resource.id}")
        print(f"Capacity: {capacity}")
        print(f"Price per hour: {price}")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Create a bookable resource")
    parser.add_argument("--name", required=True, help="Resource name")
    parser.add_argument("--capacity", type=int, default=1, help="Concurrent slots")
    parser.add_argument("--price", type=int, default=0, help="Price per started hour")
    parser.add_argument("--location", default=None, help="Location")
    parser.add_argument("--description", default=None, help="Description")

    args = parser.parse_args()

    asyncio.run(
        create_resource(
            name=args.name,
            capacity=args.capacity,
            price=args.price,
            location=args.location,
            description=args.description,
        )
    )
