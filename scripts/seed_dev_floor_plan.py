#!/usr/bin/env python3
"""Seed script to create a development substation, floor and floor plan."""
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from rackplan.lib.database import AsyncSessionLocal
from rackplan.models.site import Floor, Substation
from rackplan.schemas.floor_plan import FloorPlanCreate
from rackplan.services.floor_plan_service import FloorPlanService


async def seed():
    """Create a development substation with one floor and an empty floor plan."""
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(Substation).where(Substation.code == "DEV-01")
        )
        substation = result.scalar_one_or_none()

        if not substation:
            substation = Substation(name="Dev Substation", code="DEV-01")
            session.add(substation)
            await session.flush()
            print(f"Created substation: {substation.code}")

        result = await session.execute(
            select(Floor).where(
                Floor.substation_id == substation.id,
                Floor.name == "1F",
            )
        )
        floor = result.scalar_one_or_none()

        if not floor:
            floor = Floor(substation_id=substation.id, name="1F", floor_number="1F")
            session.add(floor)
            await session.commit()
            print(f"Created floor: {floor.name} ({floor.id})")

        service = FloorPlanService(session)
        existing = await service.get_by_floor_id(floor.id)
        if existing:
            print(f"Floor plan already exists: {existing.id} (version {existing.version})")
            return

        floor_plan = await service.create_floor_plan(floor.id, FloorPlanCreate(name="1F Server Room"))
        print(f"Created floor plan: {floor_plan.id}")


if __name__ == "__main__":
    asyncio.run(seed())
