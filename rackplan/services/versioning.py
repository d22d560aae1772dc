"""
Floor plan row locking and version bumps shared by every service that
mutates a plan's elements, racks or settings.
"""
import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rackplan.lib.errors import NotFoundError
from rackplan.models.floor_plan import FloorPlan

logger = logging.getLogger(__name__)


async def lock_floor_plan(db: AsyncSession, floor_plan_id: UUID) -> FloorPlan:
    """
    Load a floor plan with ``SELECT ... FOR UPDATE``.

    Writers on the same plan serialize behind this lock until they commit or
    roll back. Dialects without row locks (SQLite) ignore the clause.
    """
    result = await db.execute(
        select(FloorPlan)
        .where(FloorPlan.id == floor_plan_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    floor_plan = result.scalar_one_or_none()
    if not floor_plan:
        raise NotFoundError("Floor plan", floor_plan_id)
    return floor_plan


def bump_version(floor_plan: FloorPlan) -> int:
    """Increment the plan version once. Caller holds the row lock and commits."""
    floor_plan.version = (floor_plan.version or 0) + 1
    logger.debug("Floor plan %s -> version %s", floor_plan.id, floor_plan.version)
    return floor_plan.version
