"""
Floor Plan Element Service

Single-element CRUD. ``properties`` is stored as sent; it is never validated
against the element type here.
"""
from typing import List, Tuple
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rackplan.lib.errors import NotFoundError
from rackplan.models.floor_plan import FloorPlan
from rackplan.models.floor_plan_element import FloorPlanElement
from rackplan.schemas.floor_plan_element import ElementCreate, ElementUpdate
from rackplan.services.versioning import bump_version, lock_floor_plan


class ElementService:
    """Service for managing walls, doors, windows, columns and other elements."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_elements(
        self,
        floor_plan_id: UUID,
        include_hidden: bool = True,
    ) -> Tuple[List[FloorPlanElement], int]:
        """
        List elements of a floor plan in paint order (z_index ascending).

        Returns tuple of (elements, total_count).
        """
        floor_plan = await self.db.get(FloorPlan, floor_plan_id)
        if not floor_plan:
            raise NotFoundError("Floor plan", floor_plan_id)

        query = select(FloorPlanElement).where(FloorPlanElement.floor_plan_id == floor_plan_id)
        count_query = select(func.count(FloorPlanElement.id)).where(
            FloorPlanElement.floor_plan_id == floor_plan_id
        )
        if not include_hidden:
            query = query.where(FloorPlanElement.is_visible == True)
            count_query = count_query.where(FloorPlanElement.is_visible == True)

        count_result = await self.db.execute(count_query)
        total = count_result.scalar_one()

        result = await self.db.execute(
            query.order_by(FloorPlanElement.z_index, FloorPlanElement.created_at)
        )
        return list(result.scalars().all()), total

    async def get_element(self, element_id: UUID) -> FloorPlanElement:
        """Get an element by ID or raise NotFoundError."""
        result = await self.db.execute(
            select(FloorPlanElement).where(FloorPlanElement.id == element_id)
        )
        element = result.scalar_one_or_none()
        if not element:
            raise NotFoundError("Floor plan element", element_id)
        return element

    async def create_element(self, floor_plan_id: UUID, data: ElementCreate) -> FloorPlanElement:
        """Create an element on a floor plan."""
        floor_plan = await lock_floor_plan(self.db, floor_plan_id)

        element = FloorPlanElement(
            floor_plan_id=floor_plan_id,
            element_type=data.element_type,
            properties=data.properties,
            z_index=data.z_index if data.z_index is not None else 0,
            is_visible=data.is_visible if data.is_visible is not None else True,
        )
        self.db.add(element)
        bump_version(floor_plan)

        await self.db.commit()
        await self.db.refresh(element)
        return element

    async def update_element(self, element_id: UUID, data: ElementUpdate) -> FloorPlanElement:
        """Update an element. Omitted fields are left untouched."""
        element = await self.get_element(element_id)
        floor_plan = await lock_floor_plan(self.db, element.floor_plan_id)

        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in update_data.items():
            setattr(element, field, value)
        bump_version(floor_plan)

        await self.db.commit()
        await self.db.refresh(element)
        return element

    async def delete_element(self, element_id: UUID) -> None:
        """Delete an element permanently."""
        element = await self.get_element(element_id)
        floor_plan = await lock_floor_plan(self.db, element.floor_plan_id)

        await self.db.delete(element)
        bump_version(floor_plan)
        await self.db.commit()
