"""
Floor Plan Service

Floor plan CRUD and the bulk save used by the editor. A bulk save applies
element and rack deletes, upserts and plan settings as one unit of work and
bumps the plan version exactly once.
"""
import logging
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from rackplan.lib.config import settings
from rackplan.lib.errors import ConflictError, NotFoundError
from rackplan.models.floor_plan import FloorPlan
from rackplan.models.floor_plan_element import FloorPlanElement
from rackplan.models.rack import Rack
from rackplan.models.site import Floor
from rackplan.schemas.floor_plan import (
    BulkUpdateRequest,
    BulkUpdateResponse,
    ElementEdit,
    FloorPlanCreate,
    FloorPlanDetailResponse,
    FloorPlanResponse,
    RackEdit,
)
from rackplan.schemas.floor_plan_element import ElementResponse
from rackplan.services.rack_service import RackService
from rackplan.services.versioning import bump_version, lock_floor_plan

logger = logging.getLogger(__name__)

# Parking name for racks whose name moves within one batch
RENAME_PLACEHOLDER = "~renaming~"


class FloorPlanService:
    """Service for floor plans and their bulk saves."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.racks = RackService(db)

    # ============================================
    # HELPER METHODS
    # ============================================

    async def get_floor(self, floor_id: UUID) -> Floor:
        """Get floor or raise NotFoundError."""
        result = await self.db.execute(
            select(Floor).where(Floor.id == floor_id)
        )
        floor = result.scalar_one_or_none()
        if not floor:
            raise NotFoundError("Floor", floor_id)
        return floor

    async def get_floor_plan(self, floor_plan_id: UUID) -> FloorPlan:
        """Get floor plan by ID or raise NotFoundError."""
        result = await self.db.execute(
            select(FloorPlan).where(FloorPlan.id == floor_plan_id)
        )
        floor_plan = result.scalar_one_or_none()
        if not floor_plan:
            raise NotFoundError("Floor plan", floor_plan_id)
        return floor_plan

    async def get_by_floor_id(self, floor_id: UUID) -> Optional[FloorPlan]:
        """
        Get the floor plan of a floor.

        Raises NotFoundError if the floor does not exist.
        Returns None if the floor has no plan yet.
        """
        await self.get_floor(floor_id)
        result = await self.db.execute(
            select(FloorPlan).where(FloorPlan.floor_id == floor_id)
        )
        return result.scalar_one_or_none()

    async def get_detail(
        self,
        floor_plan: FloorPlan,
        include_hidden: bool = False,
    ) -> FloorPlanDetailResponse:
        """Floor plan with its elements (z_index order) and racks (sort_order)."""
        element_query = select(FloorPlanElement).where(
            FloorPlanElement.floor_plan_id == floor_plan.id
        )
        if not include_hidden:
            element_query = element_query.where(FloorPlanElement.is_visible == True)
        element_result = await self.db.execute(
            element_query.order_by(FloorPlanElement.z_index, FloorPlanElement.created_at)
        )
        elements = element_result.scalars().all()

        rack_result = await self.db.execute(
            select(Rack)
            .where(Rack.floor_plan_id == floor_plan.id)
            .order_by(Rack.sort_order, Rack.name)
        )
        racks = list(rack_result.scalars().all())

        # Columns only; relationships are not loaded under AsyncSession
        summary = FloorPlanResponse.model_validate(floor_plan)
        return FloorPlanDetailResponse(
            **summary.model_dump(),
            elements=[ElementResponse.model_validate(e) for e in elements],
            racks=await self.racks.to_responses(racks),
        )

    # ============================================
    # FLOOR PLAN CRUD
    # ============================================

    async def create_floor_plan(self, floor_id: UUID, data: FloorPlanCreate) -> FloorPlan:
        """Create the (single) floor plan of a floor at version 1."""
        await self.get_floor(floor_id)

        existing = await self.db.execute(
            select(FloorPlan.id).where(FloorPlan.floor_id == floor_id)
        )
        if existing.scalar_one_or_none():
            raise ConflictError(
                "Floor already has a floor plan",
                details={"floor_id": str(floor_id)},
            )

        floor_plan = FloorPlan(
            floor_id=floor_id,
            name=data.name,
            canvas_width=data.canvas_width or settings.default_canvas_width,
            canvas_height=data.canvas_height or settings.default_canvas_height,
            grid_size=data.grid_size or settings.default_grid_size,
            major_grid_size=data.major_grid_size or settings.default_major_grid_size,
            background_color=data.background_color or "#ffffff",
            version=1,
        )
        self.db.add(floor_plan)
        await self.db.commit()
        await self.db.refresh(floor_plan)

        logger.info("Created floor plan %s for floor %s", floor_plan.id, floor_id)
        return floor_plan

    async def delete_floor_plan(self, floor_plan_id: UUID) -> None:
        """Delete a floor plan together with its elements and racks."""
        floor_plan = await self.get_floor_plan(floor_plan_id)
        await self.db.delete(floor_plan)
        await self.db.commit()

        logger.info("Deleted floor plan %s", floor_plan_id)

    # ============================================
    # BULK SAVE
    # ============================================

    async def bulk_update(
        self,
        floor_plan_id: UUID,
        data: BulkUpdateRequest,
    ) -> BulkUpdateResponse:
        """
        Apply a whole editor save atomically.

        Order within the unit of work:
        1. lock the floor plan (NotFoundError if missing)
        2. delete elements, then racks, scoped to this plan
        3. upsert elements in request order
        4. lock the remaining racks and check that the names they will hold
           after this batch are unique; renamed racks are parked under a
           placeholder first so names can move between racks
        5. upsert racks in request order
        6. apply plan settings present in the request
        7. bump version once, commit

        Any error rolls back every change from this call.
        """
        try:
            floor_plan = await lock_floor_plan(self.db, floor_plan_id)

            if data.expected_version is not None and data.expected_version != floor_plan.version:
                raise ConflictError(
                    f"Floor plan was modified (expected version {data.expected_version}, "
                    f"current version {floor_plan.version}); reload before saving",
                    details={
                        "expected_version": data.expected_version,
                        "current_version": floor_plan.version,
                    },
                )

            if data.deleted_element_ids:
                await self.db.execute(
                    delete(FloorPlanElement).where(
                        FloorPlanElement.id.in_(data.deleted_element_ids),
                        FloorPlanElement.floor_plan_id == floor_plan.id,
                    )
                )

            if data.deleted_rack_ids:
                await self.db.execute(
                    delete(Rack).where(
                        Rack.id.in_(data.deleted_rack_ids),
                        Rack.floor_plan_id == floor_plan.id,
                    )
                )

            for item in data.elements:
                await self._apply_element(floor_plan, item)

            existing_racks = await self._prepare_rack_names(floor_plan, data.racks)
            for item in data.racks:
                await self._apply_rack(floor_plan, item, existing_racks)

            for field, value in data.settings_changes().items():
                setattr(floor_plan, field, value)

            new_version = bump_version(floor_plan)
            await self.db.commit()
        except Exception as exc:
            await self.db.rollback()
            logger.warning("Bulk update of floor plan %s rolled back: %s", floor_plan_id, exc)
            raise

        logger.info(
            "Floor plan %s saved as version %s (%d elements, %d racks, %d+%d deletions)",
            floor_plan_id,
            new_version,
            len(data.elements),
            len(data.racks),
            len(data.deleted_element_ids),
            len(data.deleted_rack_ids),
        )
        return BulkUpdateResponse(id=floor_plan_id, version=new_version)

    async def _apply_element(self, floor_plan: FloorPlan, item: ElementEdit) -> FloorPlanElement:
        if item.id is None:
            element = FloorPlanElement(
                floor_plan_id=floor_plan.id,
                element_type=item.element_type,
                properties=item.properties,
                z_index=item.z_index if item.z_index is not None else 0,
                is_visible=item.is_visible if item.is_visible is not None else True,
            )
            self.db.add(element)
            return element

        result = await self.db.execute(
            select(FloorPlanElement).where(
                FloorPlanElement.id == item.id,
                FloorPlanElement.floor_plan_id == floor_plan.id,
            )
        )
        element = result.scalar_one_or_none()
        if not element:
            raise NotFoundError("Floor plan element", item.id)

        element.element_type = item.element_type
        element.properties = item.properties
        if item.z_index is not None:
            element.z_index = item.z_index
        if item.is_visible is not None:
            element.is_visible = item.is_visible
        return element

    async def _prepare_rack_names(
        self,
        floor_plan: FloorPlan,
        items: List[RackEdit],
    ) -> Dict[UUID, Rack]:
        """
        Check the rack names the plan ends up with and free names that move.

        Names are compared against the final state of the batch: racks not
        mentioned keep their name, racks in the batch take the requested one.
        Returns the plan's remaining racks by id, locked for update.
        """
        result = await self.db.execute(
            select(Rack)
            .where(Rack.floor_plan_id == floor_plan.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        existing = {rack.id: rack for rack in result.scalars().all()}

        for item in items:
            if item.id is not None and item.id not in existing:
                raise NotFoundError("Rack", item.id)

        in_batch = {item.id for item in items if item.id is not None}
        holders: Dict[str, Optional[UUID]] = {
            rack.name: rack.id for rack in existing.values() if rack.id not in in_batch
        }
        for item in items:
            if item.name in holders:
                holder = holders[item.name]
                raise ConflictError(
                    f"Rack name '{item.name}' already exists on this floor plan",
                    details={"rack_id": str(holder) if holder else None, "name": item.name},
                )
            holders[item.name] = item.id

        renamed = [
            existing[item.id] for item in items
            if item.id is not None and existing[item.id].name != item.name
        ]
        if renamed:
            # uq_rack_name is not deferred; swaps go through a free name
            for rack in renamed:
                rack.name = f"{RENAME_PLACEHOLDER}{rack.id}"
            await self.db.flush()
        return existing

    async def _apply_rack(
        self,
        floor_plan: FloorPlan,
        item: RackEdit,
        existing: Dict[UUID, Rack],
    ) -> Rack:
        if item.id is None:
            rack = Rack(
                floor_plan_id=floor_plan.id,
                name=item.name,
                code=item.code,
                position_x=item.position_x,
                position_y=item.position_y,
                width=item.width if item.width is not None else settings.default_rack_width,
                height=item.height if item.height is not None else settings.default_rack_height,
                rotation=item.rotation if item.rotation is not None else settings.default_rack_rotation,
                total_u=item.total_u if item.total_u is not None else settings.default_rack_total_u,
                description=item.description,
            )
            self.db.add(rack)
            await self.db.flush()
            return rack

        rack = existing[item.id]
        if item.total_u is not None and item.total_u != rack.total_u:
            await self.racks.ensure_capacity_fits(rack, item.total_u)

        rack.name = item.name
        rack.position_x = item.position_x
        rack.position_y = item.position_y
        for field in ("code", "width", "height", "rotation", "total_u", "description"):
            if field not in item.model_fields_set:
                continue
            value = getattr(item, field)
            if value is None and field not in ("code", "description"):
                continue
            setattr(rack, field, value)
        await self.db.flush()
        return rack
