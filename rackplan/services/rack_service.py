"""
Rack Service

Single-rack CRUD. Name uniqueness is scoped to the floor plan; every write
bumps the owning floor plan's version, same as a bulk save.
"""
import logging
from typing import Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rackplan.lib.config import settings
from rackplan.lib.errors import ConflictError, NotFoundError, OutOfRangeError
from rackplan.models.equipment import Equipment
from rackplan.models.floor_plan import FloorPlan
from rackplan.models.rack import Rack
from rackplan.schemas.rack import RackCreate, RackImageType, RackResponse, RackUpdate
from rackplan.services.slot_allocator import OutOfRangeReason
from rackplan.services.versioning import bump_version, lock_floor_plan

logger = logging.getLogger(__name__)


class RackService:
    """Service for managing racks on a floor plan."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ============================================
    # HELPER METHODS
    # ============================================

    async def get_rack_by_name(
        self,
        floor_plan_id: UUID,
        name: str,
        exclude_id: Optional[UUID] = None,
    ) -> Optional[Rack]:
        """Exact, case-sensitive name lookup within one floor plan."""
        query = select(Rack).where(
            Rack.floor_plan_id == floor_plan_id,
            Rack.name == name,
        )
        if exclude_id is not None:
            query = query.where(Rack.id != exclude_id)
        result = await self.db.execute(query.limit(1))
        return result.scalar_one_or_none()

    async def ensure_name_available(
        self,
        floor_plan_id: UUID,
        name: str,
        exclude_id: Optional[UUID] = None,
    ) -> None:
        existing = await self.get_rack_by_name(floor_plan_id, name, exclude_id)
        if existing:
            raise ConflictError(
                f"Rack name '{name}' already exists on this floor plan",
                details={"rack_id": str(existing.id), "name": name},
            )

    async def get_usage(self, rack_ids: Iterable[UUID]) -> Dict[UUID, Tuple[int, int]]:
        """Map rack id -> (equipment_count, used_u)."""
        ids = list(rack_ids)
        if not ids:
            return {}
        result = await self.db.execute(
            select(
                Equipment.rack_id,
                func.count(Equipment.id),
                func.coalesce(func.sum(Equipment.height_u), 0),
            )
            .where(Equipment.rack_id.in_(ids))
            .group_by(Equipment.rack_id)
        )
        return {rack_id: (count, used) for rack_id, count, used in result.all()}

    async def ensure_capacity_fits(self, rack: Rack, total_u: int) -> None:
        """
        Refuse to shrink a rack below its top-most occupied U.

        Takes the rack row lock that equipment writers take, so no placement
        can land above the new height between this check and the commit.
        """
        await self.db.execute(
            select(Rack.id).where(Rack.id == rack.id).with_for_update()
        )
        result = await self.db.execute(
            select(func.max(Equipment.start_u + Equipment.height_u - 1))
            .where(Equipment.rack_id == rack.id)
        )
        highest = result.scalar_one_or_none() or 0
        if total_u < highest:
            raise OutOfRangeError(
                f"Rack '{rack.name}' has equipment up to U{highest}; "
                f"total U cannot be reduced to {total_u}",
                reason=OutOfRangeReason.EXCEEDS_CAPACITY.value,
                total_u=total_u,
                end_u=highest,
            )

    async def to_responses(self, racks: List[Rack]) -> List[RackResponse]:
        """Rack responses with equipment_count/used_u filled in."""
        usage = await self.get_usage(r.id for r in racks)
        responses = []
        for rack in racks:
            r = RackResponse.model_validate(rack)
            r.equipment_count, r.used_u = usage.get(rack.id, (0, 0))
            responses.append(r)
        return responses

    # ============================================
    # RACK CRUD
    # ============================================

    async def list_racks(self, floor_plan_id: UUID) -> List[Rack]:
        """List racks of a floor plan by sort_order."""
        # Raises NotFoundError for an unknown plan
        await self._get_floor_plan(floor_plan_id)
        result = await self.db.execute(
            select(Rack)
            .where(Rack.floor_plan_id == floor_plan_id)
            .order_by(Rack.sort_order, Rack.name)
        )
        return list(result.scalars().all())

    async def get_rack(self, rack_id: UUID) -> Rack:
        """Get a rack by ID or raise NotFoundError."""
        result = await self.db.execute(select(Rack).where(Rack.id == rack_id))
        rack = result.scalar_one_or_none()
        if not rack:
            raise NotFoundError("Rack", rack_id)
        return rack

    async def create_rack(self, floor_plan_id: UUID, data: RackCreate) -> Rack:
        """Create a rack on a floor plan."""
        floor_plan = await lock_floor_plan(self.db, floor_plan_id)
        await self.ensure_name_available(floor_plan_id, data.name)

        rack = Rack(
            floor_plan_id=floor_plan_id,
            name=data.name,
            code=data.code,
            position_x=data.position_x,
            position_y=data.position_y,
            width=data.width if data.width is not None else settings.default_rack_width,
            height=data.height if data.height is not None else settings.default_rack_height,
            rotation=data.rotation if data.rotation is not None else settings.default_rack_rotation,
            total_u=data.total_u if data.total_u is not None else settings.default_rack_total_u,
            description=data.description,
        )
        self.db.add(rack)
        bump_version(floor_plan)

        await self.db.commit()
        await self.db.refresh(rack)
        return rack

    async def update_rack(self, rack_id: UUID, data: RackUpdate) -> Rack:
        """Update rack fields. Renames are checked for uniqueness."""
        rack = await self.get_rack(rack_id)
        floor_plan = await lock_floor_plan(self.db, rack.floor_plan_id)

        update_data = data.model_dump(exclude_unset=True)
        if update_data.get("name") and update_data["name"] != rack.name:
            await self.ensure_name_available(rack.floor_plan_id, update_data["name"], exclude_id=rack.id)
        if update_data.get("total_u") is not None and update_data["total_u"] != rack.total_u:
            await self.ensure_capacity_fits(rack, update_data["total_u"])

        for field, value in update_data.items():
            # Non-nullable columns ignore explicit nulls
            if value is None and field not in ("code", "description"):
                continue
            setattr(rack, field, value)
        bump_version(floor_plan)

        await self.db.commit()
        await self.db.refresh(rack)
        return rack

    async def delete_rack(self, rack_id: UUID) -> None:
        """Delete an empty rack."""
        rack = await self.get_rack(rack_id)
        usage = await self.get_usage([rack.id])
        count, _ = usage.get(rack.id, (0, 0))
        if count > 0:
            raise ConflictError(
                f"Rack '{rack.name}' still holds {count} equipment item(s); remove them first",
                details={"rack_id": str(rack.id), "equipment_count": count},
            )

        floor_plan = await lock_floor_plan(self.db, rack.floor_plan_id)
        await self.db.delete(rack)
        bump_version(floor_plan)
        await self.db.commit()

    async def set_image(
        self,
        rack_id: UUID,
        image_type: RackImageType,
        image_url: Optional[str],
    ) -> Rack:
        """Set (or clear with ``None``) the front/rear image reference."""
        rack = await self.get_rack(rack_id)
        floor_plan = await lock_floor_plan(self.db, rack.floor_plan_id)

        if image_type == RackImageType.FRONT:
            rack.front_image_url = image_url
        else:
            rack.rear_image_url = image_url
        bump_version(floor_plan)

        await self.db.commit()
        await self.db.refresh(rack)
        return rack

    async def _get_floor_plan(self, floor_plan_id: UUID) -> FloorPlan:
        floor_plan = await self.db.get(FloorPlan, floor_plan_id)
        if not floor_plan:
            raise NotFoundError("Floor plan", floor_plan_id)
        return floor_plan
