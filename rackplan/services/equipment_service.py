"""
Equipment Service

Equipment CRUD inside a rack. Every write that changes a slot range goes
through the slot allocator first and is persisted only on an ``ok`` result.
"""
import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rackplan.lib.errors import NotFoundError
from rackplan.models.equipment import Equipment
from rackplan.models.rack import Rack
from rackplan.schemas.equipment import EquipmentCreate, EquipmentMove, EquipmentUpdate
from rackplan.services.slot_allocator import (
    Placement,
    SlotRange,
    check_placement,
    free_ranges,
)

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("name", "start_u", "height_u", "category", "sort_order")


class EquipmentService:
    """Service for equipment placement in racks."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ============================================
    # HELPER METHODS
    # ============================================

    async def get_rack(self, rack_id: UUID, lock: bool = False) -> Rack:
        """Get a rack or raise NotFoundError. ``lock`` serializes slot writers."""
        query = select(Rack).where(Rack.id == rack_id)
        if lock:
            query = query.with_for_update()
        result = await self.db.execute(query)
        rack = result.scalar_one_or_none()
        if not rack:
            raise NotFoundError("Rack", rack_id)
        return rack

    async def get_rack_occupants(self, rack_id: UUID) -> List[Equipment]:
        """All equipment of a rack in ascending start_u order."""
        result = await self.db.execute(
            select(Equipment)
            .where(Equipment.rack_id == rack_id)
            .order_by(Equipment.start_u, Equipment.sort_order)
        )
        return list(result.scalars().all())

    # ============================================
    # SLOT QUERIES
    # ============================================

    async def validate_placement(
        self,
        rack_id: UUID,
        start_u: int,
        height_u: int,
        exclude_equipment_id: Optional[UUID] = None,
        lock: bool = False,
    ) -> Placement:
        """
        Check a proposed slot range against the rack and its other equipment.

        Never writes. Pass ``exclude_equipment_id`` when resizing or moving
        an item so it does not collide with itself.
        """
        rack = await self.get_rack(rack_id, lock=lock)
        occupants = await self.get_rack_occupants(rack_id)
        return check_placement(
            rack.total_u,
            occupants,
            start_u,
            height_u,
            exclude_id=exclude_equipment_id,
        )

    async def free_ranges(self, rack_id: UUID) -> Tuple[Rack, List[SlotRange]]:
        """Maximal runs of free U in a rack, ascending."""
        rack = await self.get_rack(rack_id)
        occupants = await self.get_rack_occupants(rack_id)
        return rack, free_ranges(rack.total_u, occupants)

    # ============================================
    # EQUIPMENT CRUD
    # ============================================

    async def list_equipment(self, rack_id: UUID) -> List[Equipment]:
        """List equipment of a rack, top slot first."""
        await self.get_rack(rack_id)
        result = await self.db.execute(
            select(Equipment)
            .where(Equipment.rack_id == rack_id)
            .order_by(Equipment.start_u.desc(), Equipment.sort_order)
        )
        return list(result.scalars().all())

    async def get_equipment(self, equipment_id: UUID) -> Equipment:
        """Get equipment by ID or raise NotFoundError."""
        result = await self.db.execute(
            select(Equipment).where(Equipment.id == equipment_id)
        )
        equipment = result.scalar_one_or_none()
        if not equipment:
            raise NotFoundError("Equipment", equipment_id)
        return equipment

    async def create_equipment(self, rack_id: UUID, data: EquipmentCreate) -> Equipment:
        """Install equipment after validating its slot range."""
        placement = await self.validate_placement(
            rack_id, data.start_u, data.height_u, lock=True
        )
        placement.raise_for_status()

        equipment = Equipment(
            rack_id=rack_id,
            name=data.name,
            model=data.model,
            manufacturer=data.manufacturer,
            serial_number=data.serial_number,
            start_u=data.start_u,
            height_u=data.height_u,
            category=data.category.value,
            install_date=data.install_date,
            manager=data.manager,
            description=data.description,
            properties=data.properties,
        )
        self.db.add(equipment)
        await self.db.commit()
        await self.db.refresh(equipment)

        logger.info(
            "Installed %s in rack %s at U%s-U%s",
            equipment.name, rack_id, placement.start_u, placement.end_u,
        )
        return equipment

    async def update_equipment(self, equipment_id: UUID, data: EquipmentUpdate) -> Equipment:
        """
        Update equipment fields.

        A changed start_u or height_u is re-validated against the other
        equipment in the rack.
        """
        equipment = await self.get_equipment(equipment_id)
        update_data = data.model_dump(exclude_unset=True)

        if "start_u" in update_data or "height_u" in update_data:
            start_u = update_data.get("start_u")
            height_u = update_data.get("height_u")
            placement = await self.validate_placement(
                equipment.rack_id,
                start_u if start_u is not None else equipment.start_u,
                height_u if height_u is not None else equipment.height_u,
                exclude_equipment_id=equipment.id,
                lock=True,
            )
            placement.raise_for_status()

        for field, value in update_data.items():
            # Explicit nulls only clear nullable columns
            if value is None and field in _REQUIRED_FIELDS:
                continue
            if field == "category":
                value = value.value
            setattr(equipment, field, value)

        await self.db.commit()
        await self.db.refresh(equipment)
        return equipment

    async def move_equipment(self, equipment_id: UUID, data: EquipmentMove) -> Equipment:
        """Move equipment to a new start U, keeping its height."""
        equipment = await self.get_equipment(equipment_id)
        placement = await self.validate_placement(
            equipment.rack_id,
            data.start_u,
            equipment.height_u,
            exclude_equipment_id=equipment.id,
            lock=True,
        )
        placement.raise_for_status()

        equipment.start_u = data.start_u
        await self.db.commit()
        await self.db.refresh(equipment)

        logger.info(
            "Moved %s in rack %s to U%s-U%s",
            equipment.name, equipment.rack_id, placement.start_u, placement.end_u,
        )
        return equipment

    async def delete_equipment(self, equipment_id: UUID) -> None:
        """Remove equipment from its rack."""
        equipment = await self.get_equipment(equipment_id)
        await self.db.delete(equipment)
        await self.db.commit()
