"""
Equipment endpoints.

Supports:
- List/get equipment of a rack
- Install, update, move and remove equipment (slot-checked)
- Free U ranges of a rack
- Dry-run placement check
"""
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from rackplan.lib.database import get_db
from rackplan.schemas.equipment import (
    AvailableSlotsResponse,
    ConflictingEquipment,
    EquipmentCreate,
    EquipmentListResponse,
    EquipmentMove,
    EquipmentResponse,
    EquipmentUpdate,
    PlacementCheckRequest,
    PlacementCheckResponse,
    SlotRangeResponse,
)
from rackplan.services.equipment_service import EquipmentService

router = APIRouter(tags=["Equipment"])


@router.get("/racks/{rack_id}/equipment", response_model=EquipmentListResponse)
async def list_equipment(
    rack_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """List equipment in a rack, top slot first."""
    service = EquipmentService(db)
    equipment = await service.list_equipment(rack_id)
    return EquipmentListResponse(
        equipment=[EquipmentResponse.model_validate(e) for e in equipment],
        total=len(equipment),
    )


@router.post(
    "/racks/{rack_id}/equipment",
    response_model=EquipmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_equipment(
    rack_id: UUID,
    data: EquipmentCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Install equipment in a rack.

    Returns 400 when the range leaves the rack and 409 when it overlaps
    other equipment.
    """
    service = EquipmentService(db)
    equipment = await service.create_equipment(rack_id, data)
    return EquipmentResponse.model_validate(equipment)


@router.get("/racks/{rack_id}/available-slots", response_model=AvailableSlotsResponse)
async def get_available_slots(
    rack_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Maximal runs of free U in ascending order."""
    service = EquipmentService(db)
    rack, ranges = await service.free_ranges(rack_id)
    return AvailableSlotsResponse(
        rack_id=rack.id,
        total_u=rack.total_u,
        ranges=[SlotRangeResponse(start=r.start, end=r.end) for r in ranges],
    )


@router.post("/racks/{rack_id}/placement-check", response_model=PlacementCheckResponse)
async def check_placement(
    rack_id: UUID,
    data: PlacementCheckRequest,
    db: AsyncSession = Depends(get_db),
):
    """Validate a placement without installing anything."""
    service = EquipmentService(db)
    placement = await service.validate_placement(
        rack_id,
        data.start_u,
        data.height_u,
        exclude_equipment_id=data.exclude_equipment_id,
    )

    conflict = None
    if placement.conflict is not None:
        rng = placement.conflict_range
        conflict = ConflictingEquipment(
            id=placement.conflict.id,
            name=placement.conflict.name,
            start_u=rng.start,
            end_u=rng.end,
        )

    return PlacementCheckResponse(
        status=placement.status.value,
        message=placement.message,
        reason=placement.reason.value if placement.reason else None,
        total_u=placement.total_u,
        end_u=placement.end_u,
        conflict=conflict,
    )


@router.get("/equipment/{equipment_id}", response_model=EquipmentResponse)
async def get_equipment(
    equipment_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    service = EquipmentService(db)
    equipment = await service.get_equipment(equipment_id)
    return EquipmentResponse.model_validate(equipment)


@router.put("/equipment/{equipment_id}", response_model=EquipmentResponse)
async def update_equipment(
    equipment_id: UUID,
    data: EquipmentUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update equipment. A changed start_u/height_u is re-validated."""
    service = EquipmentService(db)
    equipment = await service.update_equipment(equipment_id, data)
    return EquipmentResponse.model_validate(equipment)


@router.patch("/equipment/{equipment_id}/move", response_model=EquipmentResponse)
async def move_equipment(
    equipment_id: UUID,
    data: EquipmentMove,
    db: AsyncSession = Depends(get_db),
):
    """Move equipment to a new start U, keeping its height."""
    service = EquipmentService(db)
    equipment = await service.move_equipment(equipment_id, data)
    return EquipmentResponse.model_validate(equipment)


@router.delete("/equipment/{equipment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_equipment(
    equipment_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    service = EquipmentService(db)
    await service.delete_equipment(equipment_id)
