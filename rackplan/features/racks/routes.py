"""
Rack CRUD endpoints.

Every write here bumps the owning floor plan's version.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from rackplan.lib.database import get_db
from rackplan.schemas.rack import (
    RackCreate,
    RackImageType,
    RackImageUpdate,
    RackListResponse,
    RackResponse,
    RackUpdate,
)
from rackplan.services.rack_service import RackService

router = APIRouter(tags=["Racks"])


@router.get("/floor-plans/{floor_plan_id}/racks", response_model=RackListResponse)
async def list_racks(
    floor_plan_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """List racks on a floor plan, sorted by sort_order then name."""
    service = RackService(db)
    racks = await service.list_racks(floor_plan_id)
    return RackListResponse(
        racks=await service.to_responses(racks),
        total=len(racks),
    )


@router.post(
    "/floor-plans/{floor_plan_id}/racks",
    response_model=RackResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_rack(
    floor_plan_id: UUID,
    data: RackCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Create a rack.

    Name must be unique within the floor plan (case-sensitive).
    """
    service = RackService(db)
    rack = await service.create_rack(floor_plan_id, data)
    return RackResponse.model_validate(rack)


@router.get("/racks/{rack_id}", response_model=RackResponse)
async def get_rack(
    rack_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    service = RackService(db)
    rack = await service.get_rack(rack_id)
    responses = await service.to_responses([rack])
    return responses[0]


@router.put("/racks/{rack_id}", response_model=RackResponse)
async def update_rack(
    rack_id: UUID,
    data: RackUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    Update a rack.

    Renames are checked for uniqueness; total_u cannot drop below the
    highest occupied slot.
    """
    service = RackService(db)
    rack = await service.update_rack(rack_id, data)
    responses = await service.to_responses([rack])
    return responses[0]


@router.delete("/racks/{rack_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_rack(
    rack_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Delete a rack. Racks that still hold equipment return 409."""
    service = RackService(db)
    await service.delete_rack(rack_id)


@router.put("/racks/{rack_id}/image", response_model=RackResponse)
async def set_rack_image(
    rack_id: UUID,
    data: RackImageUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Point the front or rear face at an already uploaded image."""
    service = RackService(db)
    rack = await service.set_image(rack_id, data.image_type, data.image_url)
    return RackResponse.model_validate(rack)


@router.delete("/racks/{rack_id}/image/{image_type}", response_model=RackResponse)
async def clear_rack_image(
    rack_id: UUID,
    image_type: RackImageType,
    db: AsyncSession = Depends(get_db),
):
    service = RackService(db)
    rack = await service.set_image(rack_id, image_type, None)
    return RackResponse.model_validate(rack)
