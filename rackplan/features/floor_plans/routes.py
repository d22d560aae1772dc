"""
Floor plan endpoints.

Supports:
- Get a floor's plan with its elements and racks
- Create the plan of a floor
- Bulk save from the editor (atomic, bumps version once)
- Delete a plan with everything on it
"""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from rackplan.lib.database import get_db
from rackplan.schemas.floor_plan import (
    BulkUpdateRequest,
    BulkUpdateResponse,
    FloorPlanCreate,
    FloorPlanDetailResponse,
    FloorPlanResponse,
)
from rackplan.services.floor_plan_service import FloorPlanService

router = APIRouter(tags=["Floor Plans"])


@router.get("/floors/{floor_id}/floor-plan", response_model=FloorPlanDetailResponse)
async def get_floor_plan_by_floor(
    floor_id: UUID,
    include_hidden: bool = Query(False, description="Include hidden elements"),
    db: AsyncSession = Depends(get_db),
):
    """
    Get the floor plan of a floor.

    Elements come back in paint order (z_index), racks by sort_order with
    their equipment count and used U.
    """
    service = FloorPlanService(db)
    floor_plan = await service.get_by_floor_id(floor_id)

    if not floor_plan:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Floor has no floor plan yet"
        )

    return await service.get_detail(floor_plan, include_hidden=include_hidden)


@router.post(
    "/floors/{floor_id}/floor-plan",
    response_model=FloorPlanResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_floor_plan(
    floor_id: UUID,
    data: FloorPlanCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Create the floor plan of a floor.

    A floor has at most one plan; a second create returns 409.
    """
    service = FloorPlanService(db)
    floor_plan = await service.create_floor_plan(floor_id, data)
    return FloorPlanResponse.model_validate(floor_plan)


@router.get("/floor-plans/{floor_plan_id}", response_model=FloorPlanDetailResponse)
async def get_floor_plan(
    floor_plan_id: UUID,
    include_hidden: bool = Query(False, description="Include hidden elements"),
    db: AsyncSession = Depends(get_db),
):
    """Get a floor plan by ID with its elements and racks."""
    service = FloorPlanService(db)
    floor_plan = await service.get_floor_plan(floor_plan_id)
    return await service.get_detail(floor_plan, include_hidden=include_hidden)


@router.put("/floor-plans/{floor_plan_id}/bulk", response_model=BulkUpdateResponse)
async def bulk_update_floor_plan(
    floor_plan_id: UUID,
    data: BulkUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Save an editor batch in one transaction.

    Deletions run first, then element and rack upserts (items with an id
    are updated, items without are created), then plan settings. Any error
    (unknown plan or id, duplicate rack name, stale expected_version)
    leaves the plan untouched.
    """
    service = FloorPlanService(db)
    return await service.bulk_update(floor_plan_id, data)


@router.delete("/floor-plans/{floor_plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_floor_plan(
    floor_plan_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Delete a floor plan together with its elements, racks and equipment."""
    service = FloorPlanService(db)
    await service.delete_floor_plan(floor_plan_id)
