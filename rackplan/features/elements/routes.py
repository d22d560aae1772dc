"""
Floor plan element endpoints (walls, doors, windows, columns, ...).

``properties`` is stored and returned exactly as sent.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from rackplan.lib.database import get_db
from rackplan.schemas.floor_plan_element import (
    ElementCreate,
    ElementListResponse,
    ElementResponse,
    ElementUpdate,
)
from rackplan.services.element_service import ElementService

router = APIRouter(tags=["Elements"])


@router.get("/floor-plans/{floor_plan_id}/elements", response_model=ElementListResponse)
async def list_elements(
    floor_plan_id: UUID,
    include_hidden: bool = Query(True, description="Include hidden elements"),
    db: AsyncSession = Depends(get_db),
):
    """List elements of a floor plan in paint order (z_index ascending)."""
    service = ElementService(db)
    elements, total = await service.list_elements(floor_plan_id, include_hidden=include_hidden)
    return ElementListResponse(
        elements=[ElementResponse.model_validate(e) for e in elements],
        total=total,
    )


@router.post(
    "/floor-plans/{floor_plan_id}/elements",
    response_model=ElementResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_element(
    floor_plan_id: UUID,
    data: ElementCreate,
    db: AsyncSession = Depends(get_db),
):
    service = ElementService(db)
    element = await service.create_element(floor_plan_id, data)
    return ElementResponse.model_validate(element)


@router.get("/elements/{element_id}", response_model=ElementResponse)
async def get_element(
    element_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    service = ElementService(db)
    element = await service.get_element(element_id)
    return ElementResponse.model_validate(element)


@router.put("/elements/{element_id}", response_model=ElementResponse)
async def update_element(
    element_id: UUID,
    data: ElementUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update an element. Omitted fields are left untouched."""
    service = ElementService(db)
    element = await service.update_element(element_id, data)
    return ElementResponse.model_validate(element)


@router.delete("/elements/{element_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_element(
    element_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    service = ElementService(db)
    await service.delete_element(element_id)
