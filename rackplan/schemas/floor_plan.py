"""
Floor plan schemas, including the bulk save request.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from rackplan.schemas.floor_plan_element import ElementResponse
from rackplan.schemas.rack import RackResponse


_COLOR_MAX = 20


class FloorPlanCreate(BaseModel):
    """Schema for creating the floor plan of a floor."""
    name: str = Field(..., min_length=1, max_length=100)
    canvas_width: Optional[int] = Field(None, gt=0)
    canvas_height: Optional[int] = Field(None, gt=0)
    grid_size: Optional[int] = Field(None, gt=0)
    major_grid_size: Optional[int] = Field(None, gt=0)
    background_color: Optional[str] = Field(None, max_length=_COLOR_MAX)


class FloorPlanResponse(BaseModel):
    """Floor plan settings without its contents."""
    id: UUID
    floor_id: UUID
    name: str
    canvas_width: int
    canvas_height: int
    grid_size: int
    major_grid_size: int
    background_color: str
    version: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class FloorPlanDetailResponse(FloorPlanResponse):
    """Floor plan with visible elements (by z_index) and racks (by sort_order)."""
    elements: List[ElementResponse] = []
    racks: List[RackResponse] = []


# ============================================
# BULK SAVE
# ============================================

class ElementEdit(BaseModel):
    """
    One element in a bulk save.

    With ``id``: update that element in place. Without: create it.
    ``z_index``/``is_visible`` default to 0/true on create only.
    """
    id: Optional[UUID] = None
    element_type: str = Field(..., min_length=1, max_length=20)
    properties: Dict[str, Any]
    z_index: Optional[int] = None
    is_visible: Optional[bool] = None


class RackEdit(BaseModel):
    """
    One rack in a bulk save.

    With ``id``: update in place, omitted fields untouched. Without: create
    it, filling omitted geometry from the rack defaults.
    """
    id: Optional[UUID] = None
    name: str = Field(..., min_length=1, max_length=100)
    code: Optional[str] = Field(None, max_length=50)
    position_x: float
    position_y: float
    width: Optional[float] = Field(None, gt=0)
    height: Optional[float] = Field(None, gt=0)
    rotation: Optional[int] = None
    total_u: Optional[int] = Field(None, ge=1)
    description: Optional[str] = None


class BulkUpdateRequest(BaseModel):
    """
    Everything an editor save sends in one atomic call.

    Deletions are applied before creations and updates, so a rack may be
    deleted and its name reused in the same request.
    """
    canvas_width: Optional[int] = Field(None, gt=0)
    canvas_height: Optional[int] = Field(None, gt=0)
    grid_size: Optional[int] = Field(None, gt=0)
    major_grid_size: Optional[int] = Field(None, gt=0)
    background_color: Optional[str] = Field(None, max_length=_COLOR_MAX)

    elements: List[ElementEdit] = Field(default_factory=list)
    racks: List[RackEdit] = Field(default_factory=list)
    deleted_element_ids: List[UUID] = Field(default_factory=list)
    deleted_rack_ids: List[UUID] = Field(default_factory=list)

    # Optional precondition: reject the save if the plan moved past this version
    expected_version: Optional[int] = Field(None, ge=1)

    @field_validator('elements', 'racks', 'deleted_element_ids', 'deleted_rack_ids', mode='before')
    @classmethod
    def none_as_empty(cls, v):
        return [] if v is None else v

    def settings_changes(self) -> Dict[str, Any]:
        """Plan-level settings present in the request."""
        fields = ("canvas_width", "canvas_height", "grid_size", "major_grid_size", "background_color")
        return {
            f: getattr(self, f)
            for f in fields
            if f in self.model_fields_set and getattr(self, f) is not None
        }


class BulkUpdateResponse(BaseModel):
    """Result of a successful bulk save."""
    id: UUID
    version: int
    message: str = "Saved"
