"""
Rack schemas for CRUD operations.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class RackImageType(str, Enum):
    FRONT = "front"
    REAR = "rear"


class RackCreate(BaseModel):
    """Schema for creating a rack. Omitted geometry falls back to the rack defaults."""
    name: str = Field(..., min_length=1, max_length=100)
    code: Optional[str] = Field(None, max_length=50)
    position_x: float
    position_y: float
    width: Optional[float] = Field(None, gt=0)
    height: Optional[float] = Field(None, gt=0)
    rotation: Optional[int] = None
    total_u: Optional[int] = Field(None, ge=1)
    description: Optional[str] = None


class RackUpdate(BaseModel):
    """Schema for updating a rack."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    code: Optional[str] = Field(None, max_length=50)
    position_x: Optional[float] = None
    position_y: Optional[float] = None
    width: Optional[float] = Field(None, gt=0)
    height: Optional[float] = Field(None, gt=0)
    rotation: Optional[int] = None
    total_u: Optional[int] = Field(None, ge=1)
    description: Optional[str] = None
    sort_order: Optional[int] = None


class RackImageUpdate(BaseModel):
    """Point a rack face at an already uploaded image."""
    image_type: RackImageType
    image_url: str = Field(..., min_length=1, max_length=500)


class RackResponse(BaseModel):
    """Rack response schema with derived equipment usage."""
    id: UUID
    floor_plan_id: UUID
    name: str
    code: Optional[str] = None
    position_x: float
    position_y: float
    width: float
    height: float
    rotation: int
    total_u: int
    front_image_url: Optional[str] = None
    rear_image_url: Optional[str] = None
    description: Optional[str] = None
    sort_order: int
    equipment_count: int = 0
    used_u: int = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RackListResponse(BaseModel):
    """List of racks response."""
    racks: List[RackResponse]
    total: int
