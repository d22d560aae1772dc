"""
Equipment and U-slot schemas.

``start_u``/``height_u`` carry no bounds here; the slot allocator rejects
bad ranges with an OUT_OF_RANGE error that names the rack capacity.
"""
from datetime import date, datetime
from enum import Enum
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class EquipmentCategory(str, Enum):
    """Equipment categories."""
    SERVER = "SERVER"
    NETWORK = "NETWORK"
    STORAGE = "STORAGE"
    POWER = "POWER"
    SECURITY = "SECURITY"
    OTHER = "OTHER"


class EquipmentCreate(BaseModel):
    """Schema for installing equipment in a rack."""
    name: str = Field(..., min_length=1, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    manufacturer: Optional[str] = Field(None, max_length=100)
    serial_number: Optional[str] = Field(None, max_length=100)
    start_u: int
    height_u: int = 1
    category: EquipmentCategory = EquipmentCategory.OTHER
    install_date: Optional[date] = None
    manager: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    properties: Optional[Any] = None


class EquipmentUpdate(BaseModel):
    """Schema for updating equipment. A changed start_u/height_u is re-validated."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    manufacturer: Optional[str] = Field(None, max_length=100)
    serial_number: Optional[str] = Field(None, max_length=100)
    start_u: Optional[int] = None
    height_u: Optional[int] = None
    category: Optional[EquipmentCategory] = None
    install_date: Optional[date] = None
    manager: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    properties: Optional[Any] = None
    sort_order: Optional[int] = None


class EquipmentMove(BaseModel):
    """Move equipment to a new start U, keeping its height."""
    start_u: int


class EquipmentResponse(BaseModel):
    """Equipment response schema."""
    id: UUID
    rack_id: UUID
    name: str
    model: Optional[str] = None
    manufacturer: Optional[str] = None
    serial_number: Optional[str] = None
    start_u: int
    height_u: int
    category: str
    install_date: Optional[date] = None
    manager: Optional[str] = None
    description: Optional[str] = None
    properties: Optional[Any] = None
    sort_order: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class EquipmentListResponse(BaseModel):
    """List of equipment in a rack, top slot first."""
    equipment: List[EquipmentResponse]
    total: int


# ============================================
# SLOT SCHEMAS
# ============================================

class SlotRangeResponse(BaseModel):
    start: int
    end: int


class AvailableSlotsResponse(BaseModel):
    """Maximal free U runs of a rack, ascending."""
    rack_id: UUID
    total_u: int
    ranges: List[SlotRangeResponse]


class PlacementCheckRequest(BaseModel):
    """Dry-run a placement without installing anything."""
    start_u: int
    height_u: int = 1
    exclude_equipment_id: Optional[UUID] = None


class ConflictingEquipment(BaseModel):
    id: UUID
    name: str
    start_u: int
    end_u: int


class PlacementCheckResponse(BaseModel):
    status: str  # ok, conflict, out_of_range
    message: str = ""
    reason: Optional[str] = None
    total_u: int
    end_u: int
    conflict: Optional[ConflictingEquipment] = None
