"""
Floor plan element schemas.

``properties`` is stored and returned untouched. The typed payload models
below are only used where a caller needs type-specific geometry (moving an
element in the editor); unknown ``element_type`` values stay plain dicts.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Tuple, Type, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ElementType(str, Enum):
    """Element types the editor knows how to draw."""
    WALL = "wall"
    DOOR = "door"
    WINDOW = "window"
    COLUMN = "column"


# ============================================
# TYPED PAYLOADS
# ============================================

class _Payload(BaseModel):
    # Keep keys the editor does not model (rotation, flip, label, ...)
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def translated(self, dx: float, dy: float) -> "_Payload":
        raise NotImplementedError

    def anchor(self) -> Tuple[float, float]:
        raise NotImplementedError


class WallProperties(_Payload):
    points: List[Tuple[float, float]] = Field(..., min_length=2)
    thickness: float = 10
    color: str = "#333333"

    def anchor(self) -> Tuple[float, float]:
        return self.points[0]

    def translated(self, dx: float, dy: float) -> "WallProperties":
        points = [(x + dx, y + dy) for x, y in self.points]
        return self.model_copy(update={"points": points})


class _PositionedPayload(_Payload):
    x: float
    y: float

    def anchor(self) -> Tuple[float, float]:
        return self.x, self.y

    def translated(self, dx: float, dy: float) -> "_PositionedPayload":
        return self.model_copy(update={"x": self.x + dx, "y": self.y + dy})


class DoorProperties(_PositionedPayload):
    width: float
    wall_id: Optional[str] = Field(None, alias="wallId")
    open_direction: Literal["inside", "outside"] = Field("inside", alias="openDirection")


class WindowProperties(_PositionedPayload):
    width: float
    wall_id: Optional[str] = Field(None, alias="wallId")


class ColumnProperties(_PositionedPayload):
    width: float
    height: float
    shape: Literal["rect", "circle"] = "rect"


ElementProperties = Union[WallProperties, DoorProperties, WindowProperties, ColumnProperties]

PROPERTY_MODELS: Dict[str, Type[_Payload]] = {
    ElementType.WALL.value: WallProperties,
    ElementType.DOOR.value: DoorProperties,
    ElementType.WINDOW.value: WindowProperties,
    ElementType.COLUMN.value: ColumnProperties,
}


def decode_properties(
    element_type: str, properties: Dict[str, Any]
) -> Union[ElementProperties, Dict[str, Any]]:
    """
    Decode a stored payload into its typed model.

    Unknown element types are returned as the original dict. Known types
    with a malformed payload raise ``pydantic.ValidationError``.
    """
    model = PROPERTY_MODELS.get(element_type)
    if model is None:
        return properties
    return model.model_validate(properties)


def encode_properties(properties: Union[ElementProperties, Dict[str, Any]]) -> Dict[str, Any]:
    """Inverse of ``decode_properties``; writes the original wire key names."""
    if isinstance(properties, BaseModel):
        data = properties.model_dump(by_alias=True, exclude_none=True)
        if "points" in data:
            data["points"] = [list(p) for p in data["points"]]
        return data
    return dict(properties)


# ============================================
# CRUD SCHEMAS
# ============================================

class ElementCreate(BaseModel):
    """Schema for creating a single element."""
    element_type: str = Field(..., min_length=1, max_length=20)
    properties: Dict[str, Any]
    z_index: Optional[int] = 0
    is_visible: Optional[bool] = True


class ElementUpdate(BaseModel):
    """Schema for updating a single element. Omitted fields are left untouched."""
    element_type: Optional[str] = Field(None, min_length=1, max_length=20)
    properties: Optional[Dict[str, Any]] = None
    z_index: Optional[int] = None
    is_visible: Optional[bool] = None


class ElementResponse(BaseModel):
    """Element response schema."""
    id: UUID
    floor_plan_id: UUID
    element_type: str
    properties: Dict[str, Any]
    z_index: int
    is_visible: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ElementListResponse(BaseModel):
    """List of elements response."""
    elements: List[ElementResponse]
    total: int
