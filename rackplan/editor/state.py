"""
Working copies of elements and racks held by an editor session.

``key`` identifies an item inside the session. Items loaded from the server
use their id as key; items drawn locally get a ``temp-N`` key from their
session and no id until the next save reloads the plan.
"""
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional
from uuid import UUID

from rackplan.schemas.floor_plan import ElementEdit, RackEdit
from rackplan.schemas.floor_plan_element import ElementResponse
from rackplan.schemas.rack import RackResponse

TEMP_PREFIX = "temp-"


@dataclass
class EditorElement:
    key: str
    element_type: str
    properties: Dict[str, Any]
    z_index: int = 0
    is_visible: bool = True
    id: Optional[UUID] = None

    @property
    def is_new(self) -> bool:
        return self.id is None

    @classmethod
    def from_response(cls, element: ElementResponse) -> "EditorElement":
        return cls(
            key=str(element.id),
            id=element.id,
            element_type=element.element_type,
            properties=dict(element.properties),
            z_index=element.z_index,
            is_visible=element.is_visible,
        )

    def to_edit(self) -> ElementEdit:
        return ElementEdit(
            id=self.id,
            element_type=self.element_type,
            properties=self.properties,
            z_index=self.z_index,
            is_visible=self.is_visible,
        )


@dataclass
class EditorRack:
    key: str
    name: str
    position_x: float
    position_y: float
    width: float
    height: float
    rotation: int = 0
    total_u: int = 12
    code: Optional[str] = None
    description: Optional[str] = None
    id: Optional[UUID] = None
    # Read-only usage from the last load; not sent back on save
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def is_new(self) -> bool:
        return self.id is None

    @classmethod
    def from_response(cls, rack: RackResponse) -> "EditorRack":
        return cls(
            key=str(rack.id),
            id=rack.id,
            name=rack.name,
            code=rack.code,
            position_x=rack.position_x,
            position_y=rack.position_y,
            width=rack.width,
            height=rack.height,
            rotation=rack.rotation,
            total_u=rack.total_u,
            description=rack.description,
            extra={"equipment_count": rack.equipment_count, "used_u": rack.used_u},
        )

    def to_edit(self) -> RackEdit:
        return RackEdit(
            id=self.id,
            name=self.name,
            code=self.code,
            position_x=self.position_x,
            position_y=self.position_y,
            width=self.width,
            height=self.height,
            rotation=self.rotation,
            total_u=self.total_u,
            description=self.description,
        )


def editable_fields(item: Any) -> set:
    """Field names an ``update_*`` call may change (identity fields excluded)."""
    return {f.name for f in fields(item)} - {"key", "id", "extra"}
