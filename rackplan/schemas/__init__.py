from rackplan.schemas.floor_plan import (
    FloorPlanCreate,
    FloorPlanResponse,
    FloorPlanDetailResponse,
    ElementEdit,
    RackEdit,
    BulkUpdateRequest,
    BulkUpdateResponse,
)
from rackplan.schemas.floor_plan_element import (
    ElementType,
    ElementCreate,
    ElementUpdate,
    ElementResponse,
    ElementListResponse,
    decode_properties,
    encode_properties,
)
from rackplan.schemas.rack import (
    RackCreate,
    RackUpdate,
    RackImageUpdate,
    RackResponse,
    RackListResponse,
)
from rackplan.schemas.equipment import (
    EquipmentCategory,
    EquipmentCreate,
    EquipmentUpdate,
    EquipmentMove,
    EquipmentResponse,
    EquipmentListResponse,
    AvailableSlotsResponse,
    PlacementCheckRequest,
    PlacementCheckResponse,
)

__all__ = [
    # Floor plan
    "FloorPlanCreate",
    "FloorPlanResponse",
    "FloorPlanDetailResponse",
    "ElementEdit",
    "RackEdit",
    "BulkUpdateRequest",
    "BulkUpdateResponse",
    # Element
    "ElementType",
    "ElementCreate",
    "ElementUpdate",
    "ElementResponse",
    "ElementListResponse",
    "decode_properties",
    "encode_properties",
    # Rack
    "RackCreate",
    "RackUpdate",
    "RackImageUpdate",
    "RackResponse",
    "RackListResponse",
    # Equipment
    "EquipmentCategory",
    "EquipmentCreate",
    "EquipmentUpdate",
    "EquipmentMove",
    "EquipmentResponse",
    "EquipmentListResponse",
    "AvailableSlotsResponse",
    "PlacementCheckRequest",
    "PlacementCheckResponse",
]
