from rackplan.services.floor_plan_service import FloorPlanService
from rackplan.services.rack_service import RackService
from rackplan.services.element_service import ElementService
from rackplan.services.equipment_service import EquipmentService

__all__ = [
    "FloorPlanService",
    "RackService",
    "ElementService",
    "EquipmentService",
]
