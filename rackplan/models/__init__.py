from rackplan.models.site import Substation, Floor
from rackplan.models.floor_plan import FloorPlan
from rackplan.models.floor_plan_element import FloorPlanElement
from rackplan.models.rack import Rack
from rackplan.models.equipment import Equipment

__all__ = [
    "Substation",
    "Floor",
    "FloorPlan",
    "FloorPlanElement",
    "Rack",
    "Equipment",
]
