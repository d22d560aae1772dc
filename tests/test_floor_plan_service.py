import uuid

import pytest
from sqlalchemy import func, select

from rackplan.lib.errors import ConflictError, NotFoundError
from rackplan.models import Equipment, Rack
from rackplan.schemas.floor_plan import FloorPlanCreate
from rackplan.services.floor_plan_service import FloorPlanService


async def test_create_uses_defaults(session, make_floor):
    floor = await make_floor()

    floor_plan = await FloorPlanService(session).create_floor_plan(floor.id, FloorPlanCreate(name="1F"))

    assert floor_plan.version == 1
    assert (floor_plan.canvas_width, floor_plan.canvas_height) == (2000, 1500)
    assert floor_plan.grid_size == 10
    assert floor_plan.background_color == "#ffffff"


async def test_one_plan_per_floor(session, make_floor):
    floor = await make_floor()
    service = FloorPlanService(session)
    await service.create_floor_plan(floor.id, FloorPlanCreate(name="1F"))

    with pytest.raises(ConflictError):
        await service.create_floor_plan(floor.id, FloorPlanCreate(name="again"))


async def test_create_for_unknown_floor(session):
    with pytest.raises(NotFoundError):
        await FloorPlanService(session).create_floor_plan(uuid.uuid4(), FloorPlanCreate(name="x"))


async def test_get_by_floor_without_plan(session, make_floor):
    floor = await make_floor()
    assert await FloorPlanService(session).get_by_floor_id(floor.id) is None


async def test_get_by_unknown_floor(session):
    with pytest.raises(NotFoundError):
        await FloorPlanService(session).get_by_floor_id(uuid.uuid4())


async def test_detail_orders_and_filters(session, make_floor_plan, make_rack, make_element, make_equipment):
    floor_plan = await make_floor_plan()
    await make_element(floor_plan, "door", {"x": 0, "y": 0, "width": 80}, z_index=2)
    await make_element(floor_plan, "wall", z_index=1)
    await make_element(floor_plan, "window", {"x": 0, "y": 0, "width": 40}, is_visible=False)
    rack = await make_rack(floor_plan, "Rack Z", sort_order=0)
    await make_rack(floor_plan, "Rack Y", sort_order=1)
    await make_equipment(rack, "Server", 1, 4)
    service = FloorPlanService(session)

    detail = await service.get_detail(floor_plan)

    assert [e.element_type for e in detail.elements] == ["wall", "door"]
    assert [r.name for r in detail.racks] == ["Rack Z", "Rack Y"]
    assert detail.racks[0].used_u == 4
    assert detail.version == 1

    detail = await service.get_detail(floor_plan, include_hidden=True)
    assert len(detail.elements) == 3


async def test_delete_cascades(session, make_floor_plan, make_rack, make_equipment):
    floor_plan = await make_floor_plan()
    plan_id = floor_plan.id
    rack = await make_rack(floor_plan, "Rack A")
    await make_equipment(rack, "Server", 1)
    service = FloorPlanService(session)

    await service.delete_floor_plan(plan_id)

    with pytest.raises(NotFoundError):
        await service.get_floor_plan(plan_id)
    assert await session.scalar(select(func.count(Rack.id))) == 0
    assert await session.scalar(select(func.count(Equipment.id))) == 0
