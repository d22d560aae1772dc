import uuid

import pytest
from sqlalchemy import func, select

from rackplan.editor.session import EditorSession
from rackplan.lib.errors import ConflictError, NotFoundError, OutOfRangeError
from rackplan.models import Equipment, FloorPlan, FloorPlanElement, Rack
from rackplan.schemas.floor_plan import BulkUpdateRequest, ElementEdit, RackEdit
from rackplan.services.floor_plan_service import FloorPlanService

WALL = {"points": [[0, 0], [200, 0]], "thickness": 10, "color": "#333333"}


async def current_version(session, floor_plan_id):
    return await session.scalar(select(FloorPlan.version).where(FloorPlan.id == floor_plan_id))


async def rack_names(session, floor_plan_id):
    result = await session.execute(
        select(Rack.name).where(Rack.floor_plan_id == floor_plan_id).order_by(Rack.name)
    )
    return list(result.scalars().all())


async def element_count(session, floor_plan_id):
    return await session.scalar(
        select(func.count(FloorPlanElement.id)).where(FloorPlanElement.floor_plan_id == floor_plan_id)
    )


async def test_empty_request_bumps_version_only(session, make_floor_plan):
    floor_plan = await make_floor_plan(version=1)
    plan_id = floor_plan.id

    response = await FloorPlanService(session).bulk_update(plan_id, BulkUpdateRequest())

    assert response.version == 2
    assert await current_version(session, plan_id) == 2
    assert await element_count(session, plan_id) == 0
    assert await rack_names(session, plan_id) == []


async def test_null_lists_are_treated_as_empty(session, make_floor_plan):
    floor_plan = await make_floor_plan()
    request = BulkUpdateRequest.model_validate({"elements": None, "racks": None})

    response = await FloorPlanService(session).bulk_update(floor_plan.id, request)
    assert response.version == 2


async def test_creates_elements_and_racks(session, make_floor_plan):
    floor_plan = await make_floor_plan()
    plan_id = floor_plan.id

    request = BulkUpdateRequest(
        elements=[ElementEdit(element_type="wall", properties=WALL)],
        racks=[RackEdit(name="Rack A", position_x=100, position_y=200)],
    )
    await FloorPlanService(session).bulk_update(plan_id, request)

    result = await session.execute(select(Rack).where(Rack.floor_plan_id == plan_id))
    rack = result.scalar_one()
    assert (rack.width, rack.height, rack.rotation, rack.total_u) == (60, 100, 0, 12)

    result = await session.execute(select(FloorPlanElement).where(FloorPlanElement.floor_plan_id == plan_id))
    element = result.scalar_one()
    assert element.properties == WALL
    assert element.z_index == 0
    assert element.is_visible is True


async def test_delete_then_reuse_rack_name(session, make_floor_plan, make_rack):
    floor_plan = await make_floor_plan(version=3)
    plan_id = floor_plan.id
    old = await make_rack(floor_plan, "R1")
    old_id = old.id

    request = BulkUpdateRequest(
        deleted_rack_ids=[old_id],
        racks=[RackEdit(name="R1", position_x=0, position_y=0)],
    )
    response = await FloorPlanService(session).bulk_update(plan_id, request)

    assert response.version == 4
    result = await session.execute(select(Rack.id).where(Rack.floor_plan_id == plan_id))
    ids = list(result.scalars().all())
    assert len(ids) == 1
    assert ids[0] != old_id


async def test_duplicate_new_names_abort_whole_batch(session, make_floor_plan):
    floor_plan = await make_floor_plan(version=3)
    plan_id = floor_plan.id

    request = BulkUpdateRequest(
        elements=[ElementEdit(element_type="wall", properties=WALL)],
        racks=[
            RackEdit(name="Rack A", position_x=0, position_y=0),
            RackEdit(name="Rack A", position_x=100, position_y=0),
        ],
        grid_size=40,
    )
    with pytest.raises(ConflictError) as exc_info:
        await FloorPlanService(session).bulk_update(plan_id, request)

    assert "Rack A" in exc_info.value.message
    assert await current_version(session, plan_id) == 3
    assert await rack_names(session, plan_id) == []
    assert await element_count(session, plan_id) == 0
    grid_size = await session.scalar(select(FloorPlan.grid_size).where(FloorPlan.id == plan_id))
    assert grid_size == 10


async def test_new_name_clashing_with_surviving_rack(session, make_floor_plan, make_rack):
    floor_plan = await make_floor_plan()
    plan_id = floor_plan.id
    await make_rack(floor_plan, "Rack A")

    request = BulkUpdateRequest(racks=[RackEdit(name="Rack A", position_x=0, position_y=0)])
    with pytest.raises(ConflictError):
        await FloorPlanService(session).bulk_update(plan_id, request)

    assert await rack_names(session, plan_id) == ["Rack A"]
    assert await current_version(session, plan_id) == 1


async def test_names_are_case_sensitive(session, make_floor_plan, make_rack):
    floor_plan = await make_floor_plan()
    plan_id = floor_plan.id
    await make_rack(floor_plan, "Rack A")

    request = BulkUpdateRequest(racks=[RackEdit(name="rack a", position_x=0, position_y=0)])
    await FloorPlanService(session).bulk_update(plan_id, request)

    assert await rack_names(session, plan_id) == ["Rack A", "rack a"]


async def test_rename_onto_existing_name_conflicts(session, make_floor_plan, make_rack):
    floor_plan = await make_floor_plan()
    plan_id = floor_plan.id
    await make_rack(floor_plan, "Rack A")
    b = await make_rack(floor_plan, "Rack B")

    request = BulkUpdateRequest(racks=[RackEdit(id=b.id, name="Rack A", position_x=0, position_y=0)])
    with pytest.raises(ConflictError):
        await FloorPlanService(session).bulk_update(plan_id, request)


async def test_update_by_id_keeps_omitted_fields(session, make_floor_plan, make_rack):
    floor_plan = await make_floor_plan()
    plan_id = floor_plan.id
    rack = await make_rack(floor_plan, "Rack A", total_u=42, description="core")
    rack_id = rack.id

    request = BulkUpdateRequest(racks=[RackEdit(id=rack_id, name="Rack A", position_x=300, position_y=400)])
    await FloorPlanService(session).bulk_update(plan_id, request)

    result = await session.execute(select(Rack).where(Rack.id == rack_id))
    rack = result.scalar_one()
    assert (rack.position_x, rack.position_y) == (300, 400)
    assert rack.total_u == 42
    assert rack.description == "core"


async def test_update_element_by_id(session, make_floor_plan, make_element):
    floor_plan = await make_floor_plan()
    element = await make_element(floor_plan, z_index=5, is_visible=False)
    element_id = element.id

    moved = {"points": [[10, 10], [210, 10]], "thickness": 10}
    request = BulkUpdateRequest(elements=[ElementEdit(id=element_id, element_type="wall", properties=moved)])
    await FloorPlanService(session).bulk_update(floor_plan.id, request)

    result = await session.execute(select(FloorPlanElement).where(FloorPlanElement.id == element_id))
    element = result.scalar_one()
    assert element.properties == moved
    assert element.z_index == 5
    assert element.is_visible is False


async def test_unknown_update_id_aborts(session, make_floor_plan):
    floor_plan = await make_floor_plan(version=2)
    plan_id = floor_plan.id

    request = BulkUpdateRequest(
        racks=[RackEdit(name="New", position_x=0, position_y=0)],
        elements=[ElementEdit(id=uuid.uuid4(), element_type="wall", properties=WALL)],
    )
    with pytest.raises(NotFoundError):
        await FloorPlanService(session).bulk_update(plan_id, request)

    assert await current_version(session, plan_id) == 2
    assert await rack_names(session, plan_id) == []


async def test_unknown_floor_plan(session):
    with pytest.raises(NotFoundError):
        await FloorPlanService(session).bulk_update(uuid.uuid4(), BulkUpdateRequest())


async def test_deletes_are_scoped_to_the_plan(session, make_floor_plan, make_rack, make_element):
    plan_a = await make_floor_plan()
    plan_b = await make_floor_plan()
    plan_b_id = plan_b.id
    foreign_rack = await make_rack(plan_b, "Rack B")
    foreign_element = await make_element(plan_b)

    request = BulkUpdateRequest(
        deleted_rack_ids=[foreign_rack.id],
        deleted_element_ids=[foreign_element.id],
    )
    await FloorPlanService(session).bulk_update(plan_a.id, request)

    assert await rack_names(session, plan_b_id) == ["Rack B"]
    assert await element_count(session, plan_b_id) == 1
    assert await current_version(session, plan_b_id) == 1


async def test_updates_are_scoped_to_the_plan(session, make_floor_plan, make_rack):
    plan_a = await make_floor_plan()
    plan_b = await make_floor_plan()
    foreign_rack = await make_rack(plan_b, "Rack B")

    request = BulkUpdateRequest(racks=[RackEdit(id=foreign_rack.id, name="Stolen", position_x=0, position_y=0)])
    with pytest.raises(NotFoundError):
        await FloorPlanService(session).bulk_update(plan_a.id, request)


async def test_deleting_rack_removes_its_equipment(session, make_floor_plan, make_rack, make_equipment):
    floor_plan = await make_floor_plan()
    rack = await make_rack(floor_plan, "Rack A")
    await make_equipment(rack, "Server", 1, 2)

    await FloorPlanService(session).bulk_update(floor_plan.id, BulkUpdateRequest(deleted_rack_ids=[rack.id]))

    assert await session.scalar(select(func.count(Equipment.id))) == 0


async def test_shrinking_below_equipment_aborts(session, make_floor_plan, make_rack, make_equipment):
    floor_plan = await make_floor_plan()
    plan_id = floor_plan.id
    rack = await make_rack(floor_plan, "Rack A", total_u=10)
    rack_id = rack.id
    await make_equipment(rack, "Server", 8, 2)

    request = BulkUpdateRequest(racks=[RackEdit(id=rack_id, name="Rack A", position_x=0, position_y=0, total_u=6)])
    with pytest.raises(OutOfRangeError):
        await FloorPlanService(session).bulk_update(plan_id, request)

    assert await session.scalar(select(Rack.total_u).where(Rack.id == rack_id)) == 10


async def test_settings_present_in_request_are_applied(session, make_floor_plan):
    floor_plan = await make_floor_plan()
    plan_id = floor_plan.id

    await FloorPlanService(session).bulk_update(
        plan_id, BulkUpdateRequest(grid_size=20, background_color="#f0f0f0")
    )

    result = await session.execute(select(FloorPlan).where(FloorPlan.id == plan_id))
    floor_plan = result.scalar_one()
    assert floor_plan.grid_size == 20
    assert floor_plan.background_color == "#f0f0f0"
    assert floor_plan.canvas_width == 2000


async def test_expected_version_mismatch_is_rejected(session, make_floor_plan):
    floor_plan = await make_floor_plan(version=5)
    plan_id = floor_plan.id

    with pytest.raises(ConflictError) as exc_info:
        await FloorPlanService(session).bulk_update(
            plan_id,
            BulkUpdateRequest(expected_version=4, racks=[RackEdit(name="A", position_x=0, position_y=0)]),
        )

    assert exc_info.value.details == {"expected_version": 4, "current_version": 5}
    assert await current_version(session, plan_id) == 5
    assert await rack_names(session, plan_id) == []


async def test_expected_version_match_is_accepted(session, make_floor_plan):
    floor_plan = await make_floor_plan(version=5)

    response = await FloorPlanService(session).bulk_update(
        floor_plan.id, BulkUpdateRequest(expected_version=5)
    )
    assert response.version == 6


async def test_versions_are_strictly_increasing(session, make_floor_plan):
    floor_plan = await make_floor_plan()
    plan_id = floor_plan.id
    service = FloorPlanService(session)

    versions = []
    for i in range(3):
        response = await service.bulk_update(
            plan_id,
            BulkUpdateRequest(racks=[RackEdit(name=f"Rack {i}", position_x=0, position_y=0)]),
        )
        versions.append(response.version)

    assert versions == [2, 3, 4]


async def test_rename_chain_from_editor_saves(session, make_floor_plan, make_rack):
    floor_plan = await make_floor_plan()
    plan_id = floor_plan.id
    a = await make_rack(floor_plan, "a")
    b = await make_rack(floor_plan, "b")
    a_id, b_id = a.id, b.id
    service = FloorPlanService(session)

    editor = EditorSession.from_detail(await service.get_detail(floor_plan))
    editor.update_rack(str(b_id), name="x")
    editor.update_rack(str(a_id), name="b")
    request = editor.build_bulk_request()
    assert [r.name for r in request.racks] == ["b", "x"]

    response = await service.bulk_update(plan_id, request)

    assert response.version == 2
    assert await session.scalar(select(Rack.name).where(Rack.id == a_id)) == "b"
    assert await session.scalar(select(Rack.name).where(Rack.id == b_id)) == "x"


async def test_racks_can_swap_names(session, make_floor_plan, make_rack):
    floor_plan = await make_floor_plan()
    plan_id = floor_plan.id
    a = await make_rack(floor_plan, "Rack A")
    b = await make_rack(floor_plan, "Rack B")
    a_id, b_id = a.id, b.id

    request = BulkUpdateRequest(racks=[
        RackEdit(id=a_id, name="Rack B", position_x=0, position_y=0),
        RackEdit(id=b_id, name="Rack A", position_x=100, position_y=0),
    ])
    await FloorPlanService(session).bulk_update(plan_id, request)

    assert await session.scalar(select(Rack.name).where(Rack.id == a_id)) == "Rack B"
    assert await session.scalar(select(Rack.name).where(Rack.id == b_id)) == "Rack A"


async def test_new_rack_takes_name_freed_by_rename(session, make_floor_plan, make_rack):
    floor_plan = await make_floor_plan()
    plan_id = floor_plan.id
    a = await make_rack(floor_plan, "Rack A")

    request = BulkUpdateRequest(racks=[
        RackEdit(name="Rack A", position_x=0, position_y=0),
        RackEdit(id=a.id, name="Rack Z", position_x=100, position_y=0),
    ])
    await FloorPlanService(session).bulk_update(plan_id, request)

    assert await rack_names(session, plan_id) == ["Rack A", "Rack Z"]


async def test_two_renames_onto_one_name_conflict(session, make_floor_plan, make_rack):
    floor_plan = await make_floor_plan()
    plan_id = floor_plan.id
    a = await make_rack(floor_plan, "Rack A")
    b = await make_rack(floor_plan, "Rack B")

    request = BulkUpdateRequest(racks=[
        RackEdit(id=a.id, name="Rack C", position_x=0, position_y=0),
        RackEdit(id=b.id, name="Rack C", position_x=100, position_y=0),
    ])
    with pytest.raises(ConflictError):
        await FloorPlanService(session).bulk_update(plan_id, request)

    assert await rack_names(session, plan_id) == ["Rack A", "Rack B"]
    assert await current_version(session, plan_id) == 1


async def test_rack_updates_lock_rack_rows(session, make_floor_plan, make_rack, make_equipment, postgres_statements):
    floor_plan = await make_floor_plan()
    rack = await make_rack(floor_plan, "Rack A", total_u=10)
    await make_equipment(rack, "Server", 5, 2)
    postgres_statements.clear()

    request = BulkUpdateRequest(racks=[RackEdit(id=rack.id, name="Rack A", position_x=0, position_y=0, total_u=6)])
    await FloorPlanService(session).bulk_update(floor_plan.id, request)

    assert any("FROM racks" in s and "FOR UPDATE" in s for s in postgres_statements)
    assert await session.scalar(select(Rack.total_u).where(Rack.id == rack.id)) == 6
