import uuid

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event, select
from sqlalchemy.dialects import postgresql
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from rackplan.lib.database import Base, get_db
from rackplan.main import app
from rackplan.models import Equipment, Floor, FloorPlan, FloorPlanElement, Rack, Substation


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def postgres_statements(session):
    """ORM statements issued through ``session``, rendered for PostgreSQL."""
    statements = []

    def _capture(orm_execute_state):
        statements.append(str(orm_execute_state.statement.compile(dialect=postgresql.dialect())))

    event.listen(session.sync_session, "do_orm_execute", _capture)
    yield statements
    event.remove(session.sync_session, "do_orm_execute", _capture)


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def make_floor(session):
    async def _make_floor(name="1F"):
        result = await session.execute(select(Substation).where(Substation.code == "SS-01"))
        substation = result.scalar_one_or_none()
        if not substation:
            substation = Substation(name="Main Substation", code="SS-01")
            session.add(substation)
            await session.flush()
        floor = Floor(substation_id=substation.id, name=name)
        session.add(floor)
        await session.commit()
        return floor

    return _make_floor


@pytest.fixture
def make_floor_plan(session, make_floor):
    async def _make_floor_plan(version=1, floor_name=None):
        floor = await make_floor(floor_name or f"F-{uuid.uuid4().hex[:6]}")
        floor_plan = FloorPlan(
            floor_id=floor.id,
            name="Server Room",
            canvas_width=2000,
            canvas_height=1500,
            grid_size=10,
            major_grid_size=60,
            background_color="#ffffff",
            version=version,
        )
        session.add(floor_plan)
        await session.commit()
        return floor_plan

    return _make_floor_plan


@pytest.fixture
def make_rack(session):
    async def _make_rack(floor_plan, name="Rack A", total_u=10, **kwargs):
        rack = Rack(
            floor_plan_id=floor_plan.id,
            name=name,
            position_x=kwargs.pop("position_x", 100),
            position_y=kwargs.pop("position_y", 100),
            width=60,
            height=100,
            rotation=0,
            total_u=total_u,
            **kwargs,
        )
        session.add(rack)
        await session.commit()
        return rack

    return _make_rack


@pytest.fixture
def make_equipment(session):
    async def _make_equipment(rack, name, start_u, height_u=1):
        equipment = Equipment(rack_id=rack.id, name=name, start_u=start_u, height_u=height_u)
        session.add(equipment)
        await session.commit()
        return equipment

    return _make_equipment


@pytest.fixture
def make_element(session):
    async def _make_element(floor_plan, element_type="wall", properties=None, z_index=0, is_visible=True):
        element = FloorPlanElement(
            floor_plan_id=floor_plan.id,
            element_type=element_type,
            properties=properties or {"points": [[0, 0], [100, 0]], "thickness": 10},
            z_index=z_index,
            is_visible=is_visible,
        )
        session.add(element)
        await session.commit()
        return element

    return _make_element
