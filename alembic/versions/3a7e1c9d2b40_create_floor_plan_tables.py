"""create_floor_plan_tables

Revision ID: 3a7e1c9d2b40
Revises:
Create Date: 2026-10-17

Creates the floor plan schema:
- substations, floors: parent hierarchy (owned by the inventory app)
- floor_plans: one per floor, canvas settings and version counter
- floor_plan_elements: walls, doors, windows, columns (JSONB payload)
- racks: name unique per floor plan
- equipment: U slot ranges inside a rack
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3a7e1c9d2b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # === SUBSTATIONS TABLE ===
    op.create_table(
        'substations',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('code', sa.String(20), nullable=False, unique=True),
        sa.Column('address', sa.String(255), nullable=True),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('sort_order', sa.Integer, server_default='0'),
        sa.Column('is_active', sa.Boolean, server_default='true'),
        sa.Column('created_at', sa.DateTime, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.DateTime, server_default=sa.text('NOW()')),
    )

    # === FLOORS TABLE ===
    op.create_table(
        'floors',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('substation_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('substations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('floor_number', sa.String(20), nullable=True),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('sort_order', sa.Integer, server_default='0'),
        sa.Column('is_active', sa.Boolean, server_default='true'),
        sa.Column('created_at', sa.DateTime, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.DateTime, server_default=sa.text('NOW()')),
        sa.UniqueConstraint('substation_id', 'name', name='uq_floor_name'),
    )

    # === FLOOR PLANS TABLE ===
    op.create_table(
        'floor_plans',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('floor_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('floors.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('canvas_width', sa.Integer, nullable=False, server_default='2000'),
        sa.Column('canvas_height', sa.Integer, nullable=False, server_default='1500'),
        sa.Column('grid_size', sa.Integer, nullable=False, server_default='20'),
        sa.Column('major_grid_size', sa.Integer, nullable=False, server_default='60'),
        sa.Column('background_color', sa.String(20), nullable=False, server_default='#ffffff'),
        sa.Column('version', sa.Integer, nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.DateTime, server_default=sa.text('NOW()')),
    )

    # === FLOOR PLAN ELEMENTS TABLE ===
    op.create_table(
        'floor_plan_elements',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('floor_plan_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('floor_plans.id', ondelete='CASCADE'), nullable=False),
        sa.Column('element_type', sa.String(20), nullable=False),
        sa.Column('properties', postgresql.JSONB, nullable=False),
        sa.Column('z_index', sa.Integer, nullable=False, server_default='0'),
        sa.Column('is_visible', sa.Boolean, nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.DateTime, server_default=sa.text('NOW()')),
    )
    op.create_index('ix_floor_plan_elements_plan', 'floor_plan_elements', ['floor_plan_id'])

    # === RACKS TABLE ===
    op.create_table(
        'racks',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('floor_plan_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('floor_plans.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('code', sa.String(50), nullable=True),
        sa.Column('position_x', sa.Float, nullable=False),
        sa.Column('position_y', sa.Float, nullable=False),
        sa.Column('width', sa.Float, nullable=False, server_default='60'),
        sa.Column('height', sa.Float, nullable=False, server_default='100'),
        sa.Column('rotation', sa.Integer, nullable=False, server_default='0'),
        sa.Column('total_u', sa.Integer, nullable=False, server_default='12'),
        sa.Column('front_image_url', sa.String(500), nullable=True),
        sa.Column('rear_image_url', sa.String(500), nullable=True),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('sort_order', sa.Integer, nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.DateTime, server_default=sa.text('NOW()')),
        sa.UniqueConstraint('floor_plan_id', 'name', name='uq_rack_name'),
        sa.CheckConstraint('total_u >= 1', name='ck_rack_total_u_positive'),
    )
    op.create_index('ix_racks_floor_plan', 'racks', ['floor_plan_id'])

    # === EQUIPMENT TABLE ===
    op.create_table(
        'equipment',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('rack_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('racks.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('model', sa.String(100), nullable=True),
        sa.Column('manufacturer', sa.String(100), nullable=True),
        sa.Column('serial_number', sa.String(100), nullable=True),
        sa.Column('start_u', sa.Integer, nullable=False),
        sa.Column('height_u', sa.Integer, nullable=False, server_default='1'),
        sa.Column('category', sa.String(20), nullable=False, server_default='OTHER'),
        sa.Column('install_date', sa.Date, nullable=True),
        sa.Column('manager', sa.String(100), nullable=True),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('properties', postgresql.JSONB, nullable=True),
        sa.Column('sort_order', sa.Integer, nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.DateTime, server_default=sa.text('NOW()')),
    )
    op.create_index('ix_equipment_rack', 'equipment', ['rack_id'])


def downgrade() -> None:
    op.drop_index('ix_equipment_rack', table_name='equipment')
    op.drop_table('equipment')
    op.drop_index('ix_racks_floor_plan', table_name='racks')
    op.drop_table('racks')
    op.drop_index('ix_floor_plan_elements_plan', table_name='floor_plan_elements')
    op.drop_table('floor_plan_elements')
    op.drop_table('floor_plans')
    op.drop_table('floors')
    op.drop_table('substations')
