import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Float, DateTime, Text, ForeignKey, UniqueConstraint, CheckConstraint, Index, Uuid
from sqlalchemy.orm import relationship

from rackplan.lib.database import Base


class Rack(Base):
    __tablename__ = "racks"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    floor_plan_id = Column(Uuid(as_uuid=True), ForeignKey("floor_plans.id", ondelete="CASCADE"), nullable=False)

    name = Column(String(100), nullable=False)  # unique per floor plan, case-sensitive
    code = Column(String(50), nullable=True)

    # Placement on the plan (pixels, degrees)
    position_x = Column(Float, nullable=False)
    position_y = Column(Float, nullable=False)
    width = Column(Float, nullable=False, default=60)
    height = Column(Float, nullable=False, default=100)
    rotation = Column(Integer, nullable=False, default=0)

    total_u = Column(Integer, nullable=False, default=12)

    front_image_url = Column(String(500), nullable=True)
    rear_image_url = Column(String(500), nullable=True)
    description = Column(Text, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    floor_plan = relationship("FloorPlan", back_populates="racks")
    equipment = relationship("Equipment", back_populates="rack", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint('floor_plan_id', 'name', name='uq_rack_name'),
        CheckConstraint('total_u >= 1', name='ck_rack_total_u_positive'),
        Index('ix_racks_floor_plan', 'floor_plan_id'),
    )
