import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from rackplan.lib.database import Base


class FloorPlan(Base):
    __tablename__ = "floor_plans"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    floor_id = Column(Uuid(as_uuid=True), ForeignKey("floors.id", ondelete="CASCADE"), unique=True, nullable=False)
    name = Column(String(100), nullable=False)

    # Canvas settings (pixels)
    canvas_width = Column(Integer, nullable=False, default=2000)
    canvas_height = Column(Integer, nullable=False, default=1500)
    grid_size = Column(Integer, nullable=False, default=20)
    major_grid_size = Column(Integer, nullable=False, default=60)
    background_color = Column(String(20), nullable=False, default="#ffffff")

    # Bumped once per saved batch; informational for clients
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    floor = relationship("Floor", back_populates="floor_plan")
    elements = relationship(
        "FloorPlanElement",
        back_populates="floor_plan",
        cascade="all, delete-orphan",
        order_by="FloorPlanElement.z_index",
    )
    racks = relationship(
        "Rack",
        back_populates="floor_plan",
        cascade="all, delete-orphan",
        order_by="Rack.sort_order",
    )
