import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship

from rackplan.lib.database import Base, JSONDocument


class FloorPlanElement(Base):
    __tablename__ = "floor_plan_elements"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    floor_plan_id = Column(Uuid(as_uuid=True), ForeignKey("floor_plans.id", ondelete="CASCADE"), nullable=False)

    element_type = Column(String(20), nullable=False)  # wall, door, window, column, ...
    properties = Column(JSONDocument, nullable=False)  # shape depends on element_type, stored as-is

    z_index = Column(Integer, nullable=False, default=0)
    is_visible = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    floor_plan = relationship("FloorPlan", back_populates="elements")

    __table_args__ = (
        Index('ix_floor_plan_elements_plan', 'floor_plan_id'),
    )
