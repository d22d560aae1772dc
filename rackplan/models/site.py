"""
Substation and floor hierarchy.

Both are owned by the surrounding inventory application; this service only
needs them as the parents floor plans hang off.
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Boolean, DateTime, Text, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from rackplan.lib.database import Base


class Substation(Base):
    __tablename__ = "substations"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    code = Column(String(20), unique=True, nullable=False)
    address = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    sort_order = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    floors = relationship("Floor", back_populates="substation", cascade="all, delete-orphan")


class Floor(Base):
    __tablename__ = "floors"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    substation_id = Column(Uuid(as_uuid=True), ForeignKey("substations.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(100), nullable=False)
    floor_number = Column(String(20), nullable=True)  # "B1", "3F"
    description = Column(Text, nullable=True)
    sort_order = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    substation = relationship("Substation", back_populates="floors")
    floor_plan = relationship("FloorPlan", back_populates="floor", uselist=False, cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint('substation_id', 'name', name='uq_floor_name'),
    )
