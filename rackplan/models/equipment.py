import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Date, DateTime, Text, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship

from rackplan.lib.database import Base, JSONDocument


class Equipment(Base):
    __tablename__ = "equipment"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    rack_id = Column(Uuid(as_uuid=True), ForeignKey("racks.id", ondelete="CASCADE"), nullable=False)

    name = Column(String(100), nullable=False)
    model = Column(String(100), nullable=True)
    manufacturer = Column(String(100), nullable=True)
    serial_number = Column(String(100), nullable=True)

    # Occupies [start_u, start_u + height_u - 1]; overlap is checked by the slot allocator
    start_u = Column(Integer, nullable=False)
    height_u = Column(Integer, nullable=False, default=1)

    category = Column(String(20), nullable=False, default="OTHER")  # SERVER, NETWORK, STORAGE, POWER, SECURITY, OTHER
    install_date = Column(Date, nullable=True)
    manager = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    properties = Column(JSONDocument, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    rack = relationship("Rack", back_populates="equipment")

    __table_args__ = (
        Index('ix_equipment_rack', 'rack_id'),
    )
