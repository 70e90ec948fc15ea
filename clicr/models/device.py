# clicr/models/device.py
"""
Counting endpoint ("Clicr") bound to one area.
Identity and button config are persisted; the live tally is derived.
Deletion is soft (deleted_at) so historical events keep a valid device id.
"""

import uuid
from sqlalchemy import Column, String, DateTime, Boolean, JSON
from clicr.database import Base


class Device(Base):
    __tablename__ = "devices"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    business_id = Column(String(36), index=True)
    area_id = Column(String(36), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    device_type = Column(String(20), default="COUNTER_ONLY", nullable=False)
    flow_mode = Column(String(20), default="BIDIRECTIONAL", nullable=False)  # BIDIRECTIONAL | IN_ONLY | OUT_ONLY
    button_config = Column(JSON)
    pairing_code = Column(String(100))
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime)
    deleted_at = Column(DateTime)
    deleted_by = Column(String(36))

    def __repr__(self):
        return f"<Device {self.id} area={self.area_id} name={self.name}>"
