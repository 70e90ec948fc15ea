# clicr/models/count_event.py
"""
Immutable audit record of one occupancy change. Append-only; never edited or deleted.
Resets are recorded as MANUAL_RESET events with delta 0.
"""

import uuid
from sqlalchemy import Column, Integer, String, DateTime
from clicr.database import Base


class CountEvent(Base):
    __tablename__ = "occupancy_events"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    business_id = Column(String(36), index=True)
    venue_id = Column(String(36), nullable=False, index=True)
    area_id = Column(String(36), nullable=False, index=True)
    device_id = Column(String(36))
    user_id = Column(String(36))
    delta = Column(Integer, nullable=False)
    flow_type = Column(String(10), nullable=False)     # IN | OUT | RESET
    event_type = Column(String(20), nullable=False)    # TAP | SCAN | BULK | MANUAL_RESET
    timestamp = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<CountEvent {self.id} area={self.area_id} delta={self.delta} type={self.event_type}>"
