# clicr/models/capacity_override.py
"""
Capacity overrides on a venue (or one area).

SCHEDULED rows are planned windows entered by an owner/admin (ADD_CAPACITY_OVERRIDE).
DOOR rows are written when a manager confirms an entry past capacity at a
MANAGER_OVERRIDE venue: who let the patron in, when, and at what occupancy.
Both are records only; the admission decision reads the venue's capacity.
"""

import uuid
from sqlalchemy import Column, Integer, String, DateTime, Text
from clicr.database import Base


class CapacityOverride(Base):
    __tablename__ = "capacity_overrides"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    business_id = Column(String(36), index=True)
    venue_id = Column(String(36), nullable=False, index=True)
    area_id = Column(String(36))                                   # NULL → whole venue
    override_type = Column(String(20), default="SCHEDULED", nullable=False)  # SCHEDULED | DOOR
    capacity_value = Column(Integer)
    occupancy_at_override = Column(Integer)                        # DOOR only
    start_datetime = Column(DateTime, nullable=False)
    end_datetime = Column(DateTime)
    reason = Column(Text)
    created_by_user_id = Column(String(36))
    created_at = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<CapacityOverride {self.id} venue={self.venue_id} type={self.override_type}>"
