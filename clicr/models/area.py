# clicr/models/area.py
"""
A zone inside a venue (e.g. "Main Floor").
Occupancy is NOT stored here: it lives in occupancy_snapshots.
"""

import uuid
from sqlalchemy import Column, Integer, String, DateTime, Boolean
from clicr.database import Base


class Area(Base):
    __tablename__ = "areas"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    venue_id = Column(String(36), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    area_type = Column(String(20), default="MAIN", nullable=False)     # ENTRY | MAIN | PATIO | VIP | BAR | ...
    default_capacity = Column(Integer)
    counting_mode = Column(String(20), default="MANUAL", nullable=False)  # MANUAL | AUTO_FROM_SCANS | BOTH
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime)
    updated_at = Column(DateTime)

    def __repr__(self):
        return f"<Area {self.id} venue={self.venue_id} name={self.name}>"
