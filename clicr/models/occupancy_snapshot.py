# clicr/models/occupancy_snapshot.py
"""
Authoritative headcount per area: one row per area.
Mutated only by the atomic event procedure or an explicit reset.
Events are the audit trail; this row is the truth.
"""

from sqlalchemy import Column, Integer, String, DateTime
from clicr.database import Base


class OccupancySnapshot(Base):
    __tablename__ = "occupancy_snapshots"

    area_id = Column(String(36), primary_key=True)
    business_id = Column(String(36))
    venue_id = Column(String(36), nullable=False, index=True)
    current_occupancy = Column(Integer, default=0, nullable=False)
    last_event_id = Column(String(36))
    updated_at = Column(DateTime)

    def __repr__(self):
        return f"<OccupancySnapshot area={self.area_id} occ={self.current_occupancy}>"
