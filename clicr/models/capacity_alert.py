# clicr/models/capacity_alert.py
"""
Capacity alerts: one row each time a venue crosses a business threshold (e.g. 80/90/100%).
Written by services/alert_service.py.
"""

import uuid
from sqlalchemy import Column, Integer, String, DateTime, Text
from clicr.database import Base


class CapacityAlert(Base):
    __tablename__ = "capacity_alerts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    business_id = Column(String(36), index=True)
    venue_id = Column(String(36), nullable=False, index=True)
    area_id = Column(String(36))
    threshold = Column(Integer, nullable=False)
    occupancy = Column(Integer, nullable=False)
    capacity = Column(Integer, nullable=False)
    description = Column(Text)
    is_resolved = Column(Integer, default=0, nullable=False)
    triggered_at = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<CapacityAlert {self.id} venue={self.venue_id} threshold={self.threshold}%>"
