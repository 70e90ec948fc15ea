# clicr/models/business.py
"""
Tenant root. One business owns many venues.
settings holds refresh interval, capacity alert thresholds and the reset rule.
"""

import uuid
from sqlalchemy import Column, String, DateTime, JSON
from clicr.database import Base

DEFAULT_BUSINESS_SETTINGS = {
    "refresh_interval_sec": 5,
    "capacity_thresholds": [80, 90, 100],
    "reset_rule": "MANUAL",
}


class Business(Base):
    __tablename__ = "businesses"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), nullable=False)
    timezone = Column(String(64), default="UTC", nullable=False)
    settings = Column(JSON, default=lambda: dict(DEFAULT_BUSINESS_SETTINGS))
    created_at = Column(DateTime)

    def __repr__(self):
        return f"<Business {self.id} name={self.name}>"
