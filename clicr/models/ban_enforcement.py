# clicr/models/ban_enforcement.py
"""
What the door did about a banned patron: BLOCKED, WARNED or ALLOWED_OVERRIDE.
A BANNED scan writes a BLOCKED row automatically; staff record the other outcomes.
"""

import uuid
from sqlalchemy import Column, String, DateTime, Text
from clicr.database import Base


class BanEnforcementEvent(Base):
    __tablename__ = "ban_enforcement_events"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    business_id = Column(String(36), index=True)
    ban_id = Column(String(36), nullable=False, index=True)
    venue_id = Column(String(36), nullable=False, index=True)
    device_id = Column(String(36))
    scanner_user_id = Column(String(36))
    scan_datetime = Column(DateTime, nullable=False, index=True)
    result = Column(String(20), nullable=False)        # BLOCKED | WARNED | ALLOWED_OVERRIDE
    override_reason = Column(Text)
    notes = Column(Text)
    person_snapshot_name = Column(String(200))

    def __repr__(self):
        return f"<BanEnforcementEvent {self.id} ban={self.ban_id} result={self.result}>"
