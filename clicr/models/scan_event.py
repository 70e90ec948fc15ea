# clicr/models/scan_event.py
"""
One identity document scan. PII columns stay NULL when the issuing
state's compliance rule forbids storing them (see services/compliance.py).
"""

import uuid
from sqlalchemy import Column, Integer, String, DateTime
from clicr.database import Base


class ScanEvent(Base):
    __tablename__ = "scan_events"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    business_id = Column(String(36), index=True)
    venue_id = Column(String(36), nullable=False, index=True)
    area_id = Column(String(36))
    device_id = Column(String(36))
    user_id = Column(String(36))
    timestamp = Column(DateTime, nullable=False, index=True)
    scan_result = Column(String(20), nullable=False)   # ACCEPTED | DENIED
    denial_reason = Column(String(50))
    age = Column(Integer)
    age_band = Column(String(20))
    sex = Column(String(5))
    zip_code = Column(String(20))
    # PII: optional, policy dependent
    first_name = Column(String(100))
    last_name = Column(String(100))
    dob = Column(String(10))
    id_number_last4 = Column(String(4))
    issuing_state = Column(String(10))
    city = Column(String(100))
    address_street = Column(String(200))

    def __repr__(self):
        return f"<ScanEvent {self.id} venue={self.venue_id} result={self.scan_result}>"
