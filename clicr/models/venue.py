# clicr/models/venue.py
"""
Physical location owned by a business. Owns many areas.
default_capacity_total + capacity_enforcement_mode drive the capacity policy.
"""

import uuid
from sqlalchemy import Column, Integer, String, DateTime
from clicr.database import Base


class Venue(Base):
    __tablename__ = "venues"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    business_id = Column(String(36), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    address_line1 = Column(String(200))
    address_line2 = Column(String(200))
    city = Column(String(100))
    state = Column(String(50))
    postal_code = Column(String(20))
    country = Column(String(50), default="US")
    timezone = Column(String(64), default="UTC", nullable=False)
    status = Column(String(20), default="ACTIVE", nullable=False)          # ACTIVE | INACTIVE
    default_capacity_total = Column(Integer)                                # <= 0 or NULL → no limit
    capacity_enforcement_mode = Column(String(20), default="WARN_ONLY", nullable=False)
    created_at = Column(DateTime)
    updated_at = Column(DateTime)

    def __repr__(self):
        return f"<Venue {self.id} name={self.name} cap={self.default_capacity_total}>"
