# clicr/models/profile.py
"""
Principal profile. The three assignment lists define what the user may see.
Ban cascades only ever shrink them.
"""

from sqlalchemy import Column, String, DateTime, JSON
from clicr.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True)
    business_id = Column(String(36), index=True)
    name = Column(String(200))
    email = Column(String(200))
    role = Column(String(20), default="USER", nullable=False)   # OWNER | ADMIN | SUPERVISOR | USER
    assigned_venue_ids = Column(JSON, default=list)
    assigned_area_ids = Column(JSON, default=list)
    assigned_device_ids = Column(JSON, default=list)
    created_at = Column(DateTime)

    def __repr__(self):
        return f"<Profile {self.id} role={self.role} venues={len(self.assigned_venue_ids or [])}>"
