# clicr/models/staff_ban.py
"""
Ban on a staff principal, scoped to the whole business or to a list of venues.
Recording an ACTIVE ban cascades into the profile's assignment lists.
Revocation is a status change only.
"""

import uuid
from sqlalchemy import Column, String, DateTime, Text, JSON
from clicr.database import Base


class StaffBan(Base):
    __tablename__ = "staff_bans"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    business_id = Column(String(36), index=True)
    user_id = Column(String(36), nullable=False, index=True)
    scope_type = Column(String(20), nullable=False)         # BUSINESS | VENUE
    scope_venue_ids = Column(JSON, default=list)             # empty for BUSINESS scope
    status = Column(String(20), default="ACTIVE", nullable=False)  # SCHEDULED | ACTIVE | EXPIRED | REVOKED
    starts_at = Column(DateTime)
    ends_at = Column(DateTime)                               # NULL → permanent
    reason_category = Column(String(50))
    reason_text = Column(Text)
    created_by_user_id = Column(String(36))
    created_at = Column(DateTime)
    revoked_by_user_id = Column(String(36))
    revoked_at = Column(DateTime)
    revoked_reason = Column(Text)

    def __repr__(self):
        return f"<StaffBan {self.id} user={self.user_id} scope={self.scope_type} status={self.status}>"
