# clicr/models/patron.py
"""
Patron ban registry.
BannedPerson is keyed by name + DOB and/or id number + issuing state.
PatronBan applies to all of a business's locations or to an explicit venue list.
"""

import uuid
from sqlalchemy import Column, String, DateTime, Date, Boolean, Text, JSON
from clicr.database import Base


class BannedPerson(Base):
    __tablename__ = "banned_persons"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    business_id = Column(String(36), index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, index=True)
    date_of_birth = Column(Date)
    id_type = Column(String(30), default="DRIVERS_LICENSE")
    id_number = Column(String(50), index=True)
    issuing_state = Column(String(10))
    aliases = Column(JSON, default=list)
    notes_private = Column(Text)
    created_at = Column(DateTime)
    updated_at = Column(DateTime)

    def __repr__(self):
        return f"<BannedPerson {self.id} {self.first_name} {self.last_name}>"


class PatronBan(Base):
    __tablename__ = "patron_bans"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    banned_person_id = Column(String(36), nullable=False, index=True)
    business_id = Column(String(36), index=True)
    status = Column(String(20), default="ACTIVE", nullable=False)   # ACTIVE | EXPIRED | REMOVED
    ban_type = Column(String(20), default="PERMANENT", nullable=False)  # TEMPORARY | PERMANENT
    start_datetime = Column(DateTime)
    end_datetime = Column(DateTime)
    reason_category = Column(String(50), nullable=False)
    reason_notes = Column(Text)
    incident_report_number = Column(String(100))
    applies_to_all_locations = Column(Boolean, default=False, nullable=False)
    location_ids = Column(JSON, default=list)
    created_by_user_id = Column(String(36))
    removed_by_user_id = Column(String(36))
    removed_reason = Column(Text)
    created_at = Column(DateTime)
    updated_at = Column(DateTime)

    def __repr__(self):
        return f"<PatronBan {self.id} person={self.banned_person_id} status={self.status}>"
