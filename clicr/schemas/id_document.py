# clicr/schemas/id_document.py
"""Parsed identity document (produced by the scanner) and evaluation results."""

from pydantic import BaseModel
from datetime import date
from typing import Optional

from clicr.schemas.state import BannedPersonOut, PatronBanOut


class ParsedDocument(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    expiration_date: Optional[date] = None
    id_number: Optional[str] = None
    issuing_state: Optional[str] = None
    sex: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    address_street: Optional[str] = None
    # Scanner-computed values win when present
    age: Optional[int] = None
    is_expired: Optional[bool] = None

    def resolved_age(self, today: date) -> Optional[int]:
        if self.age is not None:
            return self.age
        if self.date_of_birth is None:
            return None
        dob = self.date_of_birth
        return today.year - dob.year - ((today.month, today.day) < (dob.month, dob.day))

    def expired(self, today: date) -> bool:
        if self.is_expired is not None:
            return self.is_expired
        return self.expiration_date is not None and self.expiration_date < today


class BanMatchOut(BaseModel):
    person: BannedPersonOut
    ban: PatronBanOut
    confidence: str            # HARD | SOFT


class ScanDecisionOut(BaseModel):
    status: str                # ACCEPTED | DENIED
    reason: Optional[str] = None   # UNDERAGE | EXPIRED_ID | BANNED
    message: str
    age: Optional[int] = None
    match: Optional[BanMatchOut] = None


class EvaluateRequest(BaseModel):
    venue_id: str
    document: ParsedDocument


class EvaluateResponse(BaseModel):
    decision: ScanDecisionOut
    review_matches: list[BanMatchOut] = []
