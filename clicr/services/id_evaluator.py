# clicr/services/id_evaluator.py
"""
Identity Document Evaluator & Ban Registry Matcher.

evaluate() runs the door checks in order, first failure wins:
  1. age known and under MINIMUM_ENTRY_AGE → DENIED / UNDERAGE
  2. document expired                      → DENIED / EXPIRED_ID
  3. active in-scope patron ban            → DENIED / BANNED
  4. otherwise                             → ACCEPTED

Ban lookup tries the strict key (id number + issuing state) before the fuzzy
key (first + last name + DOB, names case-insensitive).

review_matches() is for the enforcement screen: name-only candidates tiered
HARD (DOB present and identical on both records) or SOFT (needs a human).
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from clicr.config import settings
from clicr.schemas.id_document import BanMatchOut, ParsedDocument, ScanDecisionOut
from clicr.schemas.state import BannedPersonOut, PatronBanOut

ACCEPTED = "ACCEPTED"
DENIED = "DENIED"

UNDERAGE = "UNDERAGE"
EXPIRED_ID = "EXPIRED_ID"
BANNED = "BANNED"

HARD = "HARD"
SOFT = "SOFT"


@dataclass
class BanMatch:
    person: object
    ban: object
    confidence: str

    def to_schema(self) -> BanMatchOut:
        return BanMatchOut(person=BannedPersonOut.model_validate(self.person),
                           ban=PatronBanOut.model_validate(self.ban),
                           confidence=self.confidence)


def _same_name(person, document: ParsedDocument) -> bool:
    if not document.first_name or not document.last_name:
        return False
    return (person.first_name.lower() == document.first_name.lower()
            and person.last_name.lower() == document.last_name.lower())


def active_ban_for(person_id: str, bans, venue_id: str, now: datetime):
    """First ACTIVE ban on the person that covers the venue and has not lapsed."""
    for ban in bans:
        if ban.banned_person_id != person_id or ban.status != "ACTIVE":
            continue
        if not (ban.applies_to_all_locations or venue_id in (ban.location_ids or [])):
            continue
        if ban.ban_type == "TEMPORARY" and ban.end_datetime is not None and ban.end_datetime <= now:
            continue
        return ban
    return None


def find_matching_ban(document: ParsedDocument, patrons, bans, venue_id: str,
                      now: Optional[datetime] = None) -> Optional[BanMatch]:
    now = now or datetime.utcnow()

    # Strict: id number + issuing state
    if document.id_number and document.issuing_state:
        for person in patrons:
            if (person.id_number == document.id_number
                    and person.issuing_state == document.issuing_state):
                ban = active_ban_for(person.id, bans, venue_id, now)
                if ban:
                    return BanMatch(person, ban, HARD)

    # Fuzzy: name + DOB
    if document.date_of_birth:
        for person in patrons:
            if _same_name(person, document) and person.date_of_birth == document.date_of_birth:
                ban = active_ban_for(person.id, bans, venue_id, now)
                if ban:
                    return BanMatch(person, ban, HARD)
    return None


def match_confidence(person, document: ParsedDocument) -> str:
    if person.date_of_birth and document.date_of_birth and person.date_of_birth == document.date_of_birth:
        return HARD
    return SOFT


def review_matches(document: ParsedDocument, patrons, bans, venue_id: str,
                   now: Optional[datetime] = None) -> list[BanMatch]:
    now = now or datetime.utcnow()
    matches = []
    for person in patrons:
        if not _same_name(person, document):
            continue
        ban = active_ban_for(person.id, bans, venue_id, now)
        if ban:
            matches.append(BanMatch(person, ban, match_confidence(person, document)))
    matches.sort(key=lambda m: m.confidence != HARD)
    return matches


def evaluate(document: ParsedDocument, patrons, bans, venue_id: str,
             now: Optional[datetime] = None) -> ScanDecisionOut:
    now = now or datetime.utcnow()
    age = document.resolved_age(now.date())

    if age is not None and age < settings.MINIMUM_ENTRY_AGE:
        return ScanDecisionOut(status=DENIED, reason=UNDERAGE, message=f"UNDERAGE ({age})", age=age)

    if document.expired(now.date()):
        return ScanDecisionOut(status=DENIED, reason=EXPIRED_ID, message="EXPIRED ID", age=age)

    match = find_matching_ban(document, patrons, bans, venue_id, now)
    if match:
        return ScanDecisionOut(status=DENIED, reason=BANNED,
                               message=f"BANNED: {match.ban.reason_category}",
                               age=age, match=match.to_schema())

    return ScanDecisionOut(status=ACCEPTED, message="Entry Allowed", age=age)


def age_band(age: Optional[int]) -> str:
    if age is None:
        return "Unknown"
    if age < 18:
        return "Under 18"
    if age < 21:
        return "18-20"
    if age < 25:
        return "21-24"
    if age < 30:
        return "25-29"
    if age < 40:
        return "30-39"
    return "40+"
