# clicr/schemas/commands.py
"""Sync command envelope and the payload of every named action."""

from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Literal, Optional

from clicr.schemas.id_document import ParsedDocument, ScanDecisionOut
from clicr.schemas.state import ScopedStateOut

EnforcementMode = Literal["WARN_ONLY", "HARD_STOP", "MANAGER_OVERRIDE"]
FlowMode = Literal["BIDIRECTIONAL", "IN_ONLY", "OUT_ONLY"]
Role = Literal["OWNER", "ADMIN", "SUPERVISOR", "USER"]


class SyncCommand(BaseModel):
    action: str
    payload: dict = {}
    venue_id: Optional[str] = None


class SyncResponse(BaseModel):
    state: ScopedStateOut
    admission: Optional[str] = None          # ALLOW | WARN | REQUIRE_OVERRIDE (confirmed)
    scan: Optional[ScanDecisionOut] = None


# ── Ledger ──────────────────────────────────────────────────────────────────
class RecordEventPayload(BaseModel):
    venue_id: str
    area_id: str
    device_id: Optional[str] = None
    delta: int
    flow_type: Optional[Literal["IN", "OUT"]] = None
    event_type: Literal["TAP", "SCAN", "BULK"] = "TAP"
    override_confirmed: bool = False
    override_reason: Optional[str] = None


class RecordScanPayload(BaseModel):
    venue_id: str
    area_id: Optional[str] = None
    device_id: Optional[str] = None
    document: ParsedDocument
    override_confirmed: bool = False
    override_reason: Optional[str] = None


class ResetCountsPayload(BaseModel):
    scope: Literal["AREA", "VENUE"]
    target_id: str


class CapacityOverrideCreate(BaseModel):
    venue_id: str
    area_id: Optional[str] = None
    capacity_value: int = Field(gt=0)
    start_datetime: datetime
    end_datetime: datetime
    reason: Optional[str] = None


# ── Structure ───────────────────────────────────────────────────────────────
class VenueCreate(BaseModel):
    id: Optional[str] = None
    business_id: Optional[str] = None
    business_name: Optional[str] = None      # only used when the caller has no business yet
    name: str = Field(min_length=1)
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: str = "US"
    timezone: str = "UTC"
    status: Literal["ACTIVE", "INACTIVE"] = "ACTIVE"
    default_capacity_total: Optional[int] = None
    capacity_enforcement_mode: EnforcementMode = "WARN_ONLY"


class VenueUpdate(BaseModel):
    id: str
    name: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    timezone: Optional[str] = None
    status: Optional[Literal["ACTIVE", "INACTIVE"]] = None
    default_capacity_total: Optional[int] = None
    capacity_enforcement_mode: Optional[EnforcementMode] = None


class AreaCreate(BaseModel):
    id: Optional[str] = None
    venue_id: str
    name: str = Field(min_length=1)
    area_type: str = "MAIN"
    default_capacity: Optional[int] = None
    counting_mode: Literal["MANUAL", "AUTO_FROM_SCANS", "BOTH"] = "MANUAL"
    is_active: bool = True


class AreaUpdate(BaseModel):
    id: str
    name: Optional[str] = None
    area_type: Optional[str] = None
    default_capacity: Optional[int] = None
    counting_mode: Optional[Literal["MANUAL", "AUTO_FROM_SCANS", "BOTH"]] = None
    is_active: Optional[bool] = None


class DeviceCreate(BaseModel):
    id: Optional[str] = None
    area_id: str
    name: str = Field(min_length=1)
    flow_mode: FlowMode = "BIDIRECTIONAL"
    button_config: Optional[dict] = None
    pairing_code: Optional[str] = None
    is_active: bool = True


class DeviceUpdate(BaseModel):
    id: str
    name: Optional[str] = None
    flow_mode: Optional[FlowMode] = None
    button_config: Optional[dict] = None
    is_active: Optional[bool] = None


class DeletePayload(BaseModel):
    id: str


class BusinessUpdate(BaseModel):
    name: Optional[str] = None
    timezone: Optional[str] = None
    settings: Optional[dict] = None


# ── Principals ──────────────────────────────────────────────────────────────
class UserCreate(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: Role = "USER"
    assigned_venue_ids: list[str] = []
    assigned_area_ids: list[str] = []
    assigned_device_ids: list[str] = []


class UserUpdate(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[Role] = None
    assigned_venue_ids: Optional[list[str]] = None
    assigned_area_ids: Optional[list[str]] = None
    assigned_device_ids: Optional[list[str]] = None


class StaffBanCreate(BaseModel):
    user_id: str
    scope_type: Literal["BUSINESS", "VENUE"]
    scope_venue_ids: list[str] = []
    status: Literal["SCHEDULED", "ACTIVE"] = "ACTIVE"
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    reason_category: str = "OTHER"
    reason_text: Optional[str] = None


class RevokeBanPayload(BaseModel):
    ban_id: str
    reason: Optional[str] = None


class BanEnforcementCreate(BaseModel):
    ban_id: str
    venue_id: str
    device_id: Optional[str] = None
    result: Literal["BLOCKED", "WARNED", "ALLOWED_OVERRIDE"]
    override_reason: Optional[str] = None
    notes: Optional[str] = None
    person_snapshot_name: Optional[str] = None


# ── Patron registry ─────────────────────────────────────────────────────────
class BannedPersonIn(BaseModel):
    id: Optional[str] = None
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    date_of_birth: Optional[date] = None
    id_type: str = "DRIVERS_LICENSE"
    id_number: Optional[str] = None
    issuing_state: Optional[str] = None
    aliases: list[str] = []
    notes_private: Optional[str] = None


class PatronBanIn(BaseModel):
    ban_type: Literal["TEMPORARY", "PERMANENT"] = "PERMANENT"
    start_datetime: Optional[datetime] = None
    end_datetime: Optional[datetime] = None
    reason_category: str
    reason_notes: Optional[str] = None
    incident_report_number: Optional[str] = None
    applies_to_all_locations: bool = False
    location_ids: list[str] = []


class PatronBanCreate(BaseModel):
    person: BannedPersonIn
    ban: PatronBanIn


class PatronBanUpdate(BaseModel):
    ban_id: str
    status: Optional[Literal["ACTIVE", "EXPIRED", "REMOVED"]] = None
    end_datetime: Optional[datetime] = None
    reason_notes: Optional[str] = None
    removed_reason: Optional[str] = None
