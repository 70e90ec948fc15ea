# clicr/schemas/state.py
"""
Working-copy entities and the scope-filtered state returned to callers.
All entities validate straight from ORM rows (from_attributes).
"""

from pydantic import BaseModel, field_validator
from datetime import date, datetime
from typing import Optional


class BusinessOut(BaseModel):
    id: str
    name: str
    timezone: str = "UTC"
    settings: dict = {}

    @field_validator("settings", mode="before")
    @classmethod
    def _settings_default(cls, value):
        return value or {}

    class Config:
        from_attributes = True


class VenueOut(BaseModel):
    id: str
    business_id: str
    name: str
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    timezone: str = "UTC"
    status: str = "ACTIVE"
    default_capacity_total: Optional[int] = None
    capacity_enforcement_mode: str = "WARN_ONLY"

    class Config:
        from_attributes = True


class AreaOut(BaseModel):
    id: str
    venue_id: str
    name: str
    area_type: str = "MAIN"
    default_capacity: Optional[int] = None
    counting_mode: str = "MANUAL"
    is_active: bool = True
    current_occupancy: int = 0     # overlaid from occupancy_snapshots during hydration

    class Config:
        from_attributes = True


class DeviceOut(BaseModel):
    id: str
    area_id: str
    name: str
    flow_mode: str = "BIDIRECTIONAL"
    button_config: Optional[dict] = None
    is_active: bool = True
    current_count: int = 0         # live tally, local only

    class Config:
        from_attributes = True


class CountEventOut(BaseModel):
    id: str
    business_id: Optional[str] = None
    venue_id: str
    area_id: str
    device_id: Optional[str] = None
    user_id: Optional[str] = None
    delta: int
    flow_type: str
    event_type: str
    timestamp: datetime

    class Config:
        from_attributes = True


class ScanEventOut(BaseModel):
    id: str
    venue_id: str
    area_id: Optional[str] = None
    timestamp: datetime
    scan_result: str
    denial_reason: Optional[str] = None
    age: Optional[int] = None
    age_band: Optional[str] = None
    sex: Optional[str] = None
    zip_code: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    dob: Optional[str] = None
    id_number_last4: Optional[str] = None
    issuing_state: Optional[str] = None

    class Config:
        from_attributes = True


class UserOut(BaseModel):
    id: str
    business_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    role: str = "USER"
    assigned_venue_ids: list[str] = []
    assigned_area_ids: list[str] = []
    assigned_device_ids: list[str] = []

    @field_validator("assigned_venue_ids", "assigned_area_ids", "assigned_device_ids", mode="before")
    @classmethod
    def _list_default(cls, value):
        return list(value or [])

    class Config:
        from_attributes = True


class StaffBanOut(BaseModel):
    id: str
    business_id: Optional[str] = None
    user_id: str
    scope_type: str
    scope_venue_ids: list[str] = []
    status: str
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    reason_category: Optional[str] = None
    reason_text: Optional[str] = None

    @field_validator("scope_venue_ids", mode="before")
    @classmethod
    def _list_default(cls, value):
        return list(value or [])

    class Config:
        from_attributes = True


class BannedPersonOut(BaseModel):
    id: str
    business_id: Optional[str] = None
    first_name: str
    last_name: str
    date_of_birth: Optional[date] = None
    id_number: Optional[str] = None
    issuing_state: Optional[str] = None

    class Config:
        from_attributes = True


class PatronBanOut(BaseModel):
    id: str
    banned_person_id: str
    business_id: Optional[str] = None
    status: str
    ban_type: str
    start_datetime: Optional[datetime] = None
    end_datetime: Optional[datetime] = None
    reason_category: str
    applies_to_all_locations: bool = False
    location_ids: list[str] = []

    @field_validator("location_ids", mode="before")
    @classmethod
    def _list_default(cls, value):
        return list(value or [])

    class Config:
        from_attributes = True


class CapacityAlertOut(BaseModel):
    id: str
    venue_id: str
    area_id: Optional[str] = None
    threshold: int
    occupancy: int
    capacity: int
    description: Optional[str] = None
    is_resolved: int
    triggered_at: datetime

    class Config:
        from_attributes = True


class CapacityOverrideOut(BaseModel):
    id: str
    venue_id: str
    area_id: Optional[str] = None
    override_type: str
    capacity_value: Optional[int] = None
    occupancy_at_override: Optional[int] = None
    start_datetime: datetime
    end_datetime: Optional[datetime] = None
    reason: Optional[str] = None
    created_by_user_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class BanEnforcementOut(BaseModel):
    id: str
    ban_id: str
    venue_id: str
    device_id: Optional[str] = None
    scanner_user_id: Optional[str] = None
    scan_datetime: datetime
    result: str
    override_reason: Optional[str] = None
    notes: Optional[str] = None
    person_snapshot_name: Optional[str] = None

    class Config:
        from_attributes = True


class ScopedStateOut(BaseModel):
    business: Optional[BusinessOut] = None
    venues: list[VenueOut] = []
    areas: list[AreaOut] = []
    devices: list[DeviceOut] = []
    events: list[CountEventOut] = []
    scan_events: list[ScanEventOut] = []
    capacity_overrides: list[CapacityOverrideOut] = []
    ban_enforcements: list[BanEnforcementOut] = []
    users: list[UserOut] = []
    current_user: Optional[UserOut] = None
    degraded: list[str] = []       # hydration sections served from the last-known copy
