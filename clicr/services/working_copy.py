# clicr/services/working_copy.py
"""
The per-request working copy of the dataset, the keyed merge used to fold
store rows into it, and the best-effort cache of the last-known copy.

The working copy is a plain value passed Hydrator → Event Processor → Scope
Filter. The cache only exists so a partially failed hydration can fall back
to stale sections; it is never authoritative and is deep-copied both ways so
concurrent requests never share mutable entities.
"""

import copy
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from clicr.schemas.state import (
    AreaOut, BanEnforcementOut, BusinessOut, CapacityOverrideOut, CountEventOut, DeviceOut, ScanEventOut,
    UserOut, VenueOut,
)


@dataclass
class WorkingCopy:
    businesses: list[BusinessOut] = field(default_factory=list)
    venues: list[VenueOut] = field(default_factory=list)
    areas: list[AreaOut] = field(default_factory=list)
    devices: list[DeviceOut] = field(default_factory=list)
    events: list[CountEventOut] = field(default_factory=list)       # newest first
    scan_events: list[ScanEventOut] = field(default_factory=list)   # newest first
    capacity_overrides: list[CapacityOverrideOut] = field(default_factory=list)
    ban_enforcements: list[BanEnforcementOut] = field(default_factory=list)
    users: list[UserOut] = field(default_factory=list)
    degraded: list[str] = field(default_factory=list)
    hydrated_at: Optional[datetime] = None

    def venue(self, venue_id: str) -> Optional[VenueOut]:
        return next((v for v in self.venues if v.id == venue_id), None)

    def area(self, area_id: str) -> Optional[AreaOut]:
        return next((a for a in self.areas if a.id == area_id), None)

    def device(self, device_id: str) -> Optional[DeviceOut]:
        return next((d for d in self.devices if d.id == device_id), None)

    def user(self, user_id: str) -> Optional[UserOut]:
        return next((u for u in self.users if u.id == user_id), None)

    def business(self, business_id: Optional[str]) -> Optional[BusinessOut]:
        return next((b for b in self.businesses if b.id == business_id), None)

    def business_id_for_venue(self, venue_id: str) -> Optional[str]:
        venue = self.venue(venue_id)
        return venue.business_id if venue else None

    def venue_occupancy(self, venue_id: str) -> int:
        return sum(a.current_occupancy for a in self.areas if a.venue_id == venue_id)


def merge_by_id(current: list, incoming: list,
                on_match: Optional[Callable] = None,
                on_new: Optional[Callable] = None) -> list:
    """
    Keyed upsert of `incoming` into `current` by `.id`.

    Matching items are replaced at the same position, or handed to
    on_match(existing, incoming) to update selected fields in place.
    Unmatched incoming items are appended (through on_new when given).
    Items of `current` with no incoming counterpart are kept.
    """
    merged = list(current)
    positions = {item.id: pos for pos, item in enumerate(merged)}
    for item in incoming:
        pos = positions.get(item.id)
        if pos is None:
            merged.append(on_new(item) if on_new else item)
            positions[item.id] = len(merged) - 1
        elif on_match:
            on_match(merged[pos], item)
        else:
            merged[pos] = item
    return merged


class WorkingCopyCache:
    """Last-known working copy, kept on app.state."""

    def __init__(self):
        self._last: Optional[WorkingCopy] = None

    def load(self) -> Optional[WorkingCopy]:
        return copy.deepcopy(self._last) if self._last is not None else None

    def save(self, working: WorkingCopy):
        self._last = copy.deepcopy(working)
