# clicr/services/access_scope.py
"""
Access Scope Filter: reduces the full working copy to what one principal may see.

Venue assignment is the root of visibility: areas are kept by venue membership
(not the user's stored area list) and devices by the kept areas. Activity records
(count events, scans, overrides, ban enforcements) are kept by venue.
Other staff are only visible when they share a venue.
"""

from clicr.schemas.state import ScopedStateOut, UserOut
from clicr.services.working_copy import WorkingCopy


def filter_state(user: UserOut, working: WorkingCopy) -> ScopedStateOut:
    visible_venue_ids = set(user.assigned_venue_ids)

    venues = [v for v in working.venues if v.id in visible_venue_ids]
    areas = [a for a in working.areas if a.venue_id in visible_venue_ids]
    visible_area_ids = {a.id for a in areas}
    devices = [d for d in working.devices if d.area_id in visible_area_ids]
    events = [e for e in working.events if e.venue_id in visible_venue_ids]
    scans = [s for s in working.scan_events if s.venue_id in visible_venue_ids]
    overrides = [o for o in working.capacity_overrides if o.venue_id in visible_venue_ids]
    enforcements = [b for b in working.ban_enforcements if b.venue_id in visible_venue_ids]
    users = [u for u in working.users
             if u.id == user.id or visible_venue_ids.intersection(u.assigned_venue_ids)]

    return ScopedStateOut(
        business=working.business(user.business_id),
        venues=venues,
        areas=areas,
        devices=devices,
        events=events,
        scan_events=scans,
        capacity_overrides=overrides,
        ban_enforcements=enforcements,
        users=users,
        current_user=user,
        degraded=list(working.degraded),
    )
