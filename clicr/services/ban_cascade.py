# clicr/services/ban_cascade.py
"""
Staff ban handling: the assignment cascade and the "is this principal banned
here" lookup used before any occupancy mutation.

A ban only ever removes ids. Revoking a ban does not restore them;
re-assignment is a separate, explicit UPDATE_USER.
"""

from datetime import datetime
from typing import Optional

from clicr.services.working_copy import WorkingCopy
from clicr.utils.logger import get_logger

logger = get_logger(__name__)

BUSINESS_SCOPE = "BUSINESS"
VENUE_SCOPE = "VENUE"
ACTIVE = "ACTIVE"


def _is_in_force(ban, now: datetime) -> bool:
    if ban.status != ACTIVE:
        return False
    if ban.ends_at is not None and ban.ends_at <= now:
        return False
    return True


def apply_ban(ban, user, working: WorkingCopy, devices=None) -> None:
    """
    Shrink `user`'s assignment lists in place according to `ban`.
    Areas are resolved from the banned venues and devices from those areas
    using the entity graph, never the user's own lists.

    `devices` defaults to the working copy's live devices. Pass the store's
    full device list (soft-deleted included) so retired ids under a banned
    venue are removed too.
    """
    if ban.status != ACTIVE:
        return

    if ban.scope_type == BUSINESS_SCOPE:
        user.assigned_venue_ids = []
        user.assigned_area_ids = []
        user.assigned_device_ids = []
        logger.warning(f"[BAN] Business ban on {user.id}: all assignments cleared")
        return

    if ban.scope_type == VENUE_SCOPE:
        banned_venues = set(ban.scope_venue_ids or [])
        banned_areas = {a.id for a in working.areas if a.venue_id in banned_venues}
        banned_devices = {d.id for d in (working.devices if devices is None else devices)
                          if d.area_id in banned_areas}

        user.assigned_venue_ids = [v for v in user.assigned_venue_ids if v not in banned_venues]
        user.assigned_area_ids = [a for a in user.assigned_area_ids if a not in banned_areas]
        user.assigned_device_ids = [d for d in user.assigned_device_ids if d not in banned_devices]
        logger.warning(f"[BAN] Venue ban on {user.id}: removed venues={sorted(banned_venues)} "
                       f"areas={len(banned_areas)} devices={len(banned_devices)}")


def is_user_banned(bans, user_id: str, venue_id: Optional[str], now: Optional[datetime] = None) -> bool:
    now = now or datetime.utcnow()
    for ban in bans:
        if ban.user_id != user_id or not _is_in_force(ban, now):
            continue
        if ban.scope_type == BUSINESS_SCOPE:
            return True
        if venue_id and ban.scope_type == VENUE_SCOPE and venue_id in (ban.scope_venue_ids or []):
            return True
    return False
