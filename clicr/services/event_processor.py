# clicr/services/event_processor.py
"""
Atomic Event Processor: the only path that changes occupancy.

record_event() checks the caller's bans and the area/venue/device graph,
then hands the delta to the store's single-transaction procedure. Only after
that succeeds is the working copy touched (event prepended, device tally
and area occupancy updated), so a failure leaves every copy unchanged.

reset_counts() zeroes snapshots without deleting history; area resets log a
MANUAL_RESET marker event with delta 0.
"""

from typing import Optional

from clicr.errors import Forbidden, NotFound, ValidationError
from clicr.schemas.state import CountEventOut
from clicr.services.ban_cascade import is_user_banned
from clicr.services.working_copy import WorkingCopy
from clicr.utils.logger import get_logger

logger = get_logger(__name__)

AREA_SCOPE = "AREA"
VENUE_SCOPE = "VENUE"


def check_graph(working: WorkingCopy, venue_id: str, area_id: str, device_id: Optional[str]):
    area = working.area(area_id)
    if area is None:
        raise NotFound(f"Area '{area_id}' not found")
    if area.venue_id != venue_id:
        raise ValidationError(f"Area '{area_id}' does not belong to venue '{venue_id}'")
    if device_id is not None:
        device = working.device(device_id)
        if device is None:
            raise NotFound(f"Device '{device_id}' not found")
        if device.area_id != area_id:
            raise ValidationError(f"Device '{device_id}' is not bound to area '{area_id}'")
    return area


def ensure_not_banned(store, user_id: str, venue_id: str):
    if is_user_banned(store.fetch_staff_bans(user_id), user_id, venue_id):
        logger.warning(f"[EVENT] Blocked banned user {user_id} at venue {venue_id}")
        raise Forbidden("User is banned from this venue", reason="BANNED")


def record_event(store, working: WorkingCopy, *, delta: int, flow_type: Optional[str], event_type: str,
                 venue_id: str, area_id: str, device_id: Optional[str], user_id: str,
                 ban_checked: bool = False, audit_rows=()) -> CountEventOut:
    """
    Apply one count event. The business id always comes from the venue.
    Callers that already ran ensure_not_banned() pass ban_checked=True.
    `audit_rows` (e.g. a door capacity override) commit in the same transaction.
    """
    if not ban_checked:
        ensure_not_banned(store, user_id, venue_id)

    if delta == 0:
        raise ValidationError("Count events need a non-zero delta")
    area = check_graph(working, venue_id, area_id, device_id)

    flow_type = flow_type or ("IN" if delta > 0 else "OUT")
    business_id = working.business_id_for_venue(venue_id)

    row, new_occupancy = store.process_occupancy_event(
        business_id=business_id, venue_id=venue_id, area_id=area_id, device_id=device_id,
        user_id=user_id, delta=delta, flow_type=flow_type, event_type=event_type,
        audit_rows=audit_rows,
    )
    event = CountEventOut.model_validate(row)

    working.events.insert(0, event)
    area.current_occupancy = new_occupancy
    if device_id is not None:
        working.device(device_id).current_count += delta

    logger.info(f"[EVENT] {event_type} {delta:+d} area={area_id} → {new_occupancy}")
    return event


def reset_counts(store, working: WorkingCopy, *, scope: str, target_id: str, user_id: str) -> list[str]:
    """Returns the ids of the areas that were zeroed."""
    if scope == AREA_SCOPE:
        area = working.area(target_id)
        if area is None:
            raise NotFound(f"Area '{target_id}' not found")
        marker = store.reset_area(area_id=area.id, venue_id=area.venue_id,
                                  business_id=working.business_id_for_venue(area.venue_id),
                                  user_id=user_id)
        working.events.insert(0, CountEventOut.model_validate(marker))
        areas = [area]
    elif scope == VENUE_SCOPE:
        if working.venue(target_id) is None:
            raise NotFound(f"Venue '{target_id}' not found")
        store.reset_venue(target_id)
        areas = [a for a in working.areas if a.venue_id == target_id]
    else:
        raise ValidationError(f"Unknown reset scope '{scope}'")

    reset_ids = {a.id for a in areas}
    for area in areas:
        area.current_occupancy = 0
    for device in working.devices:
        if device.area_id in reset_ids:
            device.current_count = 0

    logger.info(f"[RESET] {scope} {target_id} by {user_id}: {len(reset_ids)} area(s) zeroed")
    return sorted(reset_ids)
