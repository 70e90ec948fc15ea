# clicr/services/hydrator.py
"""
Snapshot Reconciler ("Hydrator").

Rebuilds the working copy from the authoritative store before every read or
write cycle:

  1. businesses / venues / areas   → replaced wholesale (store wins)
  2. profiles                      → keyed merge into the user list
  3. occupancy snapshots           → missing rows created with zero (heal_snapshots)
  4. area.current_occupancy        → overlaid from the snapshots
  5. recent count + scan events    → activity feed only, never re-summed
     (plus capacity overrides and ban enforcement records)
  6. devices                       → new ones materialised, known ones get name/button config

A failed fetch is logged and the affected section keeps the previous copy's
data (listed in WorkingCopy.degraded). Only a structural failure with no
previous copy at all is fatal.
"""

import copy
from datetime import datetime
from typing import Optional

from clicr.config import settings
from clicr.errors import EngineError, UpstreamUnavailable
from clicr.schemas.state import (
    AreaOut, BanEnforcementOut, BusinessOut, CapacityOverrideOut, CountEventOut, DeviceOut, ScanEventOut,
    UserOut, VenueOut,
)
from clicr.services.working_copy import WorkingCopy, merge_by_id
from clicr.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_BUTTON_CONFIG = {
    "left": {"label": "IN", "delta": 1, "color": "green"},
    "right": {"label": "OUT", "delta": -1, "color": "red"},
}


def hydrate(store, previous: Optional[WorkingCopy] = None) -> WorkingCopy:
    working = copy.deepcopy(previous) if previous is not None else WorkingCopy()
    working.degraded = []
    last_known_occupancy = {a.id: a.current_occupancy for a in working.areas}

    _refresh_structure(store, working, has_fallback=previous is not None)
    _merge_profiles(store, working)

    occupancy = _load_occupancy(store, working)
    if occupancy is None:
        occupancy = last_known_occupancy
    for area in working.areas:
        area.current_occupancy = occupancy.get(area.id, 0)

    _load_activity(store, working)
    _merge_devices(store, working)

    working.hydrated_at = datetime.utcnow()
    if working.degraded:
        logger.warning(f"[HYDRATE] Degraded sections: {working.degraded}")
    else:
        logger.debug(f"[HYDRATE] {len(working.venues)} venues, {len(working.areas)} areas, "
                     f"{len(working.devices)} devices, {len(working.users)} users")
    return working


def _refresh_structure(store, working: WorkingCopy, has_fallback: bool):
    try:
        businesses = [BusinessOut.model_validate(b) for b in store.fetch_businesses()]
        venues = [VenueOut.model_validate(v) for v in store.fetch_venues()]
        areas = [AreaOut.model_validate(a) for a in store.fetch_areas()]
    except EngineError as e:
        if not has_fallback:
            raise UpstreamUnavailable(f"Store unreachable and no cached state: {e.message}") from e
        logger.warning(f"[HYDRATE] Structure fetch failed, serving cached structure: {e.message}")
        working.degraded.append("structure")
        return
    working.businesses = businesses
    working.venues = venues
    working.areas = areas


def _merge_profiles(store, working: WorkingCopy):
    try:
        profiles = [UserOut.model_validate(p) for p in store.fetch_profiles()]
    except EngineError as e:
        logger.warning(f"[HYDRATE] Profile fetch failed: {e.message}")
        working.degraded.append("users")
        return
    working.users = merge_by_id(working.users, profiles)


def heal_snapshots(store, working: WorkingCopy, snapshots: list) -> list:
    """
    Create a zero snapshot for every known area that has none.
    Idempotent: areas that already have a row are left alone.
    """
    covered = {s.area_id for s in snapshots}
    healed = list(snapshots)
    for area in working.areas:
        if area.id in covered:
            continue
        try:
            healed.append(store.ensure_snapshot(area.id, area.venue_id,
                                                working.business_id_for_venue(area.venue_id)))
        except EngineError as e:
            logger.error(f"[HYDRATE] Could not create snapshot for area {area.id}: {e.message}")
    return healed


def _load_occupancy(store, working: WorkingCopy) -> Optional[dict]:
    try:
        snapshots = store.fetch_snapshots()
    except EngineError as e:
        logger.warning(f"[HYDRATE] Snapshot fetch failed, keeping last-known occupancy: {e.message}")
        working.degraded.append("occupancy")
        return None
    snapshots = heal_snapshots(store, working, snapshots)
    return {s.area_id: max(0, s.current_occupancy or 0) for s in snapshots}


def _load_activity(store, working: WorkingCopy):
    try:
        working.events = [CountEventOut.model_validate(e)
                          for e in store.fetch_recent_events(settings.ACTIVITY_WINDOW)]
    except EngineError as e:
        logger.warning(f"[HYDRATE] Event window fetch failed: {e.message}")
        working.degraded.append("events")
    try:
        working.scan_events = [ScanEventOut.model_validate(s)
                               for s in store.fetch_recent_scans(settings.ACTIVITY_WINDOW)]
    except EngineError as e:
        logger.warning(f"[HYDRATE] Scan window fetch failed: {e.message}")
        working.degraded.append("scans")
    try:
        working.capacity_overrides = [CapacityOverrideOut.model_validate(o)
                                      for o in store.fetch_recent_overrides(settings.ACTIVITY_WINDOW)]
        working.ban_enforcements = [BanEnforcementOut.model_validate(b)
                                    for b in store.fetch_recent_enforcements(settings.ACTIVITY_WINDOW)]
    except EngineError as e:
        logger.warning(f"[HYDRATE] Override/enforcement fetch failed: {e.message}")
        working.degraded.append("door_log")


def _materialise_device(device: DeviceOut) -> DeviceOut:
    if not device.button_config:
        device.button_config = copy.deepcopy(DEFAULT_BUTTON_CONFIG)
    device.current_count = 0
    return device


def _refresh_persisted_fields(existing: DeviceOut, persisted: DeviceOut):
    existing.name = persisted.name
    if persisted.button_config:
        existing.button_config = persisted.button_config


def _merge_devices(store, working: WorkingCopy):
    try:
        persisted = [DeviceOut.model_validate(d) for d in store.fetch_devices()]
    except EngineError as e:
        logger.warning(f"[HYDRATE] Device fetch failed: {e.message}")
        working.degraded.append("devices")
        return
    merged = merge_by_id(working.devices, persisted,
                         on_match=_refresh_persisted_fields, on_new=_materialise_device)
    # Soft-deleted devices no longer come back from the store
    live_ids = {d.id for d in persisted}
    working.devices = [d for d in merged if d.id in live_ids]
