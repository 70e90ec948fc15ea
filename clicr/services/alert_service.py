# clicr/services/alert_service.py
"""
Capacity alert service.
Called after every entry: when venue occupancy crosses one of the business
capacity thresholds (e.g. 80/90/100 %), a capacity_alerts row is written.
Extend here to add push notifications, SMS, email, etc.
"""

from datetime import datetime
from typing import Optional

from clicr.config import settings
from clicr.models.capacity_alert import CapacityAlert
from clicr.utils.logger import get_logger

logger = get_logger(__name__)


def crossed_thresholds(previous: int, current: int, capacity: int, thresholds) -> list[int]:
    """Thresholds t (percent) with previous% < t <= current%."""
    if not capacity or capacity <= 0 or current <= previous:
        return []
    before = previous / capacity * 100
    after = current / capacity * 100
    return [t for t in sorted(thresholds) if before < t <= after]


def thresholds_for(business) -> list[int]:
    if business is not None and business.settings.get("capacity_thresholds"):
        return list(business.settings["capacity_thresholds"])
    return list(settings.DEFAULT_CAPACITY_THRESHOLDS)


def check_capacity(store, working, venue_id: str, previous: int,
                   area_id: Optional[str] = None) -> list[CapacityAlert]:
    """Persist one alert per threshold crossed by the last entry. Returns the new rows."""
    venue = working.venue(venue_id)
    if venue is None or not venue.default_capacity_total:
        return []
    capacity = venue.default_capacity_total
    current = working.venue_occupancy(venue_id)
    business = working.business(venue.business_id)

    alerts = []
    for threshold in crossed_thresholds(previous, current, capacity, thresholds_for(business)):
        description = f"Venue {venue.name} at {int(current / capacity * 100)}% capacity ({current}/{capacity})"
        alerts.append(CapacityAlert(business_id=venue.business_id, venue_id=venue_id, area_id=area_id,
                                    threshold=threshold, occupancy=current, capacity=capacity,
                                    description=description, is_resolved=0,
                                    triggered_at=datetime.utcnow()))
        logger.warning(f"[ALERT][{threshold}%] {description}")
    if alerts:
        store.insert(*alerts)
    return alerts
