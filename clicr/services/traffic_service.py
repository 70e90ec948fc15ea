# clicr/services/traffic_service.py
"""
Traffic totals (ins / outs) per area over a time range.
Informational only: occupancy always comes from the snapshots.
"""

from datetime import datetime, time
from typing import Optional


def aggregate_traffic(events) -> dict[str, dict]:
    totals: dict[str, dict] = {}
    for event in events:
        row = totals.setdefault(event.area_id, {
            "area_id": event.area_id,
            "venue_id": event.venue_id,
            "total_in": 0,
            "total_out": 0,
            "event_count": 0,
        })
        if event.delta > 0:
            row["total_in"] += event.delta
        elif event.delta < 0:
            row["total_out"] += abs(event.delta)
        row["event_count"] += 1
    for row in totals.values():
        row["net_delta"] = row["total_in"] - row["total_out"]
    return totals


def traffic_for(store, venue_ids: list[str], start: Optional[datetime] = None,
                end: Optional[datetime] = None, area_id: Optional[str] = None) -> list[dict]:
    """Defaults to the current UTC day."""
    end = end or datetime.utcnow()
    start = start or datetime.combine(end.date(), time.min)
    if not venue_ids:
        return []
    events = store.fetch_events_between(start, end, venue_ids, area_id=area_id)
    return sorted(aggregate_traffic(events).values(), key=lambda r: r["area_id"])
