# clicr/routers/occupancy.py
"""Live occupancy per venue/area (from snapshots) and traffic totals (from events)."""

from fastapi import APIRouter, Depends
from datetime import datetime
from typing import Optional

from clicr.dependencies import current_user_id, get_sync_service
from clicr.errors import NotFound
from clicr.schemas.occupancy import AreaOccupancyOut, TrafficOut, VenueOccupancyOut
from clicr.services.sync_service import SyncService

router = APIRouter()


def _percent(count: int, capacity: Optional[int]) -> Optional[float]:
    return round(count / capacity * 100, 1) if capacity else None


def _venue_occupancy(venue, areas) -> VenueOccupancyOut:
    own = [a for a in areas if a.venue_id == venue.id]
    total = sum(a.current_occupancy for a in own)
    capacity = venue.default_capacity_total or None
    return VenueOccupancyOut(
        venue_id=venue.id,
        name=venue.name,
        current_occupancy=total,
        capacity=capacity,
        occupancy_percent=_percent(total, capacity),
        is_full=total >= capacity if capacity else None,
        capacity_enforcement_mode=venue.capacity_enforcement_mode,
        areas=[AreaOccupancyOut(area_id=a.id, name=a.name, current_occupancy=a.current_occupancy,
                                capacity=a.default_capacity,
                                occupancy_percent=_percent(a.current_occupancy, a.default_capacity))
               for a in own],
    )


@router.get("/occupancy", response_model=list[VenueOccupancyOut])
def get_all_occupancy(user_id: str = Depends(current_user_id),
                      service: SyncService = Depends(get_sync_service)):
    """Current headcount for every venue the caller can see."""
    state = service.get_state(user_id)
    return [_venue_occupancy(v, state.areas) for v in state.venues]


@router.get("/occupancy/traffic", response_model=list[TrafficOut], summary="Ins/outs per area")
def get_traffic(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    venue_id: Optional[str] = None,
    area_id: Optional[str] = None,
    user_id: str = Depends(current_user_id),
    service: SyncService = Depends(get_sync_service),
):
    """Totals since UTC midnight unless a range is given. Never used for enforcement."""
    return service.traffic(user_id, start=start, end=end, venue_id=venue_id, area_id=area_id)


@router.get("/occupancy/{venue_id}", response_model=VenueOccupancyOut)
def get_venue_occupancy(venue_id: str, user_id: str = Depends(current_user_id),
                        service: SyncService = Depends(get_sync_service)):
    state = service.get_state(user_id)
    venue = next((v for v in state.venues if v.id == venue_id), None)
    if venue is None:
        raise NotFound(f"Venue '{venue_id}' not found")
    return _venue_occupancy(venue, state.areas)
