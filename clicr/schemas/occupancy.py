# clicr/schemas/occupancy.py
from pydantic import BaseModel
from typing import Optional


class AreaOccupancyOut(BaseModel):
    area_id: str
    name: str
    current_occupancy: int
    capacity: Optional[int] = None
    occupancy_percent: Optional[float] = None


class VenueOccupancyOut(BaseModel):
    venue_id: str
    name: str
    current_occupancy: int
    capacity: Optional[int] = None
    occupancy_percent: Optional[float] = None
    is_full: Optional[bool] = None
    capacity_enforcement_mode: str
    areas: list[AreaOccupancyOut] = []


class TrafficOut(BaseModel):
    area_id: str
    venue_id: str
    total_in: int
    total_out: int
    net_delta: int
    event_count: int
