"""
Shared fixtures: an in-memory SQLite store seeded with a small tenant.

    biz-1
      venue-1 (cap 10, WARN_ONLY)  → area-1 → device-1
      venue-2 (cap 2,  HARD_STOP)  → area-2 → device-2

    owner-1  OWNER  assigned to everything
    staff-1  USER   assigned to everything
    staff-2  USER   assigned to venue-2 only

area-2 deliberately has no snapshot row.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_TO_FILE"] = "false"
os.environ["API_KEY"] = ""

import pytest
from datetime import datetime
from types import SimpleNamespace
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from clicr.database import create_tables
from clicr.models.area import Area
from clicr.models.business import Business
from clicr.models.device import Device
from clicr.models.occupancy_snapshot import OccupancySnapshot
from clicr.models.profile import Profile
from clicr.models.venue import Venue
from clicr.services.store import SqlOccupancyStore

IDS = SimpleNamespace(
    business="biz-1",
    venue1="venue-1", venue2="venue-2",
    area1="area-1", area2="area-2",
    device1="device-1", device2="device-2",
    owner="owner-1", staff="staff-1", staff2="staff-2",
)


def seed_graph(db):
    now = datetime.utcnow()
    db.add(Business(id=IDS.business, name="Test Bar Group", created_at=now))
    db.add_all([
        Venue(id=IDS.venue1, business_id=IDS.business, name="Downtown", default_capacity_total=10,
              capacity_enforcement_mode="WARN_ONLY", created_at=now),
        Venue(id=IDS.venue2, business_id=IDS.business, name="Uptown", default_capacity_total=2,
              capacity_enforcement_mode="HARD_STOP", created_at=now),
        Area(id=IDS.area1, venue_id=IDS.venue1, name="Main Floor", created_at=now),
        Area(id=IDS.area2, venue_id=IDS.venue2, name="Patio", created_at=now),
        Device(id=IDS.device1, business_id=IDS.business, area_id=IDS.area1, name="Front Door", created_at=now),
        Device(id=IDS.device2, business_id=IDS.business, area_id=IDS.area2, name="Patio Gate", created_at=now),
        OccupancySnapshot(area_id=IDS.area1, venue_id=IDS.venue1, business_id=IDS.business,
                          current_occupancy=0, updated_at=now),
    ])
    everything = dict(assigned_venue_ids=[IDS.venue1, IDS.venue2],
                      assigned_area_ids=[IDS.area1, IDS.area2],
                      assigned_device_ids=[IDS.device1, IDS.device2])
    db.add_all([
        Profile(id=IDS.owner, business_id=IDS.business, name="Olivia", email="owner@example.com",
                role="OWNER", **everything),
        Profile(id=IDS.staff, business_id=IDS.business, name="Sam", email="sam@example.com",
                role="USER", **everything),
        Profile(id=IDS.staff2, business_id=IDS.business, name="Riley", email="riley@example.com",
                role="USER", assigned_venue_ids=[IDS.venue2], assigned_area_ids=[IDS.area2],
                assigned_device_ids=[IDS.device2]),
    ])
    db.commit()
    return IDS


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    create_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def ids(db):
    return seed_graph(db)


@pytest.fixture
def store(db):
    return SqlOccupancyStore(db)
