# clicr/database.py
"""
Database connection, session management, and table creation.
Uses SQLAlchemy with PostgreSQL. All models are auto-imported here
so create_tables() creates every table in one call.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from clicr.config import settings

_engine_options = {"pool_pre_ping": True, "echo": False}
if not settings.DATABASE_URL.startswith("sqlite"):
    _engine_options.update(pool_size=10, max_overflow=20)

engine = create_engine(settings.DATABASE_URL, **_engine_options)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency: yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind=None):
    """
    Creates all DB tables on startup. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    # Structure
    from clicr.models.business import Business                   # noqa
    from clicr.models.venue import Venue                         # noqa
    from clicr.models.area import Area                           # noqa
    from clicr.models.device import Device                       # noqa
    from clicr.models.profile import Profile                     # noqa
    # Ledger
    from clicr.models.occupancy_snapshot import OccupancySnapshot  # noqa
    from clicr.models.count_event import CountEvent              # noqa
    from clicr.models.scan_event import ScanEvent                # noqa
    from clicr.models.capacity_alert import CapacityAlert        # noqa
    from clicr.models.capacity_override import CapacityOverride  # noqa
    # Bans
    from clicr.models.staff_ban import StaffBan                  # noqa
    from clicr.models.patron import BannedPerson, PatronBan      # noqa
    from clicr.models.ban_enforcement import BanEnforcementEvent  # noqa

    Base.metadata.create_all(bind=bind or engine)
