# clicr/services/store.py
"""
Narrow procedural interface to the authoritative relational store.

The engine never touches the Session directly: hydration uses the bulk
fetch_* selects, management actions use insert/update helpers, and occupancy
changes only go through process_occupancy_event(), whose single transaction
is the one consistency guarantee the rest of the engine relies on.

Read failures surface as UpstreamUnavailable, write failures as
ConflictOrAtomicFailure. Every failed write is rolled back first.
"""

from contextlib import contextmanager
from datetime import datetime
from typing import Optional

from sqlalchemy import case, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clicr.errors import ConflictOrAtomicFailure, NotFound, UpstreamUnavailable
from clicr.models.area import Area
from clicr.models.business import Business
from clicr.models.ban_enforcement import BanEnforcementEvent
from clicr.models.capacity_alert import CapacityAlert
from clicr.models.capacity_override import CapacityOverride
from clicr.models.count_event import CountEvent
from clicr.models.device import Device
from clicr.models.occupancy_snapshot import OccupancySnapshot
from clicr.models.patron import BannedPerson, PatronBan
from clicr.models.profile import Profile
from clicr.models.scan_event import ScanEvent
from clicr.models.staff_ban import StaffBan
from clicr.models.venue import Venue
from clicr.utils.logger import get_logger

logger = get_logger(__name__)


class SqlOccupancyStore:
    def __init__(self, db: Session):
        self.db = db

    # ── helpers ──────────────────────────────────────────────────────────
    @contextmanager
    def _reading(self, what: str):
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            raise UpstreamUnavailable(f"Could not read {what}: {e}") from e

    @contextmanager
    def _writing(self, what: str):
        try:
            yield
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"[STORE] {what} failed, rolled back: {e}")
            raise ConflictOrAtomicFailure(f"{what} failed: {e}") from e

    # ── bulk selects (hydration) ─────────────────────────────────────────
    def fetch_businesses(self):
        with self._reading("businesses"):
            return self.db.query(Business).all()

    def fetch_venues(self):
        with self._reading("venues"):
            return self.db.query(Venue).all()

    def fetch_areas(self):
        with self._reading("areas"):
            return self.db.query(Area).all()

    def fetch_profiles(self):
        with self._reading("profiles"):
            return self.db.query(Profile).all()

    def fetch_devices(self, include_deleted: bool = False):
        with self._reading("devices"):
            q = self.db.query(Device)
            if not include_deleted:
                q = q.filter(Device.deleted_at.is_(None))
            return q.all()

    def fetch_snapshots(self):
        with self._reading("occupancy snapshots"):
            return self.db.query(OccupancySnapshot).all()

    def fetch_recent_events(self, limit: int):
        with self._reading("occupancy events"):
            return (self.db.query(CountEvent)
                    .order_by(CountEvent.timestamp.desc()).limit(limit).all())

    def fetch_recent_scans(self, limit: int):
        with self._reading("scan events"):
            return (self.db.query(ScanEvent)
                    .order_by(ScanEvent.timestamp.desc()).limit(limit).all())

    def fetch_recent_overrides(self, limit: int):
        with self._reading("capacity overrides"):
            return (self.db.query(CapacityOverride)
                    .order_by(CapacityOverride.created_at.desc()).limit(limit).all())

    def fetch_recent_enforcements(self, limit: int):
        with self._reading("ban enforcement events"):
            return (self.db.query(BanEnforcementEvent)
                    .order_by(BanEnforcementEvent.scan_datetime.desc()).limit(limit).all())

    def count_events(self, area_id: Optional[str] = None) -> int:
        with self._reading("occupancy events"):
            q = self.db.query(CountEvent)
            if area_id:
                q = q.filter(CountEvent.area_id == area_id)
            return q.count()

    def fetch_events_between(self, start: datetime, end: datetime, venue_ids: list[str],
                             area_id: Optional[str] = None):
        with self._reading("occupancy events"):
            q = self.db.query(CountEvent).filter(
                CountEvent.timestamp >= start,
                CountEvent.timestamp <= end,
                CountEvent.venue_id.in_(venue_ids),
            )
            if area_id:
                q = q.filter(CountEvent.area_id == area_id)
            return q.all()

    def fetch_staff_bans(self, user_id: str):
        with self._reading("staff bans"):
            return self.db.query(StaffBan).filter(StaffBan.user_id == user_id).all()

    def fetch_patron_registry(self, business_id: Optional[str]):
        """Returns (banned persons, patron bans) for one business."""
        with self._reading("patron registry"):
            persons = self.db.query(BannedPerson)
            bans = self.db.query(PatronBan)
            if business_id:
                persons = persons.filter(BannedPerson.business_id == business_id)
                bans = bans.filter(PatronBan.business_id == business_id)
            return persons.all(), bans.all()

    def fetch_alerts(self, venue_ids: list[str], limit: int = 50):
        with self._reading("capacity alerts"):
            return (self.db.query(CapacityAlert)
                    .filter(CapacityAlert.venue_id.in_(venue_ids))
                    .order_by(CapacityAlert.triggered_at.desc()).limit(limit).all())

    def get(self, model, entity_id: str):
        with self._reading(model.__tablename__):
            return self.db.get(model, entity_id)

    # ── snapshots ────────────────────────────────────────────────────────
    def ensure_snapshot(self, area_id: str, venue_id: str, business_id: Optional[str]) -> OccupancySnapshot:
        """Create-if-absent. Calling it for an area that already has a row changes nothing."""
        existing = self.get(OccupancySnapshot, area_id)
        if existing:
            return existing
        snapshot = OccupancySnapshot(area_id=area_id, venue_id=venue_id, business_id=business_id,
                                     current_occupancy=0, updated_at=datetime.utcnow())
        with self._writing(f"snapshot creation for area {area_id}"):
            self.db.add(snapshot)
        logger.info(f"[HYDRATE] Created missing snapshot for area {area_id}")
        return snapshot

    def process_occupancy_event(self, *, business_id, venue_id, area_id, device_id, user_id,
                                delta: int, flow_type: str, event_type: str, audit_rows=()):
        """
        Insert the audit event (plus any `audit_rows`) and apply the delta to the
        area's snapshot in one transaction. Occupancy is clamped at zero inside
        the UPDATE itself. Returns (event, new_occupancy). Raises ConflictOrAtomicFailure with
        nothing applied.
        """
        now = datetime.utcnow()
        event = CountEvent(business_id=business_id, venue_id=venue_id, area_id=area_id,
                           device_id=device_id, user_id=user_id, delta=delta,
                           flow_type=flow_type, event_type=event_type, timestamp=now)
        new_value = case(
            (OccupancySnapshot.current_occupancy + delta < 0, 0),
            else_=OccupancySnapshot.current_occupancy + delta,
        )
        with self._writing(f"occupancy event on area {area_id}"):
            self.db.add(event)
            self.db.flush()
            result = self.db.execute(
                update(OccupancySnapshot)
                .where(OccupancySnapshot.area_id == area_id)
                .values(current_occupancy=new_value, last_event_id=event.id, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                self.db.add(OccupancySnapshot(area_id=area_id, venue_id=venue_id, business_id=business_id,
                                              current_occupancy=max(0, delta), last_event_id=event.id,
                                              updated_at=now))
            for row in audit_rows:
                self.db.add(row)
        snapshot = self.get(OccupancySnapshot, area_id)
        self.db.refresh(snapshot)
        return event, snapshot.current_occupancy

    def reset_area(self, *, area_id, venue_id, business_id, user_id) -> CountEvent:
        """Zero one snapshot and log a MANUAL_RESET marker (delta 0) in the same transaction."""
        now = datetime.utcnow()
        marker = CountEvent(business_id=business_id, venue_id=venue_id, area_id=area_id,
                            device_id=None, user_id=user_id, delta=0,
                            flow_type="RESET", event_type="MANUAL_RESET", timestamp=now)
        with self._writing(f"reset of area {area_id}"):
            result = self.db.execute(
                update(OccupancySnapshot)
                .where(OccupancySnapshot.area_id == area_id)
                .values(current_occupancy=0, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                self.db.add(OccupancySnapshot(area_id=area_id, venue_id=venue_id, business_id=business_id,
                                              current_occupancy=0, updated_at=now))
            self.db.add(marker)
        return marker

    def reset_venue(self, venue_id: str) -> int:
        with self._writing(f"reset of venue {venue_id}"):
            result = self.db.execute(
                update(OccupancySnapshot)
                .where(OccupancySnapshot.venue_id == venue_id)
                .values(current_occupancy=0, updated_at=datetime.utcnow())
                .execution_options(synchronize_session=False)
            )
            reset = result.rowcount
        return reset

    # ── generic writes (management actions) ──────────────────────────────
    def insert(self, *rows):
        with self._writing(f"insert of {', '.join(type(r).__name__ for r in rows)}"):
            for row in rows:
                self.db.add(row)
        return rows[0] if len(rows) == 1 else rows

    def update_fields(self, model, entity_id: str, fields: dict):
        row = self.get(model, entity_id)
        if row is None:
            raise NotFound(f"{model.__name__} '{entity_id}' not found")
        with self._writing(f"update of {model.__name__} {entity_id}"):
            for key, value in fields.items():
                setattr(row, key, value)
        return row

    def soft_delete_device(self, device_id: str, user_id: Optional[str]):
        return self.update_fields(Device, device_id, {"deleted_at": datetime.utcnow(), "deleted_by": user_id})

    def delete_profile(self, user_id: str):
        row = self.get(Profile, user_id)
        if row is None:
            raise NotFound(f"User '{user_id}' not found")
        with self._writing(f"delete of user {user_id}"):
            self.db.delete(row)

    def save_assignments(self, user_id: str, venue_ids, area_ids, device_ids):
        # New list objects so the JSON columns are flagged dirty
        return self.update_fields(Profile, user_id, {
            "assigned_venue_ids": list(venue_ids),
            "assigned_area_ids": list(area_ids),
            "assigned_device_ids": list(device_ids),
        })
