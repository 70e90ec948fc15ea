# clicr/services/sync_service.py
"""
Sync Endpoint service.

One instance per request. Every call hydrates the working copy from the
store (falling back to the cached copy section by section), runs at most one
command against it, re-hydrates and returns the result through the access
scope filter. Unfiltered state never leaves this class.
"""

from datetime import datetime
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from clicr.config import settings
from clicr.errors import EngineError, Forbidden, NotFound, ValidationError
from clicr.models.area import Area
from clicr.models.ban_enforcement import BanEnforcementEvent
from clicr.models.business import Business
from clicr.models.capacity_override import CapacityOverride
from clicr.models.device import Device
from clicr.models.patron import BannedPerson, PatronBan
from clicr.models.profile import Profile
from clicr.models.scan_event import ScanEvent
from clicr.models.staff_ban import StaffBan
from clicr.models.venue import Venue
from clicr.schemas import commands as cmd
from clicr.schemas.id_document import EvaluateRequest, EvaluateResponse
from clicr.schemas.state import BanEnforcementOut, BusinessOut, ScanEventOut, ScopedStateOut, UserOut
from clicr.services import alert_service, traffic_service
from clicr.services.access_scope import filter_state
from clicr.services.ban_cascade import apply_ban
from clicr.services.capacity_policy import AdmissionDecision, decide, rule_for_venue
from clicr.services.compliance import sanitize_scan
from clicr.services.event_processor import check_graph, ensure_not_banned, record_event, reset_counts
from clicr.services.hydrator import DEFAULT_BUTTON_CONFIG, hydrate
from clicr.services.id_evaluator import ACCEPTED, BANNED, age_band, evaluate, review_matches
from clicr.services.working_copy import WorkingCopy, WorkingCopyCache
from clicr.utils.logger import get_logger

logger = get_logger(__name__)

ADMIN_ROLES = {"OWNER", "ADMIN"}


class SyncService:
    def __init__(self, store, cache: WorkingCopyCache):
        self.store = store
        self.cache = cache
        self._handlers = {
            "RECORD_EVENT": self._record_event,
            "RECORD_SCAN": self._record_scan,
            "RESET_COUNTS": self._reset_counts,
            "ADD_CAPACITY_OVERRIDE": self._add_capacity_override,
            "ADD_VENUE": self._add_venue,
            "UPDATE_VENUE": self._update_venue,
            "DELETE_VENUE": self._delete_venue,
            "ADD_AREA": self._add_area,
            "UPDATE_AREA": self._update_area,
            "DELETE_AREA": self._delete_area,
            "ADD_DEVICE": self._add_device,
            "UPDATE_DEVICE": self._update_device,
            "DELETE_DEVICE": self._delete_device,
            "ADD_USER": self._add_user,
            "UPDATE_USER": self._update_user,
            "DELETE_USER": self._delete_user,
            "UPDATE_BUSINESS": self._update_business,
            "CREATE_BAN": self._create_ban,
            "REVOKE_BAN": self._revoke_ban,
            "CREATE_PATRON_BAN": self._create_patron_ban,
            "UPDATE_PATRON_BAN": self._update_patron_ban,
            "RECORD_BAN_ENFORCEMENT": self._record_ban_enforcement,
        }

    # ── Read path ────────────────────────────────────────────────────────
    def get_state(self, user_id: str, user_email: Optional[str] = None) -> ScopedStateOut:
        working = self._hydrate()
        user = self._principal(working, user_id, user_email)
        return filter_state(user, working)

    def evaluate_document(self, user_id: str, request: EvaluateRequest) -> EvaluateResponse:
        """Dry-run scan: decision plus tiered review candidates, nothing recorded."""
        working = self._hydrate()
        user = self._principal(working, user_id)
        self._require_venue(user, request.venue_id)
        patrons, bans = self.store.fetch_patron_registry(working.business_id_for_venue(request.venue_id))
        now = datetime.utcnow()
        return EvaluateResponse(
            decision=evaluate(request.document, patrons, bans, request.venue_id, now),
            review_matches=[m.to_schema() for m in review_matches(request.document, patrons, bans,
                                                                  request.venue_id, now)],
        )

    def traffic(self, user_id: str, start: Optional[datetime] = None, end: Optional[datetime] = None,
                venue_id: Optional[str] = None, area_id: Optional[str] = None) -> list[dict]:
        working = self._hydrate()
        user = self._principal(working, user_id)
        venue_ids = list(user.assigned_venue_ids)
        if venue_id:
            self._require_venue(user, venue_id)
            venue_ids = [venue_id]
        return traffic_service.traffic_for(self.store, venue_ids, start, end, area_id)

    def alerts(self, user_id: str, limit: int = 50):
        working = self._hydrate()
        user = self._principal(working, user_id)
        if not user.assigned_venue_ids:
            return []
        return self.store.fetch_alerts(list(user.assigned_venue_ids), limit=limit)

    # ── Write path ───────────────────────────────────────────────────────
    def execute(self, user_id: str, command: cmd.SyncCommand) -> cmd.SyncResponse:
        handler = self._handlers.get(command.action)
        if handler is None:
            raise ValidationError(f"Unknown action '{command.action}'")

        working = self._hydrate()
        user = self._principal(working, user_id)
        logger.info(f"[SYNC] {command.action} by {user.id}")

        outcome = handler(working, user, command) or {}

        working = hydrate(self.store, previous=working)
        self.cache.save(working)
        current = working.user(user.id) or user
        return cmd.SyncResponse(state=filter_state(current, working), **outcome)

    # ── helpers ──────────────────────────────────────────────────────────
    def _hydrate(self) -> WorkingCopy:
        working = hydrate(self.store, previous=self.cache.load())
        self.cache.save(working)
        return working

    def _principal(self, working: WorkingCopy, user_id: str, user_email: Optional[str] = None) -> UserOut:
        user = working.user(user_id)
        if user is not None:
            return user
        if not user_email:
            raise Forbidden(f"Unknown principal '{user_id}'", reason="UNKNOWN_PRINCIPAL")

        logger.info(f"[SYNC] Auto-creating profile {user_email} ({user_id})")
        row = self.store.insert(Profile(id=user_id, name=user_email.split("@")[0], email=user_email,
                                        role="OWNER", assigned_venue_ids=[], assigned_area_ids=[],
                                        assigned_device_ids=[], created_at=datetime.utcnow()))
        user = UserOut.model_validate(row)
        working.users.append(user)
        self.cache.save(working)
        return user

    @staticmethod
    def _parse(model, command: cmd.SyncCommand):
        try:
            return model.model_validate(command.payload)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid {command.action} payload: {e.errors()}") from e

    @staticmethod
    def _require_venue(user: UserOut, venue_id: Optional[str]):
        if venue_id not in user.assigned_venue_ids:
            raise Forbidden(f"Venue '{venue_id}' is outside your assignments", reason="OUT_OF_SCOPE")

    @staticmethod
    def _require_admin(user: UserOut):
        if user.role not in ADMIN_ROLES:
            raise Forbidden("Only OWNER or ADMIN can do this", reason="ROLE_REQUIRED")

    @staticmethod
    def _require_tenant(user: UserOut, business_id: Optional[str], what: str):
        if user.business_id is None or business_id != user.business_id:
            raise Forbidden(f"{what} belongs to another business", reason="OUT_OF_SCOPE")

    def _tenant_user(self, working: WorkingCopy, user: UserOut, target_id: str) -> UserOut:
        target = working.user(target_id)
        if target is None:
            raise NotFound(f"User '{target_id}' not found")
        self._require_tenant(user, target.business_id, f"User '{target_id}'")
        return target

    def _check_assignments(self, working: WorkingCopy, user: UserOut,
                           venue_ids=None, area_ids=None, device_ids=None):
        """Ids granted to someone must exist, be in the caller's business and under the caller's venues."""
        for venue_id in venue_ids or []:
            venue = working.venue(venue_id)
            if venue is None:
                raise NotFound(f"Venue '{venue_id}' not found")
            self._require_tenant(user, venue.business_id, f"Venue '{venue_id}'")
            self._require_venue(user, venue_id)
        for area_id in area_ids or []:
            self._area_in_scope(working, user, area_id)
        for device_id in device_ids or []:
            self._device_in_scope(working, user, device_id)

    def _area_in_scope(self, working: WorkingCopy, user: UserOut, area_id: str):
        area = working.area(area_id)
        if area is None:
            raise NotFound(f"Area '{area_id}' not found")
        self._require_venue(user, area.venue_id)
        return area

    def _device_in_scope(self, working: WorkingCopy, user: UserOut, device_id: str):
        device = working.device(device_id)
        if device is None:
            raise NotFound(f"Device '{device_id}' not found")
        self._area_in_scope(working, user, device.area_id)
        return device

    def _assign(self, user: UserOut, venue_id=None, area_id=None, device_id=None):
        """Creators can always see what they just created."""
        if venue_id and venue_id not in user.assigned_venue_ids:
            user.assigned_venue_ids.append(venue_id)
        if area_id and area_id not in user.assigned_area_ids:
            user.assigned_area_ids.append(area_id)
        if device_id and device_id not in user.assigned_device_ids:
            user.assigned_device_ids.append(device_id)
        self.store.save_assignments(user.id, user.assigned_venue_ids,
                                    user.assigned_area_ids, user.assigned_device_ids)

    def _admit(self, working: WorkingCopy, venue_id: str, override_confirmed: bool) -> AdmissionDecision:
        venue = working.venue(venue_id)
        decision = decide(working.venue_occupancy(venue_id), rule_for_venue(venue), is_entry_attempt=True)
        if decision == AdmissionDecision.BLOCK:
            raise Forbidden(f"Venue '{venue_id}' is at capacity", reason="CAPACITY_HARD_STOP")
        if decision == AdmissionDecision.REQUIRE_OVERRIDE and not override_confirmed:
            raise Forbidden(f"Venue '{venue_id}' is at capacity, manager override required",
                            reason="CAPACITY_OVERRIDE_REQUIRED")
        if decision != AdmissionDecision.ALLOW:
            logger.warning(f"[SYNC] Admission {decision.value} at venue {venue_id}")
        return decision

    def _door_override(self, working: WorkingCopy, user: UserOut, venue_id: str, area_id: str,
                       reason: Optional[str]) -> CapacityOverride:
        venue = working.venue(venue_id)
        now = datetime.utcnow()
        return CapacityOverride(business_id=venue.business_id, venue_id=venue_id, area_id=area_id,
                                override_type="DOOR", capacity_value=venue.default_capacity_total,
                                occupancy_at_override=working.venue_occupancy(venue_id),
                                start_datetime=now, end_datetime=now,
                                reason=reason or "Manager override at door",
                                created_by_user_id=user.id, created_at=now)

    def _count(self, working: WorkingCopy, user: UserOut, *, venue_id, area_id, device_id, delta,
               flow_type, event_type, override_confirmed, override_reason=None) -> AdmissionDecision:
        """Callers have already run ensure_not_banned() for this venue."""
        decision = AdmissionDecision.ALLOW
        if delta > 0:
            decision = self._admit(working, venue_id, override_confirmed)
        audit_rows = ()
        if decision == AdmissionDecision.REQUIRE_OVERRIDE:
            audit_rows = (self._door_override(working, user, venue_id, area_id, override_reason),)
            logger.warning(f"[SYNC] Capacity override at venue {venue_id} confirmed by {user.id}")
        previous = working.venue_occupancy(venue_id)
        record_event(self.store, working, delta=delta, flow_type=flow_type, event_type=event_type,
                     venue_id=venue_id, area_id=area_id, device_id=device_id, user_id=user.id,
                     ban_checked=True, audit_rows=audit_rows)
        if delta > 0:
            try:
                alert_service.check_capacity(self.store, working, venue_id, previous, area_id)
            except EngineError as e:
                logger.error(f"[ALERT] Could not store capacity alert for venue {venue_id}: {e.message}")
        return decision

    def _log_enforcement(self, working: WorkingCopy, user: UserOut, *, ban_id, venue_id, device_id,
                         result, person_name=None, override_reason=None, notes=None):
        row = self.store.insert(BanEnforcementEvent(
            business_id=working.business_id_for_venue(venue_id), ban_id=ban_id, venue_id=venue_id,
            device_id=device_id, scanner_user_id=user.id, scan_datetime=datetime.utcnow(), result=result,
            override_reason=override_reason, notes=notes, person_snapshot_name=person_name,
        ))
        working.ban_enforcements.insert(0, BanEnforcementOut.model_validate(row))
        logger.warning(f"[BAN] Patron ban {ban_id} {result} at venue {venue_id} by {user.id}")

    # ── Ledger actions ───────────────────────────────────────────────────
    def _record_event(self, working, user, command):
        data = self._parse(cmd.RecordEventPayload, command)
        ensure_not_banned(self.store, user.id, data.venue_id)
        self._require_venue(user, data.venue_id)
        decision = self._count(working, user, venue_id=data.venue_id, area_id=data.area_id,
                               device_id=data.device_id, delta=data.delta, flow_type=data.flow_type,
                               event_type=data.event_type, override_confirmed=data.override_confirmed,
                               override_reason=data.override_reason)
        return {"admission": decision.value}

    def _check_scan_target(self, working: WorkingCopy, data: cmd.RecordScanPayload):
        if working.venue(data.venue_id) is None:
            raise NotFound(f"Venue '{data.venue_id}' not found")
        if data.area_id:
            check_graph(working, data.venue_id, data.area_id, data.device_id)
        elif data.device_id:
            device = working.device(data.device_id)
            if device is None:
                raise NotFound(f"Device '{data.device_id}' not found")
            area = working.area(device.area_id)
            if area is None or area.venue_id != data.venue_id:
                raise ValidationError(f"Device '{data.device_id}' is not in venue '{data.venue_id}'")

    def _record_scan(self, working, user, command):
        data = self._parse(cmd.RecordScanPayload, command)
        ensure_not_banned(self.store, user.id, data.venue_id)
        self._require_venue(user, data.venue_id)
        self._check_scan_target(working, data)

        business_id = working.business_id_for_venue(data.venue_id)
        patrons, bans = self.store.fetch_patron_registry(business_id)
        now = datetime.utcnow()
        decision = evaluate(data.document, patrons, bans, data.venue_id, now)

        doc = data.document
        record = {
            "business_id": business_id,
            "venue_id": data.venue_id,
            "area_id": data.area_id,
            "device_id": data.device_id,
            "user_id": user.id,
            "timestamp": now,
            "scan_result": decision.status,
            "denial_reason": decision.reason,
            "age": decision.age,
            "age_band": age_band(decision.age),
            "sex": doc.sex,
            "zip_code": doc.postal_code,
            "first_name": doc.first_name,
            "last_name": doc.last_name,
            "dob": doc.date_of_birth.isoformat() if doc.date_of_birth else None,
            "id_number_last4": doc.id_number[-4:] if doc.id_number else None,
            "issuing_state": doc.issuing_state,
            "city": doc.city,
            "address_street": doc.address_street,
        }
        row = self.store.insert(ScanEvent(**sanitize_scan(record, doc.issuing_state)))
        working.scan_events.insert(0, ScanEventOut.model_validate(row))
        logger.info(f"[SCAN] {decision.status} {decision.reason or ''} venue={data.venue_id}".rstrip())

        if decision.reason == BANNED and decision.match is not None:
            person = decision.match.person
            self._log_enforcement(working, user, ban_id=decision.match.ban.id, venue_id=data.venue_id,
                                  device_id=data.device_id, result="BLOCKED",
                                  person_name=f"{person.first_name} {person.last_name}")

        outcome = {"scan": decision}
        if decision.status == ACCEPTED and settings.SCAN_AUTO_COUNT and data.area_id:
            admission = self._count(working, user, venue_id=data.venue_id, area_id=data.area_id,
                                    device_id=data.device_id, delta=1, flow_type="IN", event_type="SCAN",
                                    override_confirmed=data.override_confirmed,
                                    override_reason=data.override_reason)
            outcome["admission"] = admission.value
        return outcome

    def _reset_counts(self, working, user, command):
        if not command.payload and command.venue_id:
            command = command.model_copy(update={"payload": {"scope": "VENUE", "target_id": command.venue_id}})
        data = self._parse(cmd.ResetCountsPayload, command)
        if data.scope == "VENUE":
            self._require_venue(user, data.target_id)
        else:
            self._area_in_scope(working, user, data.target_id)
        reset_counts(self.store, working, scope=data.scope, target_id=data.target_id, user_id=user.id)

    def _add_capacity_override(self, working, user, command):
        self._require_admin(user)
        data = self._parse(cmd.CapacityOverrideCreate, command)
        venue = working.venue(data.venue_id)
        if venue is None:
            raise NotFound(f"Venue '{data.venue_id}' not found")
        self._require_venue(user, venue.id)
        if data.area_id and self._area_in_scope(working, user, data.area_id).venue_id != venue.id:
            raise ValidationError(f"Area '{data.area_id}' does not belong to venue '{venue.id}'")
        if data.end_datetime <= data.start_datetime:
            raise ValidationError("An override must end after it starts")
        self.store.insert(CapacityOverride(**data.model_dump(), business_id=venue.business_id,
                                           override_type="SCHEDULED", created_by_user_id=user.id,
                                           created_at=datetime.utcnow()))
        logger.info(f"[SYNC] Capacity override {data.capacity_value} scheduled for venue {venue.id}")

    # ── Structure actions ────────────────────────────────────────────────
    def _open_business(self, user: UserOut, name: str) -> str:
        """First venue of an owner with no business yet: the business is opened for them."""
        business = self.store.insert(Business(name=name, created_at=datetime.utcnow()))
        self.store.update_fields(Profile, user.id, {"business_id": business.id})
        user.business_id = business.id
        logger.info(f"[SYNC] Business {business.id} opened for {user.id}")
        return business.id

    def _add_venue(self, working, user, command):
        self._require_admin(user)
        data = self._parse(cmd.VenueCreate, command)
        if data.business_id and data.business_id != user.business_id:
            raise Forbidden(f"Business '{data.business_id}' is not yours", reason="OUT_OF_SCOPE")
        business_id = user.business_id or self._open_business(user, data.business_name or data.name)
        fields = data.model_dump(exclude_none=True, exclude={"business_name"})
        fields["business_id"] = business_id
        now = datetime.utcnow()
        venue = self.store.insert(Venue(**fields, created_at=now, updated_at=now))
        self._assign(user, venue_id=venue.id)
        logger.info(f"[SYNC] Venue {venue.id} '{venue.name}' created")

    def _update_venue(self, working, user, command):
        data = self._parse(cmd.VenueUpdate, command)
        self._require_venue(user, data.id)
        fields = data.model_dump(exclude_unset=True, exclude={"id"})
        fields["updated_at"] = datetime.utcnow()
        self.store.update_fields(Venue, data.id, fields)

    def _delete_venue(self, working, user, command):
        """Deactivates the venue. Venue rows are never removed."""
        data = self._parse(cmd.DeletePayload, command)
        self._require_admin(user)
        self._require_venue(user, data.id)
        self.store.update_fields(Venue, data.id, {"status": "INACTIVE", "updated_at": datetime.utcnow()})
        logger.info(f"[SYNC] Venue {data.id} deactivated by {user.id}")

    def _add_area(self, working, user, command):
        data = self._parse(cmd.AreaCreate, command)
        venue = working.venue(data.venue_id)
        if venue is None:
            raise NotFound(f"Venue '{data.venue_id}' not found")
        self._require_venue(user, venue.id)
        now = datetime.utcnow()
        area = self.store.insert(Area(**data.model_dump(exclude_none=True), created_at=now, updated_at=now))
        self.store.ensure_snapshot(area.id, venue.id, venue.business_id)
        self._assign(user, area_id=area.id)

    def _update_area(self, working, user, command):
        data = self._parse(cmd.AreaUpdate, command)
        self._area_in_scope(working, user, data.id)
        fields = data.model_dump(exclude_unset=True, exclude={"id"})
        fields["updated_at"] = datetime.utcnow()
        self.store.update_fields(Area, data.id, fields)

    def _delete_area(self, working, user, command):
        data = self._parse(cmd.DeletePayload, command)
        self._area_in_scope(working, user, data.id)
        self.store.update_fields(Area, data.id, {"is_active": False, "updated_at": datetime.utcnow()})
        logger.info(f"[SYNC] Area {data.id} deactivated by {user.id}")

    def _add_device(self, working, user, command):
        data = self._parse(cmd.DeviceCreate, command)
        area = self._area_in_scope(working, user, data.area_id)
        fields = data.model_dump(exclude_none=True)
        fields.setdefault("button_config", DEFAULT_BUTTON_CONFIG)
        device = self.store.insert(Device(**fields, business_id=working.business_id_for_venue(area.venue_id),
                                          created_at=datetime.utcnow()))
        self._assign(user, device_id=device.id)

    def _update_device(self, working, user, command):
        data = self._parse(cmd.DeviceUpdate, command)
        device = self._device_in_scope(working, user, data.id)
        fields = data.model_dump(exclude_unset=True, exclude={"id"})
        self.store.update_fields(Device, data.id, fields)
        for key, value in fields.items():
            setattr(device, key, value)

    def _delete_device(self, working, user, command):
        data = self._parse(cmd.DeletePayload, command)
        self._device_in_scope(working, user, data.id)
        self.store.soft_delete_device(data.id, user.id)
        working.devices = [d for d in working.devices if d.id != data.id]
        logger.info(f"[SYNC] Device {data.id} soft-deleted by {user.id}")

    # ── Principal actions ────────────────────────────────────────────────
    def _add_user(self, working, user, command):
        self._require_admin(user)
        data = self._parse(cmd.UserCreate, command)
        if user.business_id is None:
            raise Forbidden("Open a business before adding staff", reason="OUT_OF_SCOPE")
        if working.user(data.id) is not None:
            raise ValidationError(f"User '{data.id}' already exists")
        self._check_assignments(working, user, data.assigned_venue_ids,
                                data.assigned_area_ids, data.assigned_device_ids)
        self.store.insert(Profile(**data.model_dump(), business_id=user.business_id,
                                  created_at=datetime.utcnow()))

    def _update_user(self, working, user, command):
        self._require_admin(user)
        data = self._parse(cmd.UserUpdate, command)
        self._tenant_user(working, user, data.id)
        fields = data.model_dump(exclude_unset=True, exclude={"id"})
        self._check_assignments(working, user, fields.get("assigned_venue_ids"),
                                fields.get("assigned_area_ids"), fields.get("assigned_device_ids"))
        self.store.update_fields(Profile, data.id, fields)

    def _delete_user(self, working, user, command):
        self._require_admin(user)
        data = self._parse(cmd.DeletePayload, command)
        self._tenant_user(working, user, data.id)
        self.store.delete_profile(data.id)
        working.users = [u for u in working.users if u.id != data.id]

    def _update_business(self, working, user, command):
        self._require_admin(user)
        data = self._parse(cmd.BusinessUpdate, command)
        business = working.business(user.business_id)
        if business is None:
            raise NotFound(f"Business '{user.business_id}' not found")
        fields = data.model_dump(exclude_unset=True)
        if "settings" in fields:
            fields["settings"] = {**business.settings, **(fields["settings"] or {})}
        row = self.store.update_fields(Business, business.id, fields)
        working.businesses = [BusinessOut.model_validate(row) if b.id == business.id else b
                              for b in working.businesses]

    # ── Ban actions ──────────────────────────────────────────────────────
    def _create_ban(self, working, user, command):
        self._require_admin(user)
        data = self._parse(cmd.StaffBanCreate, command)
        target = self._tenant_user(working, user, data.user_id)
        if data.scope_type == "VENUE":
            if not data.scope_venue_ids:
                raise ValidationError("A VENUE ban needs at least one venue id")
            self._check_assignments(working, user, venue_ids=data.scope_venue_ids)
        all_devices = self.store.fetch_devices(include_deleted=True)
        ban = self.store.insert(StaffBan(**data.model_dump(), business_id=user.business_id,
                                         created_by_user_id=user.id, created_at=datetime.utcnow()))

        apply_ban(ban, target, working, devices=all_devices)
        self.store.save_assignments(target.id, target.assigned_venue_ids,
                                    target.assigned_area_ids, target.assigned_device_ids)

    def _revoke_ban(self, working, user, command):
        self._require_admin(user)
        data = self._parse(cmd.RevokeBanPayload, command)
        ban = self.store.get(StaffBan, data.ban_id)
        if ban is None:
            raise NotFound(f"Ban '{data.ban_id}' not found")
        self._require_tenant(user, ban.business_id, f"Ban '{data.ban_id}'")
        self.store.update_fields(StaffBan, data.ban_id, {
            "status": "REVOKED",
            "revoked_by_user_id": user.id,
            "revoked_at": datetime.utcnow(),
            "revoked_reason": data.reason,
        })
        logger.info(f"[BAN] Ban {data.ban_id} revoked by {user.id}")

    def _create_patron_ban(self, working, user, command):
        self._require_admin(user)
        data = self._parse(cmd.PatronBanCreate, command)
        if user.business_id is None:
            raise Forbidden("Open a business before banning patrons", reason="OUT_OF_SCOPE")
        self._check_assignments(working, user, venue_ids=data.ban.location_ids)
        now = datetime.utcnow()

        person = self.store.get(BannedPerson, data.person.id) if data.person.id else None
        if person is None:
            person = self.store.insert(BannedPerson(**data.person.model_dump(exclude_none=True),
                                                    business_id=user.business_id,
                                                    created_at=now, updated_at=now))
        else:
            self._require_tenant(user, person.business_id, f"Person '{person.id}'")
        ban_fields = data.ban.model_dump()
        ban_fields["start_datetime"] = ban_fields["start_datetime"] or now
        self.store.insert(PatronBan(**ban_fields, banned_person_id=person.id, business_id=user.business_id,
                                    status="ACTIVE", created_by_user_id=user.id,
                                    created_at=now, updated_at=now))
        logger.info(f"[BAN] Patron {person.first_name} {person.last_name} banned ({data.ban.reason_category})")

    def _patron_ban_in_tenant(self, user: UserOut, ban_id: str):
        ban = self.store.get(PatronBan, ban_id)
        if ban is None:
            raise NotFound(f"Patron ban '{ban_id}' not found")
        self._require_tenant(user, ban.business_id, f"Patron ban '{ban_id}'")
        return ban

    def _update_patron_ban(self, working, user, command):
        self._require_admin(user)
        data = self._parse(cmd.PatronBanUpdate, command)
        self._patron_ban_in_tenant(user, data.ban_id)
        fields = data.model_dump(exclude_unset=True, exclude={"ban_id"})
        if fields.get("status") == "REMOVED":
            fields["removed_by_user_id"] = user.id
        fields["updated_at"] = datetime.utcnow()
        self.store.update_fields(PatronBan, data.ban_id, fields)

    def _record_ban_enforcement(self, working, user, command):
        """Door staff log what they did about a flagged patron."""
        data = self._parse(cmd.BanEnforcementCreate, command)
        self._require_venue(user, data.venue_id)
        if data.device_id:
            self._device_in_scope(working, user, data.device_id)
        self._patron_ban_in_tenant(user, data.ban_id)
        self._log_enforcement(working, user, ban_id=data.ban_id, venue_id=data.venue_id,
                              device_id=data.device_id, result=data.result,
                              person_name=data.person_snapshot_name,
                              override_reason=data.override_reason, notes=data.notes)
