"""Access scope filter and staff ban cascade (pure, no store)."""

from datetime import datetime, timedelta
from types import SimpleNamespace

from clicr.schemas.state import (
    AreaOut, BusinessOut, CountEventOut, DeviceOut, ScanEventOut, UserOut, VenueOut,
)
from clicr.services.access_scope import filter_state
from clicr.services.ban_cascade import apply_ban, is_user_banned
from clicr.services.working_copy import WorkingCopy

NOW = datetime(2026, 6, 1, 22, 0)


def make_working():
    """V1 → A1, A2 → D1, D2, D3 ; V2 → A3 → D4 (the venue-ban example)."""
    return WorkingCopy(
        businesses=[BusinessOut(id="B1", name="Group")],
        venues=[VenueOut(id="V1", business_id="B1", name="One"),
                VenueOut(id="V2", business_id="B1", name="Two")],
        areas=[AreaOut(id="A1", venue_id="V1", name="Floor", current_occupancy=4),
               AreaOut(id="A2", venue_id="V1", name="Bar"),
               AreaOut(id="A3", venue_id="V2", name="Patio")],
        devices=[DeviceOut(id="D1", area_id="A1", name="d1"),
                 DeviceOut(id="D2", area_id="A1", name="d2"),
                 DeviceOut(id="D3", area_id="A2", name="d3"),
                 DeviceOut(id="D4", area_id="A3", name="d4")],
        events=[CountEventOut(id="E1", venue_id="V1", area_id="A1", delta=1, flow_type="IN",
                              event_type="TAP", timestamp=NOW),
                CountEventOut(id="E2", venue_id="V2", area_id="A3", delta=1, flow_type="IN",
                              event_type="TAP", timestamp=NOW)],
        scan_events=[ScanEventOut(id="S1", venue_id="V2", timestamp=NOW, scan_result="ACCEPTED")],
        users=[UserOut(id="U1", business_id="B1", assigned_venue_ids=["V1", "V2"],
                       assigned_area_ids=["A1", "A2", "A3"],
                       assigned_device_ids=["D1", "D2", "D3", "D4"]),
               UserOut(id="U2", business_id="B1", assigned_venue_ids=["V1"]),
               UserOut(id="U3", business_id="B1", assigned_venue_ids=["V2"])],
    )


def ban(**overrides):
    fields = dict(user_id="U1", scope_type="VENUE", scope_venue_ids=["V1"], status="ACTIVE", ends_at=None)
    fields.update(overrides)
    return SimpleNamespace(**fields)


class TestAccessScopeFilter:
    def test_areas_follow_venue_membership_not_area_list(self):
        working = make_working()
        user = UserOut(id="U2", business_id="B1", assigned_venue_ids=["V1"], assigned_area_ids=[])

        state = filter_state(user, working)
        assert [v.id for v in state.venues] == ["V1"]
        assert [a.id for a in state.areas] == ["A1", "A2"]
        assert [d.id for d in state.devices] == ["D1", "D2", "D3"]
        assert [e.id for e in state.events] == ["E1"]
        assert state.scan_events == []

    def test_other_users_visible_only_when_sharing_a_venue(self):
        working = make_working()
        state = filter_state(working.user("U2"), working)
        assert {u.id for u in state.users} == {"U1", "U2"}

    def test_no_assignments_means_no_data(self):
        working = make_working()
        user = UserOut(id="U9", business_id="B1")

        state = filter_state(user, working)
        assert state.venues == state.areas == state.devices == state.events == []
        assert state.users == []
        assert state.current_user.id == "U9"
        assert state.business.id == "B1"

    def test_occupancy_and_degraded_flags_pass_through(self):
        working = make_working()
        working.degraded = ["scans"]
        state = filter_state(working.user("U1"), working)
        assert next(a for a in state.areas if a.id == "A1").current_occupancy == 4
        assert state.degraded == ["scans"]


class TestBanCascade:
    def test_venue_ban_removes_transitive_ids(self):
        working = make_working()
        user = working.user("U1")

        apply_ban(ban(), user, working)

        assert user.assigned_venue_ids == ["V2"]
        assert user.assigned_area_ids == ["A3"]
        assert user.assigned_device_ids == ["D4"]

    def test_venue_ban_drops_retired_devices_when_given_full_list(self):
        working = make_working()
        user = working.user("U1")
        user.assigned_device_ids.append("D9")          # soft-deleted, gone from working.devices
        all_devices = working.devices + [DeviceOut(id="D9", area_id="A2", name="retired")]

        apply_ban(ban(), user, working, devices=all_devices)

        assert user.assigned_device_ids == ["D4"]

    def test_business_ban_empties_everything(self):
        working = make_working()
        user = working.user("U1")

        apply_ban(ban(scope_type="BUSINESS", scope_venue_ids=[]), user, working)

        assert user.assigned_venue_ids == user.assigned_area_ids == user.assigned_device_ids == []

    def test_inactive_ban_is_noop(self):
        working = make_working()
        user = working.user("U1")
        apply_ban(ban(status="SCHEDULED"), user, working)
        assert user.assigned_venue_ids == ["V1", "V2"]

    def test_cascade_only_shrinks(self):
        working = make_working()
        user = working.user("U3")
        before = set(user.assigned_venue_ids)

        apply_ban(ban(user_id="U3"), user, working)
        assert set(user.assigned_venue_ids) <= before

    def test_banned_user_loses_visibility(self):
        working = make_working()
        user = working.user("U1")
        apply_ban(ban(), user, working)

        state = filter_state(user, working)
        assert [v.id for v in state.venues] == ["V2"]


class TestIsUserBanned:
    def test_venue_ban_covers_only_listed_venues(self):
        bans = [ban()]
        assert is_user_banned(bans, "U1", "V1", NOW)
        assert not is_user_banned(bans, "U1", "V2", NOW)

    def test_business_ban_covers_all_venues(self):
        assert is_user_banned([ban(scope_type="BUSINESS", scope_venue_ids=[])], "U1", "V2", NOW)

    def test_expired_and_revoked_bans_ignored(self):
        bans = [ban(ends_at=NOW - timedelta(hours=1)), ban(status="REVOKED")]
        assert not is_user_banned(bans, "U1", "V1", NOW)

    def test_other_users_bans_ignored(self):
        assert not is_user_banned([ban(user_id="U2")], "U1", "V1", NOW)
