"""Capacity policy, ID evaluation, ban matching tiers and PII compliance."""

import pytest
from datetime import date, datetime, timedelta
from types import SimpleNamespace

from clicr.schemas.id_document import ParsedDocument
from clicr.services.capacity_policy import (
    HARD_STOP, MANAGER_OVERRIDE, WARN_ONLY, AdmissionDecision, CapacityRule, decide, rule_for_venue,
)
from clicr.services.compliance import get_rule, restriction_reason, sanitize_scan
from clicr.services.id_evaluator import age_band, evaluate, find_matching_ban, review_matches

NOW = datetime(2026, 6, 1, 23, 0)


class TestCapacityPolicy:
    @pytest.mark.parametrize("mode, expected", [
        (WARN_ONLY, AdmissionDecision.WARN),
        (HARD_STOP, AdmissionDecision.BLOCK),
        (MANAGER_OVERRIDE, AdmissionDecision.REQUIRE_OVERRIDE),
    ])
    def test_at_capacity_follows_mode(self, mode, expected):
        assert decide(100, CapacityRule(100, mode), is_entry_attempt=True) == expected

    def test_below_capacity_allows(self):
        assert decide(99, CapacityRule(100, HARD_STOP), True) == AdmissionDecision.ALLOW

    def test_exits_always_allowed(self):
        assert decide(150, CapacityRule(100, HARD_STOP), is_entry_attempt=False) == AdmissionDecision.ALLOW

    @pytest.mark.parametrize("capacity", [0, -5])
    def test_no_limit(self, capacity):
        assert decide(10_000, CapacityRule(capacity, HARD_STOP), True) == AdmissionDecision.ALLOW

    def test_rule_for_missing_venue_has_no_limit(self):
        assert rule_for_venue(None) == CapacityRule(0, WARN_ONLY)

    def test_rule_from_venue(self):
        venue = SimpleNamespace(default_capacity_total=250, capacity_enforcement_mode=HARD_STOP)
        assert rule_for_venue(venue) == CapacityRule(250, HARD_STOP)


def person(**overrides):
    fields = dict(id="P1", first_name="Jordan", last_name="Blake", date_of_birth=date(1990, 5, 5),
                  id_number="D1234567", issuing_state="TX")
    fields.update(overrides)
    return SimpleNamespace(**fields)


def patron_ban(**overrides):
    fields = dict(id="PB1", banned_person_id="P1", status="ACTIVE", ban_type="PERMANENT",
                  end_datetime=None, reason_category="VIOLENCE", applies_to_all_locations=True,
                  location_ids=[])
    fields.update(overrides)
    return SimpleNamespace(**fields)


def doc(**overrides):
    fields = dict(first_name="Jordan", last_name="Blake", date_of_birth=date(1990, 5, 5),
                  expiration_date=date(2030, 1, 1), id_number="D1234567", issuing_state="TX")
    fields.update(overrides)
    return ParsedDocument(**fields)


class TestEvaluate:
    def test_clean_adult_accepted(self):
        decision = evaluate(doc(last_name="Other", id_number="X"), [person()], [patron_ban()], "V1", NOW)
        assert decision.status == "ACCEPTED"
        assert decision.message == "Entry Allowed"
        assert decision.age == 36

    def test_underage_denied_with_age_in_message(self):
        decision = evaluate(doc(date_of_birth=date(2007, 1, 1)), [], [], "V1", NOW)
        assert decision.status == "DENIED"
        assert decision.reason == "UNDERAGE"
        assert decision.message == "UNDERAGE (19)"

    def test_underage_checked_before_expiry_and_bans(self):
        young = doc(date_of_birth=date(2007, 1, 1), expiration_date=date(2020, 1, 1))
        assert evaluate(young, [person(date_of_birth=date(2007, 1, 1))], [patron_ban()], "V1", NOW).reason == "UNDERAGE"

    def test_expired_denied(self):
        decision = evaluate(doc(last_name="Other", id_number="X", expiration_date=date(2026, 5, 31)),
                            [], [], "V1", NOW)
        assert decision.reason == "EXPIRED_ID"
        assert decision.message == "EXPIRED ID"

    def test_scanner_age_and_expiry_flags_win(self):
        assert evaluate(doc(age=20), [], [], "V1", NOW).reason == "UNDERAGE"
        assert evaluate(doc(is_expired=True), [], [], "V1", NOW).reason == "EXPIRED_ID"

    def test_unknown_age_does_not_deny(self):
        decision = evaluate(ParsedDocument(first_name="No", last_name="Dob"), [], [], "V1", NOW)
        assert decision.status == "ACCEPTED"
        assert decision.age is None

    def test_banned_by_id_number(self):
        decision = evaluate(doc(first_name="J", last_name="B", date_of_birth=date(1991, 1, 1)),
                            [person()], [patron_ban()], "V1", NOW)
        assert decision.reason == "BANNED"
        assert decision.message == "BANNED: VIOLENCE"
        assert decision.match.person.id == "P1"

    def test_banned_by_name_and_dob_case_insensitive(self):
        decision = evaluate(doc(first_name="JORDAN", last_name="blake", id_number=None),
                            [person()], [patron_ban()], "V1", NOW)
        assert decision.reason == "BANNED"

    def test_id_number_from_other_state_does_not_match(self):
        match = find_matching_ban(doc(issuing_state="NV", date_of_birth=date(1991, 1, 1)),
                                  [person()], [patron_ban()], "V1", NOW)
        assert match is None

    def test_ban_scoped_to_other_venue_ignored(self):
        scoped = patron_ban(applies_to_all_locations=False, location_ids=["V2"])
        assert evaluate(doc(), [person()], [scoped], "V1", NOW).status == "ACCEPTED"
        assert evaluate(doc(), [person()], [scoped], "V2", NOW).reason == "BANNED"

    def test_lapsed_temporary_ban_ignored(self):
        lapsed = patron_ban(ban_type="TEMPORARY", end_datetime=NOW - timedelta(days=1))
        assert evaluate(doc(), [person()], [lapsed], "V1", NOW).status == "ACCEPTED"

    def test_removed_ban_ignored(self):
        assert evaluate(doc(), [person()], [patron_ban(status="REMOVED")], "V1", NOW).status == "ACCEPTED"


class TestReviewMatches:
    def test_same_name_same_dob_is_hard(self):
        matches = review_matches(doc(id_number=None), [person()], [patron_ban()], "V1", NOW)
        assert [m.confidence for m in matches] == ["HARD"]

    def test_same_name_other_dob_is_soft(self):
        matches = review_matches(doc(date_of_birth=date(1985, 1, 1)), [person()], [patron_ban()], "V1", NOW)
        assert [m.confidence for m in matches] == ["SOFT"]

    def test_hard_matches_listed_first(self):
        people = [person(id="P2", date_of_birth=None), person()]
        bans = [patron_ban(id="PB2", banned_person_id="P2"), patron_ban()]
        matches = review_matches(doc(), people, bans, "V1", NOW)
        assert [m.confidence for m in matches] == ["HARD", "SOFT"]

    def test_no_name_no_matches(self):
        assert review_matches(ParsedDocument(id_number="D1234567"), [person()], [patron_ban()], "V1", NOW) == []


class TestAgeBand:
    @pytest.mark.parametrize("age, band", [
        (None, "Unknown"), (17, "Under 18"), (20, "18-20"), (21, "21-24"),
        (27, "25-29"), (35, "30-39"), (52, "40+"),
    ])
    def test_bands(self, age, band):
        assert age_band(age) == band


class TestCompliance:
    RECORD = {
        "venue_id": "V1", "timestamp": NOW, "scan_result": "ACCEPTED", "age_band": "21-24",
        "first_name": "Jordan", "last_name": "Blake", "dob": "1990-05-05",
        "id_number_last4": "4567", "issuing_state": "CA", "city": "LA",
    }

    def test_device_only_state_keeps_verdict_only(self):
        sanitized = sanitize_scan(self.RECORD, "ca")
        assert sanitized == {"venue_id": "V1", "timestamp": NOW, "scan_result": "ACCEPTED", "age_band": "21-24"}

    def test_permissive_state_keeps_pii(self):
        assert sanitize_scan(self.RECORD, "TX")["first_name"] == "Jordan"

    def test_unknown_state_uses_default_rule(self):
        rule = get_rule("WA")
        assert rule.state_code == "WA"
        assert rule.store_pii and rule.retention_days == 30

    def test_restriction_reason(self):
        assert "CA" in restriction_reason("CA")
        assert restriction_reason("FL") is None
