# clicr/services/capacity_policy.py
"""
Capacity Policy Engine: pure admission decision for an entry attempt.

Exits are always allowed. A max capacity of zero or less means no limit.
At or above capacity the venue's enforcement mode decides:
  HARD_STOP        → BLOCK
  MANAGER_OVERRIDE → REQUIRE_OVERRIDE
  WARN_ONLY        → WARN
"""

from dataclasses import dataclass
from enum import Enum

WARN_ONLY = "WARN_ONLY"
HARD_STOP = "HARD_STOP"
MANAGER_OVERRIDE = "MANAGER_OVERRIDE"


class AdmissionDecision(str, Enum):
    ALLOW = "ALLOW"
    WARN = "WARN"
    BLOCK = "BLOCK"
    REQUIRE_OVERRIDE = "REQUIRE_OVERRIDE"


@dataclass(frozen=True)
class CapacityRule:
    max_capacity: int
    mode: str = WARN_ONLY


def rule_for_venue(venue) -> CapacityRule:
    if venue is None:
        return CapacityRule(max_capacity=0, mode=WARN_ONLY)
    return CapacityRule(max_capacity=venue.default_capacity_total or 0,
                        mode=venue.capacity_enforcement_mode or WARN_ONLY)


def decide(current_occupancy: int, rule: CapacityRule, is_entry_attempt: bool) -> AdmissionDecision:
    if not is_entry_attempt or rule.max_capacity <= 0:
        return AdmissionDecision.ALLOW
    if current_occupancy < rule.max_capacity:
        return AdmissionDecision.ALLOW
    if rule.mode == HARD_STOP:
        return AdmissionDecision.BLOCK
    if rule.mode == MANAGER_OVERRIDE:
        return AdmissionDecision.REQUIRE_OVERRIDE
    return AdmissionDecision.WARN
