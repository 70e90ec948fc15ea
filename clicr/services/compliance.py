# clicr/services/compliance.py
"""
PII compliance rules for stored scan records, keyed by the document's issuing state.
Example rules only. Real retention and PII limits need legal review per state.
"""

from dataclasses import dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class ComplianceRule:
    state_code: str
    retention_days: int                      # -1 → indefinite
    store_pii: bool
    mask_id_number: bool
    age_verification_on_device_only: bool    # keep only the verdict, nothing identifying


DEFAULT_RULE = ComplianceRule("DEFAULT", retention_days=30, store_pii=True,
                              mask_id_number=False, age_verification_on_device_only=False)

STATE_RULES = {
    "CA": ComplianceRule("CA", retention_days=0, store_pii=False, mask_id_number=True,
                         age_verification_on_device_only=True),
    "NY": ComplianceRule("NY", retention_days=1, store_pii=False, mask_id_number=True,
                         age_verification_on_device_only=True),
    "TX": ComplianceRule("TX", retention_days=7, store_pii=True, mask_id_number=False,
                         age_verification_on_device_only=False),
    "FL": ComplianceRule("FL", retention_days=90, store_pii=True, mask_id_number=False,
                         age_verification_on_device_only=False),
}

PII_FIELDS = ("first_name", "last_name", "dob", "address_street", "city")
DEVICE_ONLY_FIELDS = ("timestamp", "venue_id", "area_id", "device_id", "user_id", "business_id",
                      "scan_result", "denial_reason", "age_band")


def get_rule(state: Optional[str]) -> ComplianceRule:
    if not state:
        return DEFAULT_RULE
    state = state.upper()
    return STATE_RULES.get(state) or replace(DEFAULT_RULE, state_code=state)


def sanitize_scan(record: dict, state: Optional[str]) -> dict:
    """Strip or mask the fields the issuing state does not allow us to keep."""
    rule = get_rule(state)
    if rule.age_verification_on_device_only:
        return {k: v for k, v in record.items() if k in DEVICE_ONLY_FIELDS}

    sanitized = dict(record)
    if not rule.store_pii:
        for key in PII_FIELDS:
            sanitized.pop(key, None)
    if rule.mask_id_number and sanitized.get("id_number_last4"):
        sanitized["id_number_last4"] = sanitized["id_number_last4"][-4:]
    return sanitized


def restriction_reason(state: Optional[str]) -> Optional[str]:
    rule = get_rule(state)
    if rule.age_verification_on_device_only:
        return f"Data storage restricted by {rule.state_code} privacy laws."
    if not rule.store_pii:
        return f"PII storage restricted by {rule.state_code} privacy laws."
    return None
