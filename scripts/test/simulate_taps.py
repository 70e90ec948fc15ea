"""
Send RECORD_EVENT taps (and optionally RECORD_SCAN) to a running backend.
Handy for watching capacity warnings, hard stops and alerts without a tablet.
Usage: python scripts/test/simulate_taps.py --user owner-1 --venue <id> --area <id> --count 20
"""

import argparse
import requests
from datetime import date

BACKEND_URL = "http://127.0.0.1:8080/api/v1"


def post_action(user_id, action, payload, api_key=None):
    headers = {"X-User-Id": user_id}
    if api_key:
        headers["X-API-Key"] = api_key
    resp = requests.post(f"{BACKEND_URL}/sync", json={"action": action, "payload": payload},
                         headers=headers, timeout=10)
    return resp.status_code, resp.json()


def simulate_taps(user_id, venue_id, area_id, device_id, count, delta, override, api_key):
    for i in range(count):
        status, body = post_action(user_id, "RECORD_EVENT", {
            "venue_id": venue_id, "area_id": area_id, "device_id": device_id,
            "delta": delta, "override_confirmed": override,
        }, api_key)
        if status != 200:
            print(f"❌ tap {i + 1}: HTTP {status} {body.get('error')}/{body.get('reason')}: {body.get('detail')}")
            break
        area = next((a for a in body["state"]["areas"] if a["id"] == area_id), None)
        occupancy = area["current_occupancy"] if area else "?"
        print(f"✅ tap {i + 1}: {delta:+d} → {occupancy} (admission={body.get('admission')})")


def simulate_scan(user_id, venue_id, area_id, first, last, dob, state, api_key):
    status, body = post_action(user_id, "RECORD_SCAN", {
        "venue_id": venue_id, "area_id": area_id,
        "document": {"first_name": first, "last_name": last, "date_of_birth": dob, "issuing_state": state},
    }, api_key)
    if status != 200:
        print(f"❌ scan: HTTP {status}: {body}")
        return
    print(f"✅ scan → {body['scan']['status']}: {body['scan']['message']}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Simulate door taps and ID scans")
    parser.add_argument("--user", required=True, help="X-User-Id of an assigned staff member")
    parser.add_argument("--venue", required=True)
    parser.add_argument("--area", required=True)
    parser.add_argument("--device", default=None)
    parser.add_argument("--count", type=int, default=10)
    parser.add_argument("--delta", type=int, default=1)
    parser.add_argument("--override", action="store_true", help="Confirm manager override at capacity")
    parser.add_argument("--scan", action="store_true", help="Send one RECORD_SCAN instead of taps")
    parser.add_argument("--first", default="Test")
    parser.add_argument("--last", default="Patron")
    parser.add_argument("--dob", default=date(1995, 1, 1).isoformat())
    parser.add_argument("--state", default="TX")
    parser.add_argument("--api-key", default=None)
    args = parser.parse_args()

    if args.scan:
        simulate_scan(args.user, args.venue, args.area, args.first, args.last, args.dob, args.state, args.api_key)
    else:
        simulate_taps(args.user, args.venue, args.area, args.device, args.count, args.delta,
                      args.override, args.api_key)
