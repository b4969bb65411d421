#!/usr/bin/env python3
"""
Booking and payment flow script.

DO NOT ADD BUSINESS LOGIC HERE.
This script only orchestrates API calls.
All rules live in the backend.

Tokens are minted locally with JWT_SECRET_KEY, which must match the server's.

Usage:
    python scripts/flow_book_and_pay.py --resource-id <UUID> --start 2030-04-01T10:00:00Z --end 2030-04-01T12:00:00Z

Flow:
    1. Create booking as user
    2. Pay booking
    3. Fetch booking
    4. List bookings as admin
"""

import argparse
import json
import sys
from uuid import uuid4

import httpx

from slotbook.core.security import create_user_token

BASE_URL = "http://localhost:8000"


def api_request(token: str, method: str, endpoint: str, data: dict | None = None) -> dict:
    """Make authenticated API request."""
    headers = {"Authorization": f"Bearer {token}"}
    url = f"{BASE_URL}{endpoint}"

    if method == "GET":
        response = httpx.get(url, headers=headers, timeout=10.0, follow_redirects=True)
    elif method == "POST":
        response = httpx.post(url, headers=headers, json=data or {}, timeout=10.0, follow_redirects=True)
    else:
        raise ValueError(f"Unknown method: {method}")

    return {"status": response.status_code, "data": response.json() if response.text else {}}


def print_step(step: int, title: str):
    """Print step header."""
    print(f"\n{'='*60}")
    print(f"STEP {step}: {title}")
    print("="*60)


def print_result(result: dict, fields: list[str] | None = None):
    """Print result, optionally filtering fields."""
    if result["status"] >= 400:
        print(f"ERROR ({result['status']}): {json.dumps(result['data'], indent=2)}")
        return False

    print(f"Status: {result['status']}")
    if fields:
        filtered = {k: result["data"].get(k) for k in fields if k in result["data"]}
        print(json.dumps(filtered, indent=2))
    else:
        print(json.dumps(result["data"], indent=2))
    return True


def main():
    parser = argparse.ArgumentParser(description="Booking and payment flow")
    parser.add_argument("--resource-id", required=True, help="Resource UUID")
    parser.add_argument("--start", required=True, help="Start time (ISO 8601)")
    parser.add_argument("--end", required=True, help="End time (ISO 8601)")
    parser.add_argument("--slots", type=int, default=1, help="Slots to reserve")
    parser.add_argument("--skip-pay", action="store_true", help="Leave the booking PENDING")
    args = parser.parse_args()

    user_token = create_user_token(str(uuid4()), "USER")
    admin_token = create_user_token(str(uuid4()), "ADMIN")

    # Step 1: Create booking
    print_step(1, "Create booking")
    booking_result = api_request(user_token, "POST", "/api/v1/bookings/", {
        "resource_id": args.resource_id,
        "start_time": args.start,
        "end_time": args.end,
        "slots": args.slots,
    })
    if not print_result(booking_result, ["id", "status", "payment_status", "total_amount", "expired_at"]):
        sys.exit(1)

    booking_id = booking_result["data"]["id"]
    print(f"\nBooking created: {booking_id}")

    if not args.skip_pay:
        # Step 2: Pay booking
        print_step(2, "Pay booking")
        pay_result = api_request(user_token, "POST", f"/api/v1/bookings/{booking_id}/pay")
        if not print_result(pay_result, ["id", "status", "payment_status", "payment_at"]):
            sys.exit(1)
        print("\nBooking CONFIRMED")

    # Step 3: Fetch booking
    print_step(3, "Fetch booking")
    detail_result = api_request(user_token, "GET", f"/api/v1/bookings/{booking_id}")
    if not print_result(detail_result, ["id", "status", "payment_status", "resource"]):
        sys.exit(1)

    # Step 4: List bookings as admin
    print_step(4, "List bookings (admin)")
    list_result = api_request(admin_token, "GET", "/api/v1/bookings/?limit=5")
    if not print_result(list_result, ["total", "page", "limit"]):
        sys.exit(1)

    print("\n" + "="*60)
    print("FLOW COMPLETE")
    print("="*60)


if __name__ == "__main__":
    main()
