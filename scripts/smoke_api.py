#!/usr/bin/env python3
"""Smoke script for the schedule API against a running server."""

import sys

import httpx


BASE_URL = "http://127.0.0.1:8000"
DATE = "2025-03-10"


def smoke_book_and_cancel() -> bool:
    print("=" * 60)
    print(f"Materializing {DATE}, booking 09:00 and cancelling it")
    print("=" * 60)

    try:
        httpx.post(f"{BASE_URL}/schedule/days", json={"date": DATE}, timeout=10.0).raise_for_status()

        resp = httpx.post(
            f"{BASE_URL}/schedule/book",
            json={
                "date": DATE,
                "time": "09:00",
                "name": "Ana",
                "email": "ana@example.com",
                "company": "Acme",
                "subject": "Kickoff",
            },
            timeout=30.0,
        )
        if resp.status_code == 409:
            print("Slot already booked, continuing with cancel")
        else:
            resp.raise_for_status()
            data = resp.json()
            print(f"Booked. event_id={data['calendar_event_id']} calendar_error={data['calendar_error']}")

        day = httpx.get(f"{BASE_URL}/schedule/{DATE}", timeout=10.0).json()
        for slot in day["slots"]:
            print(f"  {slot['time']} {slot['status']:<9} {slot['subject']}")

        resp = httpx.post(f"{BASE_URL}/schedule/cancel", json={"date": DATE, "time": "09:00"}, timeout=30.0)
        resp.raise_for_status()
        print(f"Cancel action: {resp.json()['action']}")
        return True
    except httpx.HTTPStatusError as e:
        print(f"HTTP Error: {e.response.status_code}")
        print(f"Response: {e.response.text}")
        return False
    except Exception as e:
        print(f"Error: {e}")
        return False


def smoke_agent_gate() -> bool:
    print("\n" + "=" * 60)
    print("Agent intent without confirmation must be held")
    print("=" * 60)

    resp = httpx.post(
        f"{BASE_URL}/schedule/agent",
        json={"intent": {"action": "cancelBooking", "arguments": {"date": DATE, "time": "10:00"}}},
        timeout=10.0,
    )
    print(f"Status: {resp.status_code}")
    print(f"Envelope: {resp.json()}")
    return resp.status_code == 400


def main():
    try:
        httpx.get(f"{BASE_URL}/health", timeout=5.0)
        print("Server is running\n")
    except Exception:
        print("Server is not running!")
        print("   Please start it with: uvicorn app.main:app --reload --port 8000")
        sys.exit(1)

    ok = smoke_book_and_cancel() and smoke_agent_gate()
    print("\n" + ("Smoke checks passed" if ok else "Smoke checks FAILED"))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
