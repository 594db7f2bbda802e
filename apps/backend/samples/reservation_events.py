"""
Reservation Events
==================

Lifecycle of a table reservation: created -> confirmed -> completed, or
cancelled / no show. Created Reservation is the most important event to send
from a reservation platform.

Run:
    python -m apps.backend.samples.reservation_events --dry-run
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from apps.backend.samples.common import RESTAURANT_ID, RESTAURANT_NAME, run
from apps.backend.services.events.catalog import EventKind
from apps.backend.services.events.records import EventRecord, ProfileRef

RESERVATION_ID = "reservation-12345"
SCHEDULED_TIME = "2023-10-01T19:00:00Z"
PARTY_SIZE = 4


def created_reservation(email: str) -> EventRecord:
    return EventRecord(
        kind=EventKind.CREATED_RESERVATION,
        occurred_at="2024-10-03T19:00:00Z",
        properties={
            "reservation_scheduled_time": "2024-09-07T19:00:00Z",
            "reserved_table_number": "Table 5",
            "party_size": PARTY_SIZE,
            "reservation_source": "website",
            "reservation_notes": "Window seat preferred",
            "reservation_tags": ["birthday", "VIP"],
            "reservation_id": RESERVATION_ID,
            "restaurant_id": RESTAURANT_ID,
            "restaurant_name": RESTAURANT_NAME,
        },
        profile=ProfileRef(
            email=email,
            first_name="John",
            last_name="Doe",
            phone_number="+11234567890",
        ),
    )


def confirmed_reservation(email: str) -> EventRecord:
    return EventRecord(
        kind=EventKind.CONFIRMED_RESERVATION,
        occurred_at="2023-10-01T19:00:00Z",
        properties={
            "reservation_confirmed_id": RESERVATION_ID,
            "confirmation_method": "email",
            "reservation_time": SCHEDULED_TIME,
            "party_size": PARTY_SIZE,
            "restaurant_id": RESTAURANT_ID,
            "restaurant_name": RESTAURANT_NAME,
        },
        profile=ProfileRef(email=email),
    )


def completed_reservation(email: str) -> EventRecord:
    # occurred_at is the check-in time
    return EventRecord(
        kind=EventKind.COMPLETED_RESERVATION,
        occurred_at="2023-10-01T19:05:00Z",
        properties={
            "reservation_scheduled_time": SCHEDULED_TIME,
            "reservation_id": RESERVATION_ID,
            "check_in_method": "app",
            "party_size": PARTY_SIZE,
            "restaurant_id": RESTAURANT_ID,
            "restaurant_name": RESTAURANT_NAME,
        },
        profile=ProfileRef(email=email),
    )


def cancelled_reservation(email: str) -> EventRecord:
    return EventRecord(
        kind=EventKind.CANCELLED_RESERVATION,
        occurred_at="2023-10-01T19:00:00Z",
        properties={
            "cancellation_reason": "change of plans",
            "cancellation_method": "app",
            "cancelled_res_scheduled_time": SCHEDULED_TIME,
            "cancelled_res_party_size": PARTY_SIZE,
            "restaurant_id": RESTAURANT_ID,
            "restaurant_name": RESTAURANT_NAME,
        },
        profile=ProfileRef(email=email),
    )


def no_show_reservation(email: str) -> EventRecord:
    # occurred_at is when the guest was marked as a no-show
    return EventRecord(
        kind=EventKind.NO_SHOW_RESERVATION,
        occurred_at="2023-10-01T19:15:00Z",
        properties={
            "reservation_scheduled_time": SCHEDULED_TIME,
            "reservation_id": RESERVATION_ID,
            "reservation_source": "website",
            "no_show_reservation_party_size": PARTY_SIZE,
            "restaurant_id": RESTAURANT_ID,
            "restaurant_name": RESTAURANT_NAME,
        },
        profile=ProfileRef(email=email),
    )


def build_records(email: str) -> List[EventRecord]:
    return [
        created_reservation(email),
        confirmed_reservation(email),
        completed_reservation(email),
        cancelled_reservation(email),
        no_show_reservation(email),
    ]


def main(argv: Optional[Sequence[str]] = None) -> int:
    return run(build_records, "Send sample reservation events to Klaviyo.", argv)


if __name__ == "__main__":
    raise SystemExit(main())
