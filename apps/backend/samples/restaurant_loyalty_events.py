"""
Restaurant Loyalty Events
=========================

Common events from a restaurant loyalty integration, starting with sign up.

Every loyalty event also updates the profile's `loyaltyPoints` property with
the balance *after* the event, so flows can reference the current balance.

Run:
    python -m apps.backend.samples.restaurant_loyalty_events --dry-run
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from apps.backend.samples.common import RESTAURANT_ID, RESTAURANT_NAME, run
from apps.backend.services.events.catalog import EventKind
from apps.backend.services.events.loyalty_balance import LoyaltyBalance
from apps.backend.services.events.records import EventRecord, ProfileRef

EVENT_TIME = "2023-10-01T12:00:00Z"

_RESTAURANT = {
    "restaurant_id": RESTAURANT_ID,
    "restaurant_name": RESTAURANT_NAME,
}


def _profile(email: str, balance: LoyaltyBalance) -> ProfileRef:
    return ProfileRef(email=email, properties=balance.profile_properties())


def signed_up(email: str, balance: LoyaltyBalance) -> EventRecord:
    return EventRecord(
        kind=EventKind.SIGNED_UP_FOR_LOYALTY,
        occurred_at="2023-10-02T12:00:00Z",
        properties={
            "location_id": "location-12345",
            "location_name": RESTAURANT_NAME,
            "loyalty_program_id": "loyalty-program-12345",
            "loyalty_program_name": "Klaviyo Loyalty Program",
            "loyalty_program_tier": "Gold",
            "loyalty_program_points": balance.points,
        },
        profile=ProfileRef(
            email=email,
            first_name="Jane",
            last_name="Doe",
            phone_number="+11234567890",
            properties=balance.profile_properties(),
        ),
    )


def redemption(
    kind: EventKind,
    email: str,
    balance: LoyaltyBalance,
    points: int,
    description: str,
) -> Tuple[EventRecord, LoyaltyBalance]:
    balance = balance.spend(points)
    record = EventRecord(
        kind=kind,
        occurred_at=EVENT_TIME,
        properties={
            "redemption_id": "redemption-12345",
            "redemption_points": points,
            "redemption_description": description,
            **_RESTAURANT,
        },
        profile=_profile(email, balance),
    )
    return record, balance


def checked_in(email: str, balance: LoyaltyBalance, points: int = 50) -> Tuple[EventRecord, LoyaltyBalance]:
    balance = balance.earn(points)
    record = EventRecord(
        kind=EventKind.CHECKED_IN_TO_LOYALTY,
        occurred_at=EVENT_TIME,
        properties={
            "check_in_id": "checkin-12345",
            "check_in_points": points,
            "check_in_description": "Checked in at Klaviyo Cafe",
            **_RESTAURANT,
        },
        profile=_profile(email, balance),
    )
    return record, balance


def earned_reward(email: str, balance: LoyaltyBalance, points: int = 200) -> Tuple[EventRecord, LoyaltyBalance]:
    balance = balance.earn(points)
    record = EventRecord(
        kind=EventKind.EARNED_LOYALTY_REWARD,
        occurred_at=EVENT_TIME,
        properties={
            "reward_id": "reward-12345",
            "reward_points": points,
            "reward_description": "Birthday Reward",
            **_RESTAURANT,
        },
        profile=_profile(email, balance),
    )
    return record, balance


def converted_points(email: str, balance: LoyaltyBalance, points: int = 500) -> Tuple[EventRecord, LoyaltyBalance]:
    balance = balance.spend(points)
    record = EventRecord(
        kind=EventKind.CONVERTED_LOYALTY_POINTS,
        occurred_at=EVENT_TIME,
        properties={
            "converted_points_id": "converted-points-12345",
            "converted_points": points,
            "converted_points_description": "Converted points to rewards",
            **_RESTAURANT,
        },
        profile=_profile(email, balance),
    )
    return record, balance


def completed_card(email: str, balance: LoyaltyBalance, points: int = 1000) -> Tuple[EventRecord, LoyaltyBalance]:
    balance = balance.earn(points)
    record = EventRecord(
        kind=EventKind.COMPLETED_LOYALTY_CARD,
        occurred_at=EVENT_TIME,
        properties={
            "completed_card_id": "completed-card-12345",
            "completed_card_points": points,
            "completed_card_description": "Completed loyalty card",
            **_RESTAURANT,
        },
        profile=_profile(email, balance),
    )
    return record, balance


def build_records(email: str, start: LoyaltyBalance = LoyaltyBalance()) -> List[EventRecord]:
    records = [signed_up(email, start)]
    balance = start

    for kind, points, description in (
        (EventKind.CREATED_LOYALTY_REDEMPTION, 100, "Free dessert"),
        (EventKind.UPDATED_LOYALTY_REDEMPTION, 150, "Free dessert and drink"),
        (EventKind.APPLIED_LOYALTY_REDEMPTION, 100, "Free dessert"),
    ):
        record, balance = redemption(kind, email, balance, points, description)
        records.append(record)

    for step in (checked_in, earned_reward, converted_points, completed_card):
        record, balance = step(email, balance)
        records.append(record)

    return records


def main(argv: Optional[Sequence[str]] = None) -> int:
    return run(build_records, "Send sample restaurant loyalty events to Klaviyo.", argv)


if __name__ == "__main__":
    raise SystemExit(main())
