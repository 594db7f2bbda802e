"""Tests for payload assembly and single-call submission."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict

import pytest
import requests

from apps.backend.services.events.catalog import EVENT_CATALOG, EventKind
from apps.backend.services.events.errors import EventValidationError, SubmissionError
from apps.backend.services.events.records import EventRecord, ProfileRef
from apps.backend.services.events.submitter import EventSubmitter, build_payload, validate_record
from apps.backend.services.klaviyo_client import DryRunClient


def _attrs(payload: Dict[str, Any]) -> Dict[str, Any]:
    return payload["data"]["attributes"]


def _minimal_properties(kind: EventKind) -> Dict[str, Any]:
    return {key: f"sample-{i}" for i, key in enumerate(EVENT_CATALOG[kind].required_keys)}


def test_placed_order_scenario(fake_client) -> None:
    result = EventSubmitter(fake_client).submit(
        EventKind.PLACED_ORDER,
        "2025-06-30T14:30:00Z",
        {"itemNames": ["Cheese pizza"], "itemCount": 1, "orderId": "order-1"},
        ProfileRef(email="a@b.com"),
    )

    assert result.ok
    assert len(fake_client.sent) == 1
    attrs = _attrs(fake_client.sent[0])
    assert fake_client.sent[0]["data"]["type"] == "event"
    assert attrs["metric"] == {"data": {"type": "metric", "attributes": {"name": "Placed Order"}}}
    assert attrs["profile"]["data"]["type"] == "profile"
    assert attrs["profile"]["data"]["attributes"] == {"email": "a@b.com"}
    assert attrs["properties"] == {
        "Item names": ["Cheese pizza"],
        "Item count": 1,
        "Order ID": "order-1",
    }
    assert attrs["time"] == "2025-06-30T14:30:00Z"


@pytest.mark.parametrize("kind", list(EventKind))
def test_every_kind_uses_its_metric_name(kind: EventKind) -> None:
    record = EventRecord(
        kind=kind,
        occurred_at="2023-10-01T12:00:00Z",
        properties=_minimal_properties(kind),
        profile=ProfileRef(email="guest@example.com"),
    )
    attrs = _attrs(build_payload(record))

    assert attrs["metric"]["data"]["attributes"]["name"] == kind.value
    assert set(attrs["properties"]) == set(EVENT_CATALOG[kind].required_keys)
    assert "value" not in attrs
    assert "value_currency" not in attrs


def test_properties_keep_only_given_keys_in_catalog_order() -> None:
    record = EventRecord(
        kind=EventKind.CANCELLED_RESERVATION,
        occurred_at="2023-10-01T19:00:00Z",
        properties={
            "RestaurantName": "Klaviyo Cafe (Denver)",
            "cancelled_res_scheduled_time": "2023-10-01T19:00:00Z",
            "cancellationReason": "change of plans",
        },
        profile=ProfileRef(email="guest@example.com"),
    )
    props = _attrs(build_payload(record))["properties"]

    assert list(props) == ["CancellationReason", "CancelledResScheduledTime", "RestaurantName"]


def test_monetary_value_round_trips() -> None:
    record = EventRecord(
        kind=EventKind.PLACED_ORDER,
        occurred_at="2025-06-30T14:30:00Z",
        properties={"item_names": ["Soda"], "item_count": 1, "order_id": "order-2"},
        profile=ProfileRef(email="a@b.com"),
        value=43.19,
        value_currency="USD",
    )
    attrs = _attrs(build_payload(record))

    assert attrs["value"] == 43.19
    assert attrs["value_currency"] == "USD"


def test_decimal_value_is_kept_as_given() -> None:
    record = EventRecord(
        kind=EventKind.ORDERED_PRODUCT,
        occurred_at="2025-06-30T14:30:00Z",
        properties={"name": "Cheese pizza", "product_id": "product-1", "quantity": 1},
        profile=ProfileRef(email="a@b.com"),
        value=Decimal("19.99"),
        value_currency="USD",
    )
    assert _attrs(build_payload(record))["value"] == Decimal("19.99")


def test_non_monetary_kind_omits_value_fields() -> None:
    record = EventRecord(
        kind=EventKind.CREATED_RESERVATION,
        occurred_at="2024-10-03T19:00:00Z",
        properties={
            "reservation_id": "reservation-12345",
            "reservation_scheduled_time": "2024-09-07T19:00:00Z",
            "party_size": 4,
        },
        profile=ProfileRef(email="a@b.com", first_name="John", phone_number="+11234567890"),
    )
    attrs = _attrs(build_payload(record))

    assert "value" not in attrs
    assert "value_currency" not in attrs
    assert attrs["profile"]["data"]["attributes"] == {
        "email": "a@b.com",
        "first_name": "John",
        "phone_number": "+11234567890",
    }


def test_value_on_non_monetary_kind_is_rejected(fake_client) -> None:
    with pytest.raises(EventValidationError):
        EventSubmitter(fake_client).submit(
            EventKind.EARNED_LOYALTY_REWARD,
            "2023-10-01T12:00:00Z",
            {"reward_id": "reward-1"},
            ProfileRef(email="a@b.com"),
            value=10,
        )
    assert fake_client.sent == []


def test_currency_without_value_is_rejected() -> None:
    record = EventRecord(
        kind=EventKind.REFUNDED_ORDER,
        occurred_at="2025-06-30T14:30:00Z",
        properties={"items": ["Soda"], "item_count": 1, "order_id": "order-3"},
        profile=ProfileRef(email="a@b.com"),
        value_currency="USD",
    )
    with pytest.raises(EventValidationError):
        build_payload(record)


@pytest.mark.parametrize("email", ["", "   "])
def test_empty_email_is_rejected_before_any_call(fake_client, email: str) -> None:
    with pytest.raises(EventValidationError) as exc:
        EventSubmitter(fake_client).submit(
            EventKind.PLACED_ORDER,
            "2025-06-30T14:30:00Z",
            {"item_names": ["Soda"], "item_count": 1, "order_id": "order-1"},
            {"email": email},
        )
    assert "email" in exc.value.message
    assert fake_client.sent == []


def test_unknown_property_is_rejected(fake_client) -> None:
    with pytest.raises(EventValidationError) as exc:
        EventSubmitter(fake_client).submit(
            EventKind.CLOSED_ORDER,
            "2025-06-30T14:30:00Z",
            {"items": ["Soda"], "item_count": 1, "order_id": "order-1", "tip": 2},
            ProfileRef(email="a@b.com"),
        )
    assert "tip" in exc.value.message
    assert fake_client.sent == []


def test_missing_required_property_is_rejected() -> None:
    record = EventRecord(
        kind=EventKind.ADJUSTED_ORDER,
        occurred_at="2025-06-30T14:30:00Z",
        properties={"items": ["Soda"], "item_count": 1, "order_id": "order-1"},
        profile=ProfileRef(email="a@b.com"),
    )
    with pytest.raises(EventValidationError) as exc:
        build_payload(record)
    assert "Initial Order ID" in exc.value.message


def test_same_property_given_twice_is_rejected() -> None:
    record = EventRecord(
        kind=EventKind.CHECKED_IN_TO_LOYALTY,
        occurred_at="2023-10-01T12:00:00Z",
        properties={"check_in_id": "a", "CheckInId": "b"},
        profile=ProfileRef(email="a@b.com"),
    )
    with pytest.raises(EventValidationError):
        build_payload(record)


def test_bad_timestamp_is_rejected() -> None:
    record = EventRecord(
        kind=EventKind.CHECKED_IN_TO_LOYALTY,
        occurred_at="yesterday",
        properties={"check_in_id": "checkin-1"},
        profile=ProfileRef(email="a@b.com"),
    )
    with pytest.raises(EventValidationError):
        build_payload(record)


def test_datetime_is_formatted_as_utc_iso() -> None:
    record = EventRecord(
        kind=EventKind.CHECKED_IN_TO_LOYALTY,
        occurred_at=datetime(2023, 10, 1, 12, 0, 0),
        properties={"check_in_id": "checkin-1"},
        profile=ProfileRef(email="a@b.com"),
    )
    assert _attrs(build_payload(record))["time"] == "2023-10-01T12:00:00+00:00"

    aware = datetime(2023, 10, 1, 12, 0, 0, tzinfo=timezone.utc)
    assert build_payload(EventRecord(
        kind=EventKind.CHECKED_IN_TO_LOYALTY,
        occurred_at=aware,
        properties={"check_in_id": "checkin-1"},
        profile=ProfileRef(email="a@b.com"),
    ))["data"]["attributes"]["time"] == aware.isoformat()


def test_profile_properties_and_unique_id_are_sent() -> None:
    record = EventRecord(
        kind=EventKind.COMPLETED_LOYALTY_CARD,
        occurred_at="2023-10-01T12:00:00Z",
        properties={"completed_card_id": "completed-card-12345"},
        profile=ProfileRef(email="a@b.com", properties={"loyaltyPoints": 400}),
        unique_id="completed-card-12345",
    )
    attrs = _attrs(build_payload(record))

    assert attrs["unique_id"] == "completed-card-12345"
    assert attrs["profile"]["data"]["attributes"]["properties"] == {"loyaltyPoints": 400}


def test_record_accepts_kind_names() -> None:
    record = EventRecord(
        kind="Closed Order",
        occurred_at="2025-06-30T14:30:00Z",
        properties={"items": ["Soda"], "item_count": 1, "order_id": "order-1"},
        profile=ProfileRef(email="a@b.com"),
    )
    assert record.kind is EventKind.CLOSED_ORDER


def test_api_failure_is_returned_not_raised(make_client) -> None:
    client = make_client(fail_on={"Refunded Order"})
    result = EventSubmitter(client).submit(
        EventKind.REFUNDED_ORDER,
        "2025-06-30T14:30:00Z",
        {"items": ["Soda"], "item_count": 1, "order_id": "order-1"},
        ProfileRef(email="a@b.com"),
        value=Decimal("2.50"),
        value_currency="USD",
    )

    assert not result.ok
    assert isinstance(result.error, SubmissionError)
    assert result.error.status_code == 400
    assert result.error.errors == [{"code": "invalid", "detail": "invalid profile"}]
    assert result.to_dict()["error"]["status_code"] == 400
    assert len(client.sent) == 1


def test_transport_failure_is_wrapped(make_client) -> None:
    client = make_client(fail_on={"Closed Order"}, error=requests.exceptions.ConnectionError("reset"))
    result = EventSubmitter(client).submit(
        EventKind.CLOSED_ORDER,
        "2025-06-30T14:30:00Z",
        {"items": ["Soda"], "item_count": 1, "order_id": "order-1"},
        ProfileRef(email="a@b.com"),
    )

    assert not result.ok
    assert result.error.status_code == 502
    assert isinstance(result.error.__cause__, requests.exceptions.ConnectionError)


def test_submit_many_continues_after_failures(make_client) -> None:
    client = make_client(fail_on={"Fulfilled Order"})
    order = {"items": ["Soda"], "item_count": 1, "order_id": "order-1"}
    records = [
        EventRecord(EventKind.FULFILLED_ORDER, "2025-06-30T14:30:00Z", order, ProfileRef(email="a@b.com")),
        EventRecord(EventKind.CLOSED_ORDER, "2025-06-30T14:30:00Z", order, ProfileRef(email="")),
        EventRecord(EventKind.REFUNDED_ORDER, "2025-06-30T14:30:00Z", order, ProfileRef(email="a@b.com")),
    ]

    results = EventSubmitter(client).submit_many(records)

    assert [r.ok for r in results] == [False, False, True]
    assert isinstance(results[1].error, EventValidationError)
    # the invalid record never reached the client
    assert len(client.sent) == 2


def test_submit_many_rejects_unserialisable_value_and_keeps_going() -> None:
    client = DryRunClient()
    reservation = dict(
        _minimal_properties(EventKind.CREATED_RESERVATION),
        ReservationScheduledTime=datetime(2024, 9, 7, 19, 0),
    )
    records = [
        EventRecord(EventKind.CREATED_RESERVATION, "2024-10-03T19:00:00Z", reservation, ProfileRef(email="a@b.com")),
        EventRecord(
            EventKind.CHECKED_IN_TO_LOYALTY,
            "2023-10-01T12:00:00Z",
            {"check_in_id": "checkin-1"},
            ProfileRef(email="a@b.com"),
        ),
    ]

    results = EventSubmitter(client).submit_many(records)

    assert [r.ok for r in results] == [False, True]
    assert isinstance(results[0].error, EventValidationError)
    assert "ReservationScheduledTime" in results[0].error.message
    assert len(client.sent) == 1


@pytest.mark.parametrize(
    "value",
    [
        object(),
        {1: "non-string key"},
        [Decimal("1.5"), {"nested": float("nan")}],
        float("inf"),
    ],
)
def test_property_values_must_be_json_shaped(value: Any) -> None:
    record = EventRecord(
        kind=EventKind.CHECKED_IN_TO_LOYALTY,
        occurred_at="2023-10-01T12:00:00Z",
        properties={"check_in_id": "checkin-1", "check_in_description": value},
        profile=ProfileRef(email="a@b.com"),
    )
    with pytest.raises(EventValidationError):
        validate_record(record)


def test_nested_and_decimal_property_values_are_accepted() -> None:
    record = EventRecord(
        kind=EventKind.CHECKED_IN_TO_LOYALTY,
        occurred_at="2023-10-01T12:00:00Z",
        properties={
            "check_in_id": "checkin-1",
            "check_in_points": Decimal("10"),
            "check_in_description": {"tags": ["lunch", None], "first": True},
        },
        profile=ProfileRef(email="a@b.com"),
    )
    assert validate_record(record) is EVENT_CATALOG[EventKind.CHECKED_IN_TO_LOYALTY]


def test_profile_property_values_are_checked() -> None:
    record = EventRecord(
        kind=EventKind.CHECKED_IN_TO_LOYALTY,
        occurred_at="2023-10-01T12:00:00Z",
        properties={"check_in_id": "checkin-1"},
        profile=ProfileRef(email="a@b.com", properties={"lastVisit": datetime(2024, 1, 1)}),
    )
    with pytest.raises(EventValidationError):
        validate_record(record)


@pytest.mark.parametrize(
    "occurred_at, properties, needle",
    [
        ("yesterday", {"items": ["Soda"], "item_count": 1, "order_id": "o-1", "initial_order_id": "o-0"}, "ISO-8601"),
        ("2025-06-30T14:30:00Z", {"items": ["Soda"], "item_count": 1, "order_id": "o-1"}, "Initial Order ID"),
        ("2025-06-30T14:30:00Z", {"tip": 2, "initial_order_id": "o-0"}, "tip"),
    ],
)
def test_validate_record_runs_property_and_time_checks(occurred_at: str, properties: Dict[str, Any], needle: str) -> None:
    record = EventRecord(EventKind.ADJUSTED_ORDER, occurred_at, properties, ProfileRef(email="a@b.com"))

    with pytest.raises(EventValidationError) as exc:
        validate_record(record)
    assert needle in exc.value.message


@pytest.mark.parametrize("value", [Decimal("NaN"), Decimal("Infinity"), float("-inf")])
def test_non_finite_value_is_rejected(value: Any) -> None:
    record = EventRecord(
        kind=EventKind.PLACED_ORDER,
        occurred_at="2025-06-30T14:30:00Z",
        properties={"item_names": ["Soda"], "item_count": 1, "order_id": "order-1"},
        profile=ProfileRef(email="a@b.com"),
        value=value,
    )
    with pytest.raises(EventValidationError):
        validate_record(record)


def test_records_do_not_share_caller_mappings() -> None:
    properties = {"check_in_id": "checkin-1"}
    profile_properties = {"loyaltyPoints": 10}
    record = EventRecord(
        EventKind.CHECKED_IN_TO_LOYALTY,
        "2023-10-01T12:00:00Z",
        properties,
        ProfileRef(email="a@b.com", properties=profile_properties),
    )

    properties["check_in_id"] = "changed"
    profile_properties["loyaltyPoints"] = 99

    attrs = _attrs(build_payload(record))
    assert attrs["properties"] == {"CheckInId": "checkin-1"}
    assert attrs["profile"]["data"]["attributes"]["properties"] == {"loyaltyPoints": 10}
    with pytest.raises(TypeError):
        record.properties["check_in_id"] = "again"
