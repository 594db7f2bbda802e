"""
Online Ordering Events
======================

The most common events coming from an online ordering integration. Not every
event is necessary; add or drop kinds to fit the integration.

Placed Order is the most important one. Ordered Product is tracked once per
item in the order (1 Placed Order + N Ordered Product), which allows segments
on product details that Placed Order does not carry.

Run:
    python -m apps.backend.samples.online_ordering_events --dry-run
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Sequence

from apps.backend.samples.common import CURRENCY, RESTAURANT_ID, RESTAURANT_NAME, run
from apps.backend.services.events.catalog import EventKind
from apps.backend.services.events.records import EventRecord, ProfileRef

ORDER_ID = "order-67890"
ORDER_TIME = "2025-06-30T14:30:00Z"
ORDER_ITEMS = ["Cheese pizza", "House salad", "Soda"]
ORDER_CATEGORIES = ["Food", "Drink"]
ORDER_TOTAL = Decimal("43.19")


def _order_extra(status: str) -> dict:
    return {
        "orderStatus": status,
        "paymentMethod": "credit_card",
        "deliveryMethod": "pickup",
        "numberOfGuests": 1,
    }


def placed_order(email: str) -> EventRecord:
    return EventRecord(
        kind=EventKind.PLACED_ORDER,
        occurred_at=ORDER_TIME,
        properties={
            "item_names": ORDER_ITEMS,
            "item_categories": ORDER_CATEGORIES,
            "item_count": 3,
            "restaurant_name": RESTAURANT_NAME,
            "restaurant_id": RESTAURANT_ID,
            "order_id": ORDER_ID,
            "subtotal": Decimal("39.99"),
            "tax": Decimal("3.20"),
            "discount_applied": Decimal("0.00"),
            "extra": _order_extra("placed"),
        },
        value=ORDER_TOTAL,
        value_currency=CURRENCY,
        profile=ProfileRef(email=email, first_name="John", last_name="Doe"),
    )


def ordered_product(email: str) -> EventRecord:
    return EventRecord(
        kind=EventKind.ORDERED_PRODUCT,
        occurred_at=ORDER_TIME,
        properties={
            "name": "Cheese pizza",
            "categories": ["Food", "Pizza"],
            "product_id": "product-12345",
            "variant_id": "variant-67890",
            "quantity": 1,
            "restaurant_name": RESTAURANT_NAME,
            "restaurant_id": RESTAURANT_ID,
        },
        value=Decimal("19.99"),
        value_currency=CURRENCY,
        profile=ProfileRef(email=email, first_name="John", last_name="Doe"),
    )


def fulfilled_order(email: str) -> EventRecord:
    return EventRecord(
        kind=EventKind.FULFILLED_ORDER,
        occurred_at=ORDER_TIME,
        properties={
            "items": ORDER_ITEMS,
            "item_categories": ORDER_CATEGORIES,
            "item_count": 3,
            "order_id": ORDER_ID,
            "source": "online",
            "fulfillment_method": "pickup",
            "extra": _order_extra("fulfilled"),
        },
        value=ORDER_TOTAL,
        value_currency=CURRENCY,
        profile=ProfileRef(email=email),
    )


def refunded_order(email: str) -> EventRecord:
    return EventRecord(
        kind=EventKind.REFUNDED_ORDER,
        occurred_at=ORDER_TIME,
        properties={
            "items": ORDER_ITEMS,
            "item_categories": ORDER_CATEGORIES,
            "item_count": 3,
            "order_id": ORDER_ID,
        },
        value=ORDER_TOTAL,
        value_currency=CURRENCY,
        profile=ProfileRef(email=email),
    )


def closed_order(email: str) -> EventRecord:
    return EventRecord(
        kind=EventKind.CLOSED_ORDER,
        occurred_at=ORDER_TIME,
        properties={
            "items": ORDER_ITEMS,
            "item_categories": ORDER_CATEGORIES,
            "item_count": 3,
            "order_id": ORDER_ID,
            "fulfillment_method": "pickup",
        },
        value=ORDER_TOTAL,
        value_currency=CURRENCY,
        profile=ProfileRef(email=email),
    )


def adjusted_order(email: str) -> EventRecord:
    # partial refund of the soda
    return EventRecord(
        kind=EventKind.ADJUSTED_ORDER,
        occurred_at=ORDER_TIME,
        properties={
            "items": ["Cheese pizza", "House salad"],
            "item_categories": ORDER_CATEGORIES,
            "item_count": 3,
            "order_id": ORDER_ID,
            "initial_order_id": ORDER_ID,
            "amount_refunded": Decimal("4.99"),
            "amount_charged": Decimal("0.00"),
            "adjustment_reason": "Customer changed mind",
            "adjustment_type": "partial refund",
            "restaurant_name": RESTAURANT_NAME,
            "restaurant_id": RESTAURANT_ID,
        },
        value=Decimal("38.20"),
        value_currency=CURRENCY,
        profile=ProfileRef(email=email),
    )


def cancelled_order(email: str) -> EventRecord:
    amount_refunded = ORDER_TOTAL
    return EventRecord(
        kind=EventKind.CANCELLED_ORDER,
        occurred_at=ORDER_TIME,
        properties={
            "items": ORDER_ITEMS,
            "item_categories": ORDER_CATEGORIES,
            "item_count": 3,
            "order_id": ORDER_ID,
            "cancellation_reason": "Customer changed mind",
            "cancellation_type": "full refund",
            "amount_refunded": amount_refunded,
            "amount_charged": Decimal("0.00"),
            "restaurant_name": RESTAURANT_NAME,
            "restaurant_id": RESTAURANT_ID,
        },
        value=amount_refunded,
        value_currency=CURRENCY,
        profile=ProfileRef(email=email),
    )


def build_records(email: str) -> List[EventRecord]:
    return [
        placed_order(email),
        ordered_product(email),
        fulfilled_order(email),
        refunded_order(email),
        closed_order(email),
        adjusted_order(email),
        cancelled_order(email),
    ]


def main(argv: Optional[Sequence[str]] = None) -> int:
    return run(build_records, "Send sample online ordering events to Klaviyo.", argv)


if __name__ == "__main__":
    raise SystemExit(main())
