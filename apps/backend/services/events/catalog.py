"""
Event Catalog (Canonical)
=========================

Single source of truth for every restaurant event sent to Klaviyo.

Each EventKind maps to:
- the fixed Klaviyo metric name
- the ordered set of property fields (python name -> wire key, required flag)
- whether the event carries a monetary value (value / value_currency)

Wire keys match what existing Klaviyo flows and segments already filter on,
including their inconsistent casing ("Item names" vs "ReservationId").

Non-goals:
- No HTTP here.
- No payload assembly (see submitter.py).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from apps.backend.services.events.errors import EventValidationError


Domain = Literal["ordering", "reservations", "loyalty"]


class EventKind(str, Enum):
    # Online ordering
    PLACED_ORDER = "Placed Order"
    ORDERED_PRODUCT = "Ordered Product"
    FULFILLED_ORDER = "Fulfilled Order"
    REFUNDED_ORDER = "Refunded Order"
    CLOSED_ORDER = "Closed Order"
    ADJUSTED_ORDER = "Adjusted Order"
    CANCELLED_ORDER = "Cancelled Order"

    # Reservations
    CREATED_RESERVATION = "Created Reservation"
    CONFIRMED_RESERVATION = "Confirmed Reservation"
    COMPLETED_RESERVATION = "Completed Reservation"
    CANCELLED_RESERVATION = "Cancelled Reservation"
    NO_SHOW_RESERVATION = "No Show Reservation"

    # Restaurant loyalty
    SIGNED_UP_FOR_LOYALTY = "Signed Up for Loyalty Program"
    CREATED_LOYALTY_REDEMPTION = "Created Loyalty Redemption"
    UPDATED_LOYALTY_REDEMPTION = "Updated Loyalty Redemption"
    APPLIED_LOYALTY_REDEMPTION = "Applied Loyalty Redemption"
    CHECKED_IN_TO_LOYALTY = "Checked In to Loyalty Program"
    EARNED_LOYALTY_REWARD = "Earned Loyalty Reward"
    CONVERTED_LOYALTY_POINTS = "Converted Loyalty Points"
    COMPLETED_LOYALTY_CARD = "Completed Loyalty Card"

    @property
    def metric_name(self) -> str:
        return self.value


@dataclass(frozen=True)
class PropertyField:
    name: str      # python-side key, e.g. "item_names"
    wire_key: str  # Klaviyo property key, e.g. "Item names"
    required: bool = False

    @property
    def camel_name(self) -> str:
        head, *rest = self.name.split("_")
        return head + "".join(part.capitalize() for part in rest)

    def matches(self, key: str) -> bool:
        return key in (self.name, self.camel_name, self.wire_key)


@dataclass(frozen=True)
class EventSpec:
    kind: EventKind
    domain: Domain
    fields: Tuple[PropertyField, ...]
    monetary: bool = False

    @property
    def metric_name(self) -> str:
        return self.kind.metric_name

    @property
    def required_keys(self) -> List[str]:
        return [f.wire_key for f in self.fields if f.required]

    @property
    def optional_keys(self) -> List[str]:
        return [f.wire_key for f in self.fields if not f.required]

    @property
    def wire_keys(self) -> List[str]:
        return [f.wire_key for f in self.fields]

    def resolve_key(self, key: str) -> Optional[str]:
        """
        Map a caller key (snake_case name, camelCase name or exact wire key)
        to its wire key. Returns None for keys not documented for this kind.
        """
        for f in self.fields:
            if f.matches(key):
                return f.wire_key
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.name,
            "domain": self.domain,
            "metric_name": self.metric_name,
            "monetary": self.monetary,
            "required_properties": self.required_keys,
            "optional_properties": self.optional_keys,
        }


def _f(name: str, wire_key: str, required: bool = False) -> PropertyField:
    return PropertyField(name=name, wire_key=wire_key, required=required)


# -----------------------------
# Shared field groups
# -----------------------------
_ORDER_ITEMS = (
    _f("items", "Items", True),
    _f("item_categories", "Item categories"),
    _f("item_count", "Item count", True),
    _f("order_id", "Order ID", True),
)

_RESTAURANT = (
    _f("restaurant_name", "Restaurant name"),
    _f("restaurant_id", "Restaurant ID"),
)

# reservation and loyalty events use CamelCase restaurant keys
_RESTAURANT_CAMEL = (
    _f("restaurant_id", "RestaurantId"),
    _f("restaurant_name", "RestaurantName"),
)


def _redemption(kind: EventKind) -> EventSpec:
    return EventSpec(
        kind=kind,
        domain="loyalty",
        fields=(
            _f("redemption_id", "RedemptionId", True),
            _f("redemption_points", "RedemptionPoints", True),
            _f("redemption_description", "RedemptionDescription"),
        ) + _RESTAURANT_CAMEL,
    )


_SPECS: Tuple[EventSpec, ...] = (
    # -----------------------------
    # Online ordering
    # -----------------------------
    EventSpec(
        kind=EventKind.PLACED_ORDER,
        domain="ordering",
        monetary=True,
        fields=(
            _f("item_names", "Item names", True),
            _f("item_categories", "Item categories"),
            _f("item_count", "Item count", True),
        ) + _RESTAURANT + (
            _f("order_id", "Order ID", True),
            _f("subtotal", "Subtotal"),
            _f("tax", "Tax"),
            _f("discount_applied", "Discount applied"),
            _f("extra", "extra"),
        ),
    ),
    EventSpec(
        kind=EventKind.ORDERED_PRODUCT,
        domain="ordering",
        monetary=True,
        fields=(
            _f("name", "Name", True),
            _f("categories", "Categories"),
            _f("product_id", "ProductID", True),
            _f("variant_id", "VariantID"),
            _f("quantity", "Quantity", True),
        ) + _RESTAURANT,
    ),
    EventSpec(
        kind=EventKind.FULFILLED_ORDER,
        domain="ordering",
        monetary=True,
        fields=_ORDER_ITEMS + (
            _f("source", "Source"),
            _f("fulfillment_method", "Fulfillment method"),
            _f("extra", "extra"),
        ),
    ),
    EventSpec(
        kind=EventKind.REFUNDED_ORDER,
        domain="ordering",
        monetary=True,
        fields=_ORDER_ITEMS,
    ),
    EventSpec(
        kind=EventKind.CLOSED_ORDER,
        domain="ordering",
        monetary=True,
        fields=_ORDER_ITEMS + (
            _f("fulfillment_method", "Fulfillment method"),
        ),
    ),
    EventSpec(
        kind=EventKind.ADJUSTED_ORDER,
        domain="ordering",
        monetary=True,
        fields=_ORDER_ITEMS + (
            _f("initial_order_id", "Initial Order ID", True),
            _f("amount_refunded", "Amount refunded"),
            _f("amount_charged", "Amount charged"),
            _f("adjustment_reason", "Adjustment reason"),
            _f("adjustment_type", "Adjustment type"),
        ) + _RESTAURANT,
    ),
    EventSpec(
        kind=EventKind.CANCELLED_ORDER,
        domain="ordering",
        monetary=True,
        fields=_ORDER_ITEMS + (
            _f("cancellation_reason", "Cancellation reason"),
            _f("cancellation_type", "Cancellation type"),
            _f("amount_refunded", "Amount refunded"),
            _f("amount_charged", "Amount charged"),
        ) + _RESTAURANT,
    ),

    # -----------------------------
    # Reservations
    # -----------------------------
    EventSpec(
        kind=EventKind.CREATED_RESERVATION,
        domain="reservations",
        fields=(
            _f("reservation_scheduled_time", "ReservationScheduledTime", True),
            _f("reserved_table_number", "ReservedTableNumber"),
            _f("party_size", "PartySize", True),
            _f("reservation_source", "ReservationSource"),
            _f("reservation_notes", "ReservationNotes"),
            _f("reservation_tags", "ReservationTags"),
            _f("reservation_id", "ReservationId", True),
        ) + _RESTAURANT_CAMEL,
    ),
    EventSpec(
        kind=EventKind.CONFIRMED_RESERVATION,
        domain="reservations",
        fields=(
            _f("reservation_confirmed_id", "ReservationConfirmedId", True),
            _f("confirmation_method", "ConfirmationMethod"),
            _f("reservation_time", "ReservationTime", True),
            _f("party_size", "PartySize"),
        ) + _RESTAURANT_CAMEL,
    ),
    EventSpec(
        kind=EventKind.COMPLETED_RESERVATION,
        domain="reservations",
        fields=(
            _f("reservation_scheduled_time", "ReservationScheduledTime"),
            _f("reservation_id", "ReservationId", True),
            _f("check_in_method", "CheckInMethod"),
            _f("party_size", "PartySize"),
        ) + _RESTAURANT_CAMEL,
    ),
    EventSpec(
        kind=EventKind.CANCELLED_RESERVATION,
        domain="reservations",
        fields=(
            _f("cancellation_reason", "CancellationReason"),
            _f("cancellation_method", "CancellationMethod"),
            _f("cancelled_res_scheduled_time", "CancelledResScheduledTime", True),
            _f("cancelled_res_party_size", "CancelledResPartySize"),
        ) + _RESTAURANT_CAMEL,
    ),
    EventSpec(
        kind=EventKind.NO_SHOW_RESERVATION,
        domain="reservations",
        fields=(
            _f("reservation_scheduled_time", "ReservationScheduledTime"),
            _f("reservation_id", "ReservationId", True),
            _f("reservation_source", "ReservationSource"),
            _f("no_show_reservation_party_size", "NoShowReservationPartySize"),
        ) + _RESTAURANT_CAMEL,
    ),

    # -----------------------------
    # Restaurant loyalty
    # -----------------------------
    EventSpec(
        kind=EventKind.SIGNED_UP_FOR_LOYALTY,
        domain="loyalty",
        fields=(
            _f("location_id", "LocationId"),
            _f("location_name", "LocationName"),
            _f("loyalty_program_id", "LoyaltyProgramId", True),
            _f("loyalty_program_name", "LoyaltyProgramName"),
            _f("loyalty_program_tier", "LoyaltyProgramTier"),
            _f("loyalty_program_points", "LoyaltyProgramPoints"),
        ),
    ),
    _redemption(EventKind.CREATED_LOYALTY_REDEMPTION),
    _redemption(EventKind.UPDATED_LOYALTY_REDEMPTION),
    _redemption(EventKind.APPLIED_LOYALTY_REDEMPTION),
    EventSpec(
        kind=EventKind.CHECKED_IN_TO_LOYALTY,
        domain="loyalty",
        fields=(
            _f("check_in_id", "CheckInId", True),
            _f("check_in_points", "CheckInPoints"),
            _f("check_in_description", "CheckInDescription"),
        ) + _RESTAURANT_CAMEL,
    ),
    EventSpec(
        kind=EventKind.EARNED_LOYALTY_REWARD,
        domain="loyalty",
        fields=(
            _f("reward_id", "RewardId", True),
            _f("reward_points", "RewardPoints"),
            _f("reward_description", "RewardDescription"),
        ) + _RESTAURANT_CAMEL,
    ),
    EventSpec(
        kind=EventKind.CONVERTED_LOYALTY_POINTS,
        domain="loyalty",
        fields=(
            _f("converted_points_id", "ConvertedPointsId", True),
            _f("converted_points", "ConvertedPoints", True),
            _f("converted_points_description", "ConvertedPointsDescription"),
        ) + _RESTAURANT_CAMEL,
    ),
    EventSpec(
        kind=EventKind.COMPLETED_LOYALTY_CARD,
        domain="loyalty",
        fields=(
            _f("completed_card_id", "CompletedCardId", True),
            _f("completed_card_points", "CompletedCardPoints"),
            _f("completed_card_description", "CompletedCardDescription"),
        ) + _RESTAURANT_CAMEL,
    ),
)

EVENT_CATALOG: Dict[EventKind, EventSpec] = {s.kind: s for s in _SPECS}


def parse_kind(kind: Union[EventKind, str]) -> EventKind:
    """
    Accepts an EventKind, its enum name ("PLACED_ORDER") or its metric name
    ("Placed Order").
    """
    if isinstance(kind, EventKind):
        return kind
    raw = str(kind or "").strip()
    if raw in EventKind.__members__:
        return EventKind[raw]
    if raw.upper() in EventKind.__members__:
        return EventKind[raw.upper()]
    try:
        return EventKind(raw)
    except ValueError:
        raise EventValidationError(f"Unknown event kind: {kind!r}")


def get_spec(kind: Union[EventKind, str]) -> EventSpec:
    return EVENT_CATALOG[parse_kind(kind)]


def kinds_for_domain(domain: Domain) -> List[EventKind]:
    return [s.kind for s in _SPECS if s.domain == domain]
