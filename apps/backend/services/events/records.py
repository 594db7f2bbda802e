from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

from apps.backend.services.events.catalog import EventKind, parse_kind


Timestamp = Union[datetime, str]
Amount = Union[Decimal, int, float]


def _frozen_copy(value: Any) -> Any:
    # shallow; leaves non-mappings alone so validation can report them
    if isinstance(value, Mapping):
        return MappingProxyType(dict(value))
    return value


@dataclass(frozen=True)
class ProfileRef:
    """
    The person an event is attributed to. Klaviyo resolves identity by email;
    nothing is stored locally.
    """
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    # custom profile properties, e.g. {"loyaltyPoints": 350}
    properties: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", _frozen_copy(self.properties or {}))

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ProfileRef":
        return cls(
            email=str(d.get("email") or ""),
            first_name=d.get("first_name") or d.get("firstName"),
            last_name=d.get("last_name") or d.get("lastName"),
            phone_number=d.get("phone_number") or d.get("phoneNumber"),
            properties=dict(d.get("properties") or {}),
        )

    def to_attributes(self) -> Dict[str, Any]:
        attrs: Dict[str, Any] = {"email": self.email}
        if self.first_name is not None:
            attrs["first_name"] = self.first_name
        if self.last_name is not None:
            attrs["last_name"] = self.last_name
        if self.phone_number is not None:
            attrs["phone_number"] = self.phone_number
        if self.properties:
            attrs["properties"] = dict(self.properties)
        return attrs


@dataclass(frozen=True)
class EventRecord:
    """
    One business event, built fresh per submission and never mutated.

    value / value_currency only apply to monetary kinds (orders).
    unique_id is passed through to Klaviyo for server-side de-duplication.
    """
    kind: EventKind
    occurred_at: Timestamp
    properties: Mapping[str, Any]
    profile: ProfileRef
    value: Optional[Amount] = None
    value_currency: Optional[str] = None
    unique_id: Optional[str] = None

    def __post_init__(self) -> None:
        # accept "PLACED_ORDER" / "Placed Order" as well as the enum
        object.__setattr__(self, "kind", parse_kind(self.kind))
        object.__setattr__(self, "properties", _frozen_copy(self.properties))

    @property
    def metric_name(self) -> str:
        return self.kind.metric_name
