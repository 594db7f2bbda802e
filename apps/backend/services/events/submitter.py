"""
Event Submitter (Canonical Integration Layer)
=============================================

Purpose:
- Turn an EventRecord into the Klaviyo "create event" document using the
  event catalog, then make exactly one outbound call.
- One generic builder for every kind; no per-event payload code.

This service:
- Validates locally before any network call (email, kind, property keys,
  monetary fields, timestamp)
- Reports transport / API failures as a result instead of raising
- Never retries; the caller decides what to do with a failed result
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Tuple, Union

import requests

from apps.backend.services.events.catalog import EventKind, EventSpec, get_spec, parse_kind
from apps.backend.services.events.errors import (
    EventError,
    EventValidationError,
    KlaviyoAPIError,
    SubmissionError,
)
from apps.backend.services.events.records import Amount, EventRecord, ProfileRef, Timestamp

log = logging.getLogger("restaurant_events.submitter")


class EventsClient(Protocol):
    def create_event(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class SubmissionResult:
    kind: EventKind
    ok: bool
    payload: Optional[Dict[str, Any]] = None
    response: Optional[Dict[str, Any]] = None
    error: Optional[EventError] = None

    @property
    def metric_name(self) -> str:
        return self.kind.metric_name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.name,
            "metric_name": self.metric_name,
            "ok": self.ok,
            "response": self.response,
            "error": None if self.error is None else self.error.to_dict(),
        }


# -----------------------------
# Validation helpers
# -----------------------------
def format_time(occurred_at: Timestamp) -> str:
    """
    datetime -> ISO-8601 (naive values are taken as UTC).
    str -> validated and passed through unchanged.
    """
    if isinstance(occurred_at, datetime):
        if occurred_at.tzinfo is None:
            occurred_at = occurred_at.replace(tzinfo=timezone.utc)
        return occurred_at.isoformat()

    raw = str(occurred_at or "").strip()
    if not raw:
        raise EventValidationError("occurred_at is required")
    try:
        datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        raise EventValidationError(f"occurred_at is not an ISO-8601 timestamp: {raw!r}")
    return raw


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, Decimal):
        return value.is_finite()
    if isinstance(value, float):
        return math.isfinite(value)
    return isinstance(value, int)


def check_value(where: str, value: Any) -> None:
    """
    Property values must be JSON-shaped: string, bool, finite number
    (Decimal allowed), null, a list of those, or a string-keyed mapping.
    """
    if value is None or isinstance(value, (str, bool)):
        return
    if isinstance(value, (int, float, Decimal)):
        if not _is_finite_number(value):
            raise EventValidationError(f"{where} must be a finite number, got {value!r}")
        return
    if isinstance(value, (list, tuple)):
        for i, item in enumerate(value):
            check_value(f"{where}[{i}]", item)
        return
    if isinstance(value, Mapping):
        for k, item in value.items():
            if not isinstance(k, str):
                raise EventValidationError(f"{where} has a non-string key {k!r}")
            check_value(f"{where}.{k}", item)
        return
    raise EventValidationError(f"{where} has unsupported type {type(value).__name__}")


def map_properties(spec: EventSpec, properties: Mapping[str, Any]) -> Dict[str, Any]:
    if not isinstance(properties, Mapping):
        raise EventValidationError(f"{spec.metric_name}: properties must be a mapping")

    out: Dict[str, Any] = {}
    unknown: List[str] = []
    for key, value in properties.items():
        wire_key = spec.resolve_key(str(key))
        if wire_key is None:
            unknown.append(str(key))
            continue
        if wire_key in out:
            raise EventValidationError(f"{spec.metric_name}: property {wire_key!r} given more than once")
        check_value(f"{spec.metric_name}: property {wire_key!r}", value)
        out[wire_key] = value

    if unknown:
        raise EventValidationError(
            f"{spec.metric_name}: unknown properties {sorted(unknown)}; allowed: {spec.wire_keys}"
        )

    missing = [k for k in spec.required_keys if out.get(k) is None]
    if missing:
        raise EventValidationError(f"{spec.metric_name}: missing required properties {missing}")

    # keep catalog order so payloads are stable
    return {k: out[k] for k in spec.wire_keys if k in out}


def _check_monetary(spec: EventSpec, value: Optional[Amount], value_currency: Optional[str]) -> None:
    if not spec.monetary:
        if value is not None or value_currency is not None:
            raise EventValidationError(f"{spec.metric_name} does not carry a monetary value")
        return

    if value is not None:
        if isinstance(value, bool) or not isinstance(value, (Decimal, int, float)):
            raise EventValidationError(f"{spec.metric_name}: value must be a number")
        if not _is_finite_number(value):
            raise EventValidationError(f"{spec.metric_name}: value must be finite, got {value!r}")
    if value_currency is not None:
        if value is None:
            raise EventValidationError(f"{spec.metric_name}: value_currency given without value")
        if not str(value_currency).strip():
            raise EventValidationError(f"{spec.metric_name}: value_currency must not be empty")


def _checked(record: EventRecord) -> Tuple[EventSpec, Dict[str, Any], str]:
    spec = get_spec(record.kind)
    if not (record.profile.email or "").strip():
        raise EventValidationError(f"{spec.metric_name}: profile email is required")
    if not isinstance(record.profile.properties, Mapping):
        raise EventValidationError(f"{spec.metric_name}: profile properties must be a mapping")
    check_value(f"{spec.metric_name}: profile properties", record.profile.properties)
    properties = map_properties(spec, record.properties)
    _check_monetary(spec, record.value, record.value_currency)
    return spec, properties, format_time(record.occurred_at)


def validate_record(record: EventRecord) -> EventSpec:
    """Runs every local check build_payload relies on; raises EventValidationError."""
    spec, _, _ = _checked(record)
    return spec


# -----------------------------
# Payload
# -----------------------------
def build_payload(record: EventRecord) -> Dict[str, Any]:
    spec, properties, time_str = _checked(record)

    attributes: Dict[str, Any] = {
        "properties": properties,
        "time": time_str,
    }
    if record.value is not None:
        attributes["value"] = record.value
    if record.value_currency is not None:
        attributes["value_currency"] = record.value_currency
    if record.unique_id:
        attributes["unique_id"] = record.unique_id

    attributes["metric"] = {
        "data": {
            "type": "metric",
            "attributes": {"name": spec.metric_name},
        }
    }
    attributes["profile"] = {
        "data": {
            "type": "profile",
            "attributes": record.profile.to_attributes(),
        }
    }

    return {"data": {"type": "event", "attributes": attributes}}


class EventSubmitter:
    """
    Stateless: every call builds its own payload and makes one request.
    """

    def __init__(self, client: EventsClient) -> None:
        self.client = client

    def submit(
        self,
        kind: Union[EventKind, str],
        occurred_at: Timestamp,
        properties: Mapping[str, Any],
        profile: Union[ProfileRef, Mapping[str, Any]],
        value: Optional[Amount] = None,
        value_currency: Optional[str] = None,
        unique_id: Optional[str] = None,
    ) -> SubmissionResult:
        if not isinstance(profile, ProfileRef):
            profile = ProfileRef.from_dict(dict(profile or {}))

        record = EventRecord(
            kind=parse_kind(kind),
            occurred_at=occurred_at,
            properties=dict(properties or {}),
            profile=profile,
            value=value,
            value_currency=value_currency,
            unique_id=unique_id,
        )
        return self.submit_record(record)

    def submit_record(self, record: EventRecord) -> SubmissionResult:
        """
        Raises EventValidationError before any network call.
        Transport / API failures come back as SubmissionResult(ok=False).
        """
        payload = build_payload(record)
        metric = record.metric_name

        try:
            response = self.client.create_event(payload)
        except KlaviyoAPIError as e:
            err = SubmissionError(e.message, e.status_code, e.errors)
            err.__cause__ = e
            log.error(f"Error creating {metric} event: {e.message}")
            return SubmissionResult(kind=record.kind, ok=False, payload=payload, error=err)
        except requests.exceptions.RequestException as e:
            err = SubmissionError(f"Klaviyo request failed: {e}")
            err.__cause__ = e
            log.error(f"Error creating {metric} event: {e}")
            return SubmissionResult(kind=record.kind, ok=False, payload=payload, error=err)

        log.info(f"{metric} event created successfully: {response}")
        return SubmissionResult(kind=record.kind, ok=True, payload=payload, response=response or {})

    def submit_many(self, records: Iterable[EventRecord]) -> List[SubmissionResult]:
        """
        Sequential. A record that fails validation or submission is reported
        in its own result and does not stop the rest.
        """
        results: List[SubmissionResult] = []
        for record in records:
            try:
                results.append(self.submit_record(record))
            except EventValidationError as e:
                log.error(f"Error creating {record.metric_name} event: {e.message}")
                results.append(SubmissionResult(kind=record.kind, ok=False, error=e))
        return results
