# apps/backend/routes/events.py
# =====================================================
# Restaurant Events: Klaviyo event submission routes
#
#   GET  /events/catalog   -> every event kind + its property keys
#   POST /events/{kind}    -> submit one event (kind = PLACED_ORDER or "Placed Order")
# =====================================================

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from apps.backend.services.events.catalog import EVENT_CATALOG
from apps.backend.services.events.errors import EventValidationError
from apps.backend.services.events.records import ProfileRef
from apps.backend.services.events.submitter import EventSubmitter
from apps.backend.utils.envelope import from_exception, ok

router = APIRouter(prefix="/events", tags=["events"])


# ===== Pydantic models =====
class ProfileIn(BaseModel):
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    properties: Dict[str, Any] = Field(default_factory=dict)


class EventIn(BaseModel):
    occurred_at: str
    properties: Dict[str, Any] = Field(default_factory=dict)
    profile: ProfileIn
    value: Optional[Decimal] = None
    value_currency: Optional[str] = None
    unique_id: Optional[str] = None


def get_submitter(request: Request) -> EventSubmitter:
    return request.app.state.submitter


# ===== Endpoints =====

@router.get("/catalog")
def event_catalog():
    return ok([spec.to_dict() for spec in EVENT_CATALOG.values()])


@router.post("/{kind}")
def submit_event(kind: str, body: EventIn, submitter: EventSubmitter = Depends(get_submitter)):
    profile = ProfileRef(
        email=body.profile.email,
        first_name=body.profile.first_name,
        last_name=body.profile.last_name,
        phone_number=body.profile.phone_number,
        properties=body.profile.properties,
    )

    try:
        result = submitter.submit(
            kind,
            body.occurred_at,
            body.properties,
            profile,
            value=body.value,
            value_currency=body.value_currency,
            unique_id=body.unique_id,
        )
    except EventValidationError as e:
        return from_exception(e)

    if not result.ok:
        return from_exception(result.error, details=getattr(result.error, "errors", None))
    return ok(result.to_dict())
