from fastapi import APIRouter, Request

from apps.backend.services.events.catalog import EVENT_CATALOG

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health_root(request: Request):
    submitter = getattr(request.app.state, "submitter", None)
    return {
        "ok": submitter is not None,
        "client": type(submitter.client).__name__ if submitter is not None else None,
        "event_kinds": len(EVENT_CATALOG),
    }
