from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse

from apps.backend.services.events.errors import EventError


def ok(data: Any = None, meta: Optional[Dict[str, Any]] = None) -> JSONResponse:
    return JSONResponse(
        content={
            "ok": True,
            "data": data,
            "meta": meta or {},
        }
    )


def error(message: str, code: str = "error", status: int = 400, details: Any = None) -> JSONResponse:
    content: Dict[str, Any] = {
        "ok": False,
        "error": code,
        "message": message,
    }
    if details:
        content["details"] = details
    return JSONResponse(status_code=status, content=content)


def from_exception(exc: EventError, details: Any = None) -> JSONResponse:
    return error(exc.message, code=type(exc).__name__, status=exc.status_code, details=details)
