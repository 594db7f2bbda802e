import logging
from typing import Any, Dict, Mapping, Optional

log = logging.getLogger("restaurant_events.http")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

SENSITIVE_HEADERS = {
    "authorization",
    "cookie",
    "x-api-key",
}


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    if not any(getattr(h, "_restaurant_events", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._restaurant_events = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))


def mask_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    out = {}
    for k, v in headers.items():
        if k.lower() in SENSITIVE_HEADERS:
            out[k] = "***masked***"
        else:
            out[k] = v
    return out


def log_outbound(
    method: str,
    url: str,
    headers: Mapping[str, str],
    status_code: Optional[int],
    duration_ms: int,
) -> None:
    entry: Dict[str, Any] = {
        "method": method,
        "url": url,
        "status_code": status_code,
        "duration_ms": duration_ms,
        "headers": mask_headers(headers),
    }

    log.debug(entry)
