# apps/backend/services/klaviyo_client.py

from __future__ import annotations

import json
import logging
import time
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

import requests

from apps.backend.config.settings import Settings
from apps.backend.services.events.errors import ConfigError, KlaviyoAPIError
from apps.backend.utils.logger import log_outbound


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Decimal):
        return float(obj)
    if isinstance(obj, Mapping):
        return dict(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _parse_errors(response: requests.Response) -> List[Dict[str, Any]]:
    try:
        body = response.json()
    except ValueError:
        return []
    if isinstance(body, dict) and isinstance(body.get("errors"), list):
        return [e for e in body["errors"] if isinstance(e, dict)]
    return []


class KlaviyoClient:
    """
    Minimal Klaviyo REST client for the Events API.

    Design goals:
    - Plain `requests` calls, no vendor SDK
    - Revision-pinned via the `revision` header
    - One HTTP request per call: no retries, no backoff
    """

    JSONAPI_MEDIA_TYPE = "application/vnd.api+json"

    def __init__(
        self,
        api_key: str,
        *,
        revision: str = "2024-10-15",
        base_url: str = "https://a.klaviyo.com/api",
        timeout: float = 20.0,
        session: Optional[requests.Session] = None,
    ):
        if not api_key or not api_key.strip():
            raise ConfigError("KlaviyoClient requires an API key")

        self.api_key = api_key.strip()
        self.revision = revision
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

        self.headers = {
            "Authorization": f"Klaviyo-API-Key {self.api_key}",
            "revision": self.revision,
            "Content-Type": self.JSONAPI_MEDIA_TYPE,
            "Accept": self.JSONAPI_MEDIA_TYPE,
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> "KlaviyoClient":
        return cls(
            settings.require_api_key(),
            revision=settings.klaviyo_revision,
            base_url=settings.klaviyo_base_url,
            timeout=settings.timeout_seconds,
        )

    # ---------------------------------------------------------
    # Low-level request handler
    # ---------------------------------------------------------
    def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Performs a single REST request.
        Returns the decoded JSON body, or {} when the response has no content.
        """
        url = f"{self.base_url}{path}"
        data = json.dumps(json_body, default=_json_default, allow_nan=False) if json_body is not None else None

        started = time.time()
        try:
            response = self.session.request(
                method=method,
                url=url,
                headers=self.headers,
                data=data,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            log_outbound(method, url, self.headers, None, int((time.time() - started) * 1000))
            raise KlaviyoAPIError(f"Timeout contacting Klaviyo: {e}", 504) from e
        except requests.exceptions.RequestException as e:
            log_outbound(method, url, self.headers, None, int((time.time() - started) * 1000))
            raise KlaviyoAPIError(f"Klaviyo request failed: {e}", 502) from e

        log_outbound(method, url, self.headers, response.status_code, int((time.time() - started) * 1000))

        if response.status_code >= 400:
            errors = _parse_errors(response)
            detail = "; ".join(
                str(e.get("detail") or e.get("title") or e.get("code")) for e in errors
            ) or (response.text or "").strip() or response.reason
            raise KlaviyoAPIError(
                f"Klaviyo API error ({response.status_code}): {detail}",
                response.status_code,
                errors,
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {}

    # ---------------------------------------------------------
    # Events API
    # ---------------------------------------------------------
    def create_event(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/events", json_body=payload)


class DryRunClient:
    """
    Stands in for KlaviyoClient when KLAVIYO_DRY_RUN=true or --dry-run is given.
    Logs each payload and keeps it in `sent`; no network, no API key.
    """

    def __init__(self) -> None:
        self.sent: List[Dict[str, Any]] = []
        self.log = logging.getLogger("restaurant_events.dry_run")

    def create_event(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.sent.append(payload)
        self.log.info(json.dumps(payload, default=_json_default, allow_nan=False, indent=2))
        return {}


def build_client(settings: Settings, *, dry_run: bool = False):
    if dry_run or settings.dry_run:
        return DryRunClient()
    return KlaviyoClient.from_settings(settings)
