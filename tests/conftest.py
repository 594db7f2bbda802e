from __future__ import annotations

from typing import Any, Dict, List, Optional, Set

import pytest

from apps.backend.services.events.errors import KlaviyoAPIError


def metric_of(payload: Dict[str, Any]) -> str:
    return payload["data"]["attributes"]["metric"]["data"]["attributes"]["name"]


class FakeEventsClient:
    """Records payloads; raises for metrics listed in fail_on."""

    def __init__(self, fail_on: Optional[Set[str]] = None, error: Optional[Exception] = None) -> None:
        self.sent: List[Dict[str, Any]] = []
        self.fail_on = fail_on or set()
        self.error = error

    def create_event(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.sent.append(payload)
        if metric_of(payload) in self.fail_on:
            raise self.error or KlaviyoAPIError(
                "Klaviyo API error (400): invalid profile",
                400,
                [{"code": "invalid", "detail": "invalid profile"}],
            )
        return {}


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "KLAVIYO_API_KEY",
        "KLAVIYO_BASE_URL",
        "KLAVIYO_API_REVISION",
        "KLAVIYO_TIMEOUT_SECONDS",
        "KLAVIYO_DRY_RUN",
        "SAMPLE_CUSTOMER_EMAIL",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def fake_client() -> FakeEventsClient:
    return FakeEventsClient()


@pytest.fixture
def make_client():
    return FakeEventsClient
