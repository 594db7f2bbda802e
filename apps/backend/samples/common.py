# apps/backend/samples/common.py

from __future__ import annotations

import argparse
import logging
import os
from typing import Iterable, List, Optional, Sequence

from apps.backend.config.settings import load_settings
from apps.backend.services.events.errors import ConfigError
from apps.backend.services.events.records import EventRecord
from apps.backend.services.events.submitter import EventSubmitter, SubmissionResult
from apps.backend.services.klaviyo_client import build_client
from apps.backend.utils.logger import configure_logging

log = logging.getLogger("restaurant_events.samples")

DEFAULT_EMAIL = "customer@example.com"

RESTAURANT_ID = "restaurant-12345"
RESTAURANT_NAME = "Klaviyo Cafe (Denver)"
CURRENCY = "USD"


def sample_email() -> str:
    return os.getenv("SAMPLE_CUSTOMER_EMAIL") or DEFAULT_EMAIL


def build_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "--email",
        default=None,
        help="profile email the sample events are attributed to "
        f"(default: $SAMPLE_CUSTOMER_EMAIL or {DEFAULT_EMAIL})",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="log payloads instead of calling Klaviyo (no API key needed)",
    )
    return parser


def submit_samples(records: Iterable[EventRecord], *, dry_run: bool = False) -> Optional[List[SubmissionResult]]:
    """
    Returns None when configuration is missing; nothing is sent in that case.
    """
    settings = load_settings()
    configure_logging(settings.log_level)

    try:
        client = build_client(settings, dry_run=dry_run)
    except ConfigError as e:
        log.error(e.message)
        return None

    results = EventSubmitter(client).submit_many(records)
    failed = [r for r in results if not r.ok]
    log.info(f"Submitted {len(results)} events ({len(failed)} failed)")
    return results


def run(build_records, description: str, argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser(description).parse_args(argv)
    results = submit_samples(build_records(args.email or sample_email()), dry_run=args.dry_run)
    # per-event failures are already logged and do not change the exit status
    return 1 if results is None else 0
