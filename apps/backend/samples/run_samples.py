# apps/backend/samples/run_samples.py
#
# Usage:
#   python -m apps.backend.samples.run_samples all --dry-run
#   python -m apps.backend.samples.run_samples ordering --email someone@example.com

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from apps.backend.samples import online_ordering_events, reservation_events, restaurant_loyalty_events
from apps.backend.samples.common import build_parser, sample_email, submit_samples
from apps.backend.services.events.records import EventRecord

DOMAINS = {
    "ordering": online_ordering_events.build_records,
    "reservations": reservation_events.build_records,
    "loyalty": restaurant_loyalty_events.build_records,
}


def collect(domain: str, email: str) -> List[EventRecord]:
    if domain == "all":
        return [r for build in DOMAINS.values() for r in build(email)]
    return DOMAINS[domain](email)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser("Send sample restaurant events to Klaviyo.")
    parser.add_argument("domain", choices=[*DOMAINS, "all"], help="which sample set to send")
    args = parser.parse_args(argv)

    results = submit_samples(collect(args.domain, args.email or sample_email()), dry_run=args.dry_run)
    if results is None:
        return 1

    summary: Dict[str, int] = {"sent": 0, "failed": 0}
    for r in results:
        summary["sent" if r.ok else "failed"] += 1
    print(f"{args.domain}: {summary['sent']} sent, {summary['failed']} failed")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
