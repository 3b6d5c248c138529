#!/usr/bin/env python3
"""
OrgPulse — run the insights pipeline against a JSON records file.

Loads initiatives, issues, clusters and audit events from a JSON document,
runs the analytics pipeline once and prints the requested section as JSON.

Usage:
    python scripts/run_insights.py --records data/records.json
    python scripts/run_insights.py --records data/records.json --section anomalies
    python scripts/run_insights.py --records data/records.json --now 2026-10-17T12:00:00Z
"""

import argparse
import asyncio
import json
import sys
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from orgpulse.config import get_settings  # noqa: E402
from orgpulse.exceptions import OrgPulseError  # noqa: E402
from orgpulse.repository import InMemoryRecordRepository  # noqa: E402
from orgpulse.services import InsightsService  # noqa: E402
from orgpulse.utils.logging import configure_logging, get_logger  # noqa: E402

SECTIONS = ("report", "trends", "anomalies", "recommendations", "summary")

logger = get_logger(__name__)


def parse_now(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid ISO timestamp: {value}") from e


def select_section(report, section: str):
    if section == "report":
        return report.model_dump(mode="json")
    if section == "summary":
        return report.summary.model_dump(mode="json")
    return [item.model_dump(mode="json") for item in getattr(report, section)]


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Run OrgPulse insights over a records file")
    parser.add_argument("--records", required=True, help="Path to JSON records file")
    parser.add_argument("--section", choices=SECTIONS, default="report", help="Output section")
    parser.add_argument("--now", type=parse_now, default=None, help="Reference time (ISO 8601)")
    parser.add_argument(
        "--lookback-days", type=int, default=None, help="Snapshot lookback (0 = all records)"
    )
    args = parser.parse_args(argv)

    configure_logging(stream=sys.stderr)
    settings = get_settings()

    try:
        repository = InMemoryRecordRepository.from_json_file(args.records)
    except OrgPulseError as e:
        print(f"Failed to load records: {e}", file=sys.stderr)
        return 1

    service = InsightsService.from_settings(settings, repository=repository)
    report = asyncio.run(service.build_report(lookback_days=args.lookback_days, now=args.now))

    logger.info(
        "insights_run_complete",
        section=args.section,
        overall_status=report.summary.overall_status.value,
        failed_stages=report.failed_stages,
    )
    print(json.dumps(select_section(report, args.section), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
