"""
Command-line front end.

Reads one JSON upload, applies optional filters, and prints an analytics view
or a CSV export.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from emr_analytics.analytics import (
    capacity_groups,
    cluster_distribution,
    runtime_by_cluster,
    yarn_memory_by_day,
)
from emr_analytics.core.diagnostics import Diagnostics
from emr_analytics.core.exceptions import EmrAnalyticsError
from emr_analytics.core.logging_config import setup_logging
from emr_analytics.data import calendar_weekly_kpi_metrics
from emr_analytics.data.schema import FilterOptions
from emr_analytics.export import daily_metrics_to_csv, records_to_csv, rows_to_csv
from emr_analytics.store import ClusterStore

VIEWS = (
    "bundle",
    "summary",
    "daily",
    "weekly",
    "daily-csv",
    "records-csv",
    "distribution-csv",
    "runtime-csv",
    "yarn-csv",
    "capacity-csv",
)


def _render(store: ClusterStore, view: str, filters: FilterOptions, diagnostics: Diagnostics) -> str:
    records = store.select(filters)

    if view == "bundle":
        return store.analytics_bundle(filters, diagnostics).model_dump_json(indent=2)
    if view == "summary":
        return store.summary(diagnostics).model_dump_json(indent=2)

    if view in ("daily", "weekly", "daily-csv"):
        daily = store.daily_buckets(filters, diagnostics)
        if view == "daily-csv":
            return daily_metrics_to_csv(daily)
        buckets = daily if view == "daily" else calendar_weekly_kpi_metrics(daily)
        return json.dumps([b.model_dump() for b in buckets], indent=2)

    if view == "records-csv":
        return records_to_csv(records)
    if view == "distribution-csv":
        return rows_to_csv(cluster_distribution(records))
    if view == "runtime-csv":
        return rows_to_csv(runtime_by_cluster(records))
    if view == "yarn-csv":
        return rows_to_csv(yarn_memory_by_day(records))
    return rows_to_csv(capacity_groups(records))


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Cluster lifecycle analytics")
    parser.add_argument("upload", nargs="+", type=Path, help="JSON upload file(s), imported in order")
    parser.add_argument("--view", choices=VIEWS, default="bundle")
    parser.add_argument("--cluster", dest="cluster_name")
    parser.add_argument("--state")
    parser.add_argument("--search", dest="search_term")
    parser.add_argument("--start", dest="start_date", type=date.fromisoformat)
    parser.add_argument("--end", dest="end_date", type=date.fromisoformat)
    parser.add_argument("--output", type=Path, help="Write to this file instead of stdout")
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only warnings and errors on stderr (the log file is unaffected)",
    )
    args = parser.parse_args(argv)

    logger = setup_logging(console_level=logging.WARNING if args.quiet else None)

    store = ClusterStore()
    diagnostics = Diagnostics()
    for path in args.upload:
        try:
            result = store.import_file(path)
        except EmrAnalyticsError as e:
            print(f"error: {path}: {e}", file=sys.stderr)
            return 1
        diagnostics.extend(result.diagnostics)

    filters = FilterOptions(
        cluster_name=args.cluster_name,
        state=args.state,
        search_term=args.search_term,
        start_date=args.start_date,
        end_date=args.end_date,
    )
    output = _render(store, args.view, filters, diagnostics)

    if args.output:
        args.output.write_text(output + "\n" if output else "", encoding="utf-8")
        logger.info(f"Wrote {args.view} to {args.output}")
    else:
        print(output)

    if diagnostics:
        logger.info(f"{len(diagnostics)} data-quality warning(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
