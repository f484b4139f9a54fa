"""
Ingest an air-quality CSV export from the command line.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from app.domain.errors import IngestionError
from app.schemas.csv_ingestion import IngestionReportResponse
from app.services.csv_ingestion_service import get_csv_ingestion_service


def _print_error(payload: dict[str, object]) -> int:
    print(json.dumps(payload, indent=2), file=sys.stderr)
    return 2


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Ingest an air-quality CSV file into reading storage.")
    parser.add_argument("path", type=Path, help="CSV file to ingest.")
    parser.add_argument("--start-date", dest="start_date", default=None, help="Inclusive lower bound.")
    parser.add_argument("--end-date", dest="end_date", default=None, help="Inclusive upper bound.")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Skip the air-quality header check.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").strip().upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    try:
        content = args.path.read_bytes()
    except OSError as exc:
        return _print_error({"code": "unreadable_file", "message": f"{args.path}: {exc.strerror or exc}"})

    service = get_csv_ingestion_service()
    try:
        report = service.ingest_bytes(
            content,
            start_date=args.start_date,
            end_date=args.end_date,
            skip_schema_check=args.force,
        )
    except IngestionError as exc:
        return _print_error(exc.to_dict())

    payload = IngestionReportResponse.from_domain(report).model_dump(mode="json", by_alias=True)
    print(json.dumps(payload, indent=2))
    return 1 if report.has_failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
