"""Command line entry point for Medicita."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from medicita.clinic import Clinic
from medicita.config import configure_logging, load_settings
from medicita.reports import build_history_report

logger = logging.getLogger(__name__)

COLLECTIONS = ("users", "doctors", "patients", "citas", "historial")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Medicita clinic data tool")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("seed", help="Create default users and doctors if missing")

    list_parser = subparsers.add_parser("list", help="Print a collection as JSON")
    list_parser.add_argument("collection", choices=COLLECTIONS)
    list_parser.add_argument("--query", "-q", default=None, help="Case-insensitive filter")

    report_parser = subparsers.add_parser("report", help="Export a patient's history to PDF")
    report_parser.add_argument("patient_id")

    serve_parser = subparsers.add_parser("serve", help="Run the dashboard")
    serve_parser.add_argument("--port", type=int, default=None)
    return parser.parse_args(argv)


def _repository(clinic: Clinic, collection: str):
    return {
        "users": clinic.users,
        "doctors": clinic.doctors,
        "patients": clinic.patients,
        "citas": clinic.appointments,
        "historial": clinic.history,
    }[collection]


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = load_settings()
    configure_logging(settings.log_level)
    clinic = Clinic.from_settings(settings)

    if args.command == "seed":
        seeded = clinic.seed()
        logger.info("Seeded collections: %s", ", ".join(seeded) or "none")
    elif args.command == "list":
        records = _repository(clinic, args.collection).list(args.query)
        rows = [record.to_row() for record in records]
        print(json.dumps(rows, indent=2, ensure_ascii=False))
    elif args.command == "report":
        try:
            path = build_history_report(
                args.patient_id,
                clinic.history.for_patient(args.patient_id),
                settings.reports_dir,
            )
        except ValueError as exc:
            logger.error("%s", exc)
            return 1
        print(path)
    else:
        from medicita.ui.dashboard import create_app

        clinic.seed()
        create_app(clinic, settings.reports_dir).run(
            host="0.0.0.0",
            port=args.port or settings.port,
            debug=False,
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
