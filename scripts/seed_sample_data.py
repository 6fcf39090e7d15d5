#!/usr/bin/env python3
"""Seed a SQLite database with sample CRM data and run a demo match.

This script gives a manual way to try the propmatch CLI without a real CRM
export. It loads tests/fixtures/sample_crm.yaml into a database and, unless
--no-demo is given, ranks agent-1's listings for client-001.

Usage:
    # Seed data/sample_crm.db and print a demo match
    python scripts/seed_sample_data.py

    # Custom database path and fixture file
    python scripts/seed_sample_data.py --database /tmp/crm.db --fixtures my_crm.yaml

    # Then run the CLI against the seeded database
    DATABASE_URL=sqlite:///data/sample_crm.db propmatch --agent-id agent-1 --request request.json
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from propmatch.config.models import MatchingConfig
from propmatch.logging.config import configure_logging
from propmatch.matching.service import MatchingService
from propmatch.matching.utils import format_summary
from propmatch.persistence.database import close_database, get_session, init_database
from propmatch.persistence.exceptions import PersistenceError
from propmatch.persistence.repositories import (
    ClientRepository,
    ContactHistoryRepository,
    PropertyRepository,
    SqlCandidateRepository,
)
from tests.helpers.fixture_data import SAMPLE_CRM_PATH, load_fixture_records, seed_database


def print_header(title: str):
    width = 80
    print("\n" + "=" * width)
    print(f" {title}")
    print("=" * width + "\n")


def main():
    parser = argparse.ArgumentParser(
        description="Seed sample CRM data for propmatch",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--database",
        type=Path,
        default=Path("data/sample_crm.db"),
        help="Path to SQLite database (default: data/sample_crm.db)",
    )
    parser.add_argument(
        "--fixtures",
        type=Path,
        default=SAMPLE_CRM_PATH,
        help="Path to fixtures YAML file (default: tests/fixtures/sample_crm.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: WARNING)",
    )
    parser.add_argument(
        "--no-demo",
        action="store_true",
        help="Only seed the database, skip the demo match",
    )
    args = parser.parse_args()

    load_dotenv()
    configure_logging(level=args.log_level, format_type="key-value", environment="sample")

    print_header("propmatch - Sample Data")
    print(f"Fixtures: {args.fixtures}")
    print(f"Database: {args.database}")

    if args.database.exists():
        print(f"\n❌ Error: {args.database} already exists; remove it or choose another path")
        return 1

    try:
        records = load_fixture_records(args.fixtures)
        init_database(f"sqlite:///{args.database.absolute()}")

        with get_session() as session:
            seed_database(session, records)
        print(
            f"✓ Seeded {len(records.properties)} properties, {len(records.clients)} clients, "
            f"{len(records.contact_events)} contact events"
        )

        if not args.no_demo:
            print_header("Demo: properties for client-001")
            with get_session() as session:
                service = MatchingService(
                    candidate_repository=SqlCandidateRepository(session),
                    criteria_provider=ClientRepository(session, agent_id="agent-1"),
                    property_provider=PropertyRepository(session, agent_id="agent-1"),
                    contact_history=ContactHistoryRepository(session),
                    config=MatchingConfig(),
                )
                response = service.match(
                    {"clientId": "client-001", "matchThreshold": 0}, agent_id="agent-1"
                )
            print(format_summary(response, limit=None))

        print("\n" + "-" * 80)
        print(f"To clean up: rm {args.database.absolute()}")
        print("-" * 80 + "\n")
        return 0

    except (FileNotFoundError, PersistenceError) as e:
        print(f"\n❌ Error: {e}")
        return 1
    finally:
        close_database()


if __name__ == "__main__":
    sys.exit(main())
