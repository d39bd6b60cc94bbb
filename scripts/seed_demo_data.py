#!/usr/bin/env python3
"""
CrowdTest Platform — Demo Data Seed Script.

Loads the FinPulse / HealthSync demo dataset: one manager, two clients,
three testers, an active beta cycle with assignments, a bug report and
payouts. All demo users log in with ``password123``.

Usage:
    python scripts/seed_demo_data.py
    python scripts/seed_demo_data.py --if-empty
"""

import argparse
import sys

sys.path.insert(0, ".")

from crowdtest import create_app
from crowdtest.models import db
from crowdtest.services import bootstrap


def main():
    parser = argparse.ArgumentParser(description="Seed demo data")
    parser.add_argument(
        "--if-empty", action="store_true",
        help="Leave an already-populated database untouched",
    )
    args = parser.parse_args()

    app = create_app()
    print(f"DB: {app.config['SQLALCHEMY_DATABASE_URI']}\n")
    with app.app_context():
        db.create_all()
        if args.if_empty:
            seeded = bootstrap.ensure_database_seeded()
            print("Demo data seeded." if seeded else "Database already has users; skipped.")
            return
        counts = bootstrap.seed_demo_data()

    total = sum(counts.values())
    print(f"DEMO DATA SEED COMPLETE — {total} records")
    for name, count in counts.items():
        print(f"   {name:<16} {count}")


if __name__ == "__main__":
    main()
