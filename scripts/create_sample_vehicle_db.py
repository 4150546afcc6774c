#!/usr/bin/env python3
"""
Create the local SQLite vehicle inventory used by the search pipeline.

Usage:
    python scripts/create_sample_vehicle_db.py             # path from config (data/vehicles.db)
    python scripts/create_sample_vehicle_db.py --db /tmp/vehicles.db --force
"""
import argparse
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from carsearch.core.config import get_config
from carsearch.data.sample_inventory import SAMPLE_VEHICLES, create_database


def main():
    parser = argparse.ArgumentParser(description='Create the sample vehicle inventory')
    parser.add_argument('--db', type=str, default=None,
                        help='SQLite file to write (defaults to store.vehicle_db in config)')
    parser.add_argument('--force', action='store_true',
                        help='Delete an existing database first')
    args = parser.parse_args()

    db_path = Path(args.db) if args.db else get_config().resolve_db_path()

    if db_path.exists():
        if not args.force:
            print(f"{db_path} already exists (use --force to recreate)")
            sys.exit(1)
        db_path.unlink()

    create_database(db_path)
    print(f"Created {db_path} with {len(SAMPLE_VEHICLES)} vehicles")


if __name__ == '__main__':
    main()
