#!/usr/bin/env python3
"""
Script to create the Biblio tables and load demo data.
"""
import argparse
import logging
import sys
from pathlib import Path
from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).parent.parent))

load_dotenv()

from biblio.configs import DB_URI
from biblio.core import db
from biblio.core.seed import seed_demo_data
from sqlalchemy.exc import SQLAlchemyError
from biblio.core.exceptions import StorageError


def main():
    parser = argparse.ArgumentParser(description="Create Biblio tables and seed demo data")
    parser.add_argument(
        "--db-uri",
        default=DB_URI,
        help="SQLAlchemy database URI (defaults to the configured database)"
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO)

    try:
        session_factory = db.init(db.make_engine(args.db_uri))
        if seed_demo_data(session_factory):
            print("Success! Demo data loaded.")
        else:
            print("Catalog already has books; nothing to do.")
    except (StorageError, SQLAlchemyError) as e:
        print(f"Database error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
