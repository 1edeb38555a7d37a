"""
Seed the default admin and mock users for local development. Run from project root:
  python -m app.scripts.seed_users [--count 150] [--seed 42]
"""

import argparse
import logging
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.services.errors import UserServiceError
from app.services.seed import seed_admin, seed_users, seeded_faker

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed the admin account and mock users.")
    parser.add_argument("--count", type=int, default=150, help="Number of mock users (default 150)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible data")
    args = parser.parse_args(argv)
    if args.count < 0:
        parser.error("--count must be non-negative")

    db = SessionLocal()
    try:
        seed_admin(db, get_settings())
        inserted = seed_users(db, count=args.count, fake=seeded_faker(args.seed))
        logger.info("Seeding completed: users_inserted=%s", inserted)
        return 0
    except UserServiceError as e:
        logger.error("Seeding failed: %s", e.message)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
