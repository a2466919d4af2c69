"""Provision the couple's two accounts (no passwords) and link them as partners."""

import argparse
import logging

from spiritlove.database import SessionLocal
from spiritlove.init_db import create_tables, provision_couple

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("names", nargs=2, help="account names of the two partners")
    parser.add_argument("--email", action="append", default=[], help="email per name, in order")
    args = parser.parse_args(argv)

    create_tables()
    db = SessionLocal()
    try:
        users = provision_couple(db, args.names, args.email)
        for user in users:
            logger.info(
                "  %s (id: %s) needs setup: %s", user.name, user.id, user.needs_password_setup
            )
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    main()
