"""Delete notifications whose ``expires_at`` instant has passed.

Meant to be scheduled (cron, systemd timer) so expired records are removed
from storage even when nobody reads them.
"""

from __future__ import annotations

import argparse
import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from bazaarfly.application.use_cases.notifications import purge_expired_notifications
from bazaarfly.infrastructure.database import SessionLocal, initialize_database


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Remove expired notifications from the Bazaarfly database.",
    )
    parser.add_argument(
        "--now",
        type=datetime.fromisoformat,
        default=None,
        help="ISO-8601 instant to purge against (default: current time)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every step at INFO level.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    initialize_database()

    session = SessionLocal()
    try:
        removed = purge_expired_notifications(session, now=args.now)
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Could not purge expired notifications: {exc}") from exc
    finally:
        session.close()

    print(f"Removed {removed} expired notification(s).")


if __name__ == "__main__":
    main()
