"""Send a test notification to every active user."""

from __future__ import annotations

import argparse
import sys

from scholarhub.application.use_cases.notifications import send_notification
from scholarhub.config import get_settings
from scholarhub.infrastructure.database import SessionLocal, initialize_database
from scholarhub.infrastructure.repositories import UserRepository
from scholarhub.logging_config import configure_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send a test notification to all users.")
    parser.add_argument("--title", default="Test Notification")
    parser.add_argument("--message", default="This is a test notification")
    parser.add_argument("--type", default="info")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(get_settings().log_level)
    initialize_database()

    session = SessionLocal()
    try:
        recipients = UserRepository(session).list_active_ids()
        if not recipients:
            print("No users found in the database.", file=sys.stderr)
            return 1

        print(f"Sending test notification to {len(recipients)} users...")
        send_notification(
            session,
            recipients,
            title=args.title,
            message=args.message,
            type=args.type,
        )
    finally:
        session.close()

    print("Test notification sent successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
