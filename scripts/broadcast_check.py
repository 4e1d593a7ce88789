"""Ask a running API to publish a realtime-only test event to every user."""

from __future__ import annotations

import argparse
import sys

import httpx


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Test broadcasting functionality.")
    parser.add_argument("--message", default="Hello World")
    parser.add_argument("--base-url", default="http://localhost:8000")
    parser.add_argument("--token", required=True, help="Bearer token of an administrator")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    print("Testing broadcast...")
    try:
        response = httpx.post(
            f"{args.base_url.rstrip('/')}/notifications/test-broadcast",
            json={"message": args.message},
            headers={"Authorization": f"Bearer {args.token}"},
            timeout=10.0,
        )
        response.raise_for_status()
    except httpx.HTTPError as exc:
        print(f"Broadcast failed: {exc}", file=sys.stderr)
        return 1

    print(f"Broadcast sent successfully to {response.json()['recipients']} users!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
