"""Command-line interface: serve, run one ingestion cycle, provision API users."""

from __future__ import annotations

import argparse
import json
import logging
import sqlite3
import sys

from newshub.config import load_config
from newshub.jobs import run_ingestion
from newshub.storage import init_db
from newshub.storage.users import create_user, get_user_by_email, issue_token

logger = logging.getLogger(__name__)

# Exit codes for `newshub ingest`
EXIT_OK = 0
EXIT_PARTIAL = 1
EXIT_FAILED = 2


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="newshub",
        description="News aggregation backend",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("serve", help="Run the scheduler and the web API")

    ingest = sub.add_parser("ingest", help="Run one ingestion cycle and print its report")
    ingest.add_argument(
        "--source",
        action="append",
        dest="sources",
        metavar="KIND",
        help="Provider to pull from (repeatable); defaults to INGESTION_SOURCES",
    )

    user = sub.add_parser("create-user", help="Create an API user and print a token")
    user.add_argument("--email", required=True)
    user.add_argument("--name", required=True)

    token = sub.add_parser("issue-token", help="Issue an additional token for a user")
    token.add_argument("--email", required=True)
    token.add_argument("--name", default="default", help="Label for the token")

    return parser


def _cmd_ingest(config, args: argparse.Namespace) -> int:
    report = run_ingestion(config, sources=args.sources)
    if report is None:
        print(json.dumps({"status": "error"}))
        return EXIT_FAILED
    print(json.dumps(report.to_dict(), indent=2))
    return {"ok": EXIT_OK, "partial": EXIT_PARTIAL}.get(report.status, EXIT_FAILED)


def _cmd_create_user(config, args: argparse.Namespace) -> int:
    try:
        user_id = create_user(config.database_path, args.email, args.name)
    except sqlite3.IntegrityError:
        print(f"User {args.email} already exists", file=sys.stderr)
        return 1
    print(issue_token(config.database_path, user_id))
    return 0


def _cmd_issue_token(config, args: argparse.Namespace) -> int:
    user = get_user_by_email(config.database_path, args.email)
    if user is None:
        print(f"No user with email {args.email}", file=sys.stderr)
        return 1
    print(issue_token(config.database_path, user["id"], args.name))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = create_parser().parse_args(argv)

    if args.command == "serve":
        from newshub.main import main as serve

        serve()
        return 0

    config = load_config()
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=config.log_level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            stream=sys.stderr,
        )
    init_db(config.database_path)

    if args.command == "ingest":
        return _cmd_ingest(config, args)
    if args.command == "create-user":
        return _cmd_create_user(config, args)
    return _cmd_issue_token(config, args)


if __name__ == "__main__":
    sys.exit(main())
