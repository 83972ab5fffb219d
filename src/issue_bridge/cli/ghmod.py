"""`ghmod`: open, close, assign or unassign one GitHub issue."""

from __future__ import annotations

import argparse
import logging
import sys

import requests
from pydantic import ValidationError

from issue_bridge import __version__
from issue_bridge.cli import ArgumentParser, positive_int
from issue_bridge.config import (
    DEFAULT_REPOSITORY,
    DEFAULT_USER,
    ToolSettings,
    encode_basic_auth,
)
from issue_bridge.github.client import IssueClientError, RepoAgent
from issue_bridge.logging import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = ArgumentParser(
        prog="ghmod",
        description="Modify a GitHub issue",
        epilog=(
            "The authentication token is required unless it is set in GHMOD_PASSWORD."
        ),
    )
    parser.add_argument("--version", action="version", version=f"ghmod {__version__}")
    parser.add_argument(
        "-r",
        "--repo",
        "--repository",
        dest="repository",
        default=DEFAULT_REPOSITORY,
        help="Repository in the form 'owner/repo'",
    )
    parser.add_argument(
        "-i", "--issue", type=positive_int, required=True, help="Issue number to modify"
    )
    parser.add_argument("-u", "--user", default=DEFAULT_USER, help="GitHub user to operate as")
    parser.add_argument("-a", "--auth", default="", help="Authentication token")

    subparsers = parser.add_subparsers(dest="action", required=True)
    subparsers.add_parser("open", help="Reopen the issue")
    subparsers.add_parser("close", help="Close the issue")
    subparsers.add_parser("unassign", help="Remove every assignee")
    assign = subparsers.add_parser("assign", help="Assign the issue to a GitHub user")
    assign.add_argument("assignee", help="GitHub login to assign")

    return parser


def run_action(agent: RepoAgent, args: argparse.Namespace) -> str:
    """Apply the requested change and return the success line."""

    number = args.issue
    if args.action == "open":
        agent.open_issue(number)
        return f"Issue {number} opened"
    if args.action == "close":
        agent.close_issue(number)
        return f"Issue {number} closed"
    if args.action == "assign":
        agent.assign_issue(number, args.assignee)
        return f"Issue {number} assigned to {args.assignee}"
    if args.action == "unassign":
        agent.unassign_issue(number)
        return f"Issue {number} unassigned"
    raise ValueError(f"Unknown action: {args.action}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = ToolSettings()
    except ValidationError as e:
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 1

    password = args.auth or settings.password
    if not password:
        parser.error("an authentication token is required (--auth or GHMOD_PASSWORD)")

    configure_logging(settings.log_level)

    try:
        agent = RepoAgent.for_repository(
            args.repository,
            api_url=settings.github_api_url,
            token=encode_basic_auth(args.user, password),
        )
    except ValueError as e:
        parser.error(str(e))

    try:
        message = run_action(agent, args)
    except (IssueClientError, requests.RequestException, ValueError) as e:
        logger.exception(
            "Issue update failed",
            extra={"repo": args.repository, "issue_number": args.issue, "action": args.action},
        )
        print(f"Unable to {args.action} issue {args.issue}: {e}", file=sys.stderr)
        return 1
    finally:
        agent.close()

    print(message)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
