"""`ghfetch`: print one GitHub issue, or every issue matching a query."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

import requests
from pydantic import ValidationError

from issue_bridge import __version__
from issue_bridge.cli import ArgumentParser, positive_int
from issue_bridge.config import DEFAULT_REPOSITORY, ToolSettings
from issue_bridge.github.client import Issue, IssueClientError, RepoAgent
from issue_bridge.logging import configure_logging

logger = logging.getLogger(__name__)

SEPARATOR = "-" * 41


def _query_param(value: str) -> tuple[str, str]:
    key, sep, val = value.partition("=")
    if not sep or not key or "=" in val:
        raise argparse.ArgumentTypeError(f"Invalid parameter format: {value!r}")
    return key, val


def build_parser() -> argparse.ArgumentParser:
    parser = ArgumentParser(
        prog="ghfetch",
        description="Fetch GitHub issues and print a report",
        epilog="Query parameters are passed through to the issues API, e.g. state=closed.",
    )
    parser.add_argument("--version", action="version", version=f"ghfetch {__version__}")
    parser.add_argument(
        "-r",
        "--repo",
        "--repository",
        dest="repository",
        default=DEFAULT_REPOSITORY,
        help="Repository in the form 'owner/repo'",
    )
    parser.add_argument(
        "-n", "--issue", type=positive_int, default=None, help="Issue number to fetch"
    )
    parser.add_argument(
        "params",
        nargs="*",
        type=_query_param,
        metavar="KEY=VALUE",
        help="Issue query parameters (only without --issue)",
    )
    return parser


def render_issue(issue: Issue) -> str:
    if issue.user is not None:
        reporter = f"{issue.user.login}({issue.user.id})"
    else:
        reporter = ""
    return (
        f"Number:    {issue.number}\n"
        f"Title:     {issue.title}\n"
        f"Reporter:  {reporter}\n"
        f"URL:       {issue.html_url}\n"
        f"State:     {issue.state}\n"
    )


def render_issue_list(issues: Sequence[Issue]) -> str:
    lines = [f"There are {len(issues)} issues in the query\n"]
    for issue in issues:
        lines.append(SEPARATOR + "\n" + render_issue(issue))
    return "".join(lines)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.issue is not None and args.params:
        parser.error("extra query parameters are not allowed when fetching one issue")

    try:
        settings = ToolSettings()
    except ValidationError as e:
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 1

    configure_logging(settings.log_level)

    try:
        agent = RepoAgent.for_repository(args.repository, api_url=settings.github_api_url)
    except ValueError as e:
        parser.error(str(e))

    try:
        if args.issue is not None:
            output = render_issue(agent.get_issue(args.issue))
        else:
            agent.add_param("per_page", "100")
            output = render_issue_list(agent.fetch_issues(dict(args.params)))
    except (IssueClientError, requests.RequestException, ValueError) as e:
        logger.exception("Issue query failed", extra={"repo": args.repository})
        print(f"Issue query failed: {e}", file=sys.stderr)
        return 1
    finally:
        agent.close()

    sys.stdout.write(output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
