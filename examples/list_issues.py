#!/usr/bin/env python3
"""Programmatic issue search example.

This demonstrates using the client components directly:

* load settings from `.env`
* page through every issue matching a query
* print one line per issue

Repository selection is passed as an argument (not read from `.env`).
"""

from __future__ import annotations

import argparse
from typing import Sequence

from issue_bridge.config import ToolSettings
from issue_bridge.github.client import RepoAgent
from issue_bridge.logging import configure_logging


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="List GitHub issues (programmatic example).")
    parser.add_argument("--repo", required=True, help='Target repository in the form "owner/repo"')
    parser.add_argument("--state", default="open", help="open | closed | all")
    parser.add_argument(
        "--labels",
        default="",
        help='Comma-separated labels, e.g. "bug,help wanted" (optional)',
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = ToolSettings()
    configure_logging(settings.log_level)

    agent = RepoAgent.for_repository(args.repo, api_url=settings.github_api_url)
    agent.add_param("per_page", "100")

    params = {"state": args.state}
    if args.labels.strip():
        params["labels"] = args.labels

    try:
        issues = agent.fetch_issues(params)
    finally:
        agent.close()

    for issue in issues:
        assignee = issue.assignee.login if issue.assignee else "-"
        print(f"#{issue.number:<6} {issue.state:<7} {assignee:<20} {issue.title}")
    print(f"{len(issues)} issues")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
