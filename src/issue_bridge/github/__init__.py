"""GitHub REST access for issue queries and edits."""

from __future__ import annotations

__all__ = [
    "AuthRequired",
    "Issue",
    "IssueClient",
    "IssueClientError",
    "RepoAgent",
    "SearchFailed",
]

from issue_bridge.github.client import (
    AuthRequired,
    Issue,
    IssueClient,
    IssueClientError,
    RepoAgent,
    SearchFailed,
)
