"""GitHub issue bridge.

Command-line tools and a slash-command chat bot that open, close, assign and
unassign GitHub issues through the REST API.
"""

__version__ = "0.1.0"

from issue_bridge.github.client import Issue, RepoAgent

__all__ = ["__version__", "Issue", "RepoAgent"]
