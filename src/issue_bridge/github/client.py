"""GitHub issue tracker client.

Wraps the REST endpoints used by the tools and the bot:

- list issues (following `Link: <...>; rel="next"` pagination)
- fetch a single issue
- PATCH an issue's `state` / `assignees`

`IssueClient` talks HTTP; `RepoAgent` binds a client to one repository's
issue URL, an auth token and a set of fixed query parameters.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import requests

from issue_bridge.config import DEFAULT_API_URL

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_PAGES = 100


class IssueClientError(Exception):
    """Base class for errors raised by the issue client."""


class SearchFailed(IssueClientError):
    """An issue query returned something other than HTTP 200."""

    def __init__(self, status: str) -> None:
        super().__init__(f"search query failed: {status}")
        self.status = status


class AuthRequired(IssueClientError):
    """A mutation was attempted without an auth token."""

    def __init__(self) -> None:
        super().__init__("auth token required to modify an issue")


@dataclass(frozen=True, slots=True)
class User:
    """A GitHub user as embedded in issue payloads."""

    login: str
    id: int = 0
    html_url: str = ""

    @classmethod
    def from_json(cls, data: object) -> User | None:
        if not isinstance(data, dict):
            return None
        login = data.get("login")
        if not isinstance(login, str) or not login:
            return None
        user_id = data.get("id")
        html_url = data.get("html_url")
        return cls(
            login=login,
            id=user_id if isinstance(user_id, int) else 0,
            html_url=html_url if isinstance(html_url, str) else "",
        )


@dataclass(frozen=True, slots=True)
class Label:
    name: str
    url: str = ""


@dataclass(frozen=True, slots=True)
class Issue:
    """Snapshot of one issue as returned by GitHub."""

    number: int
    title: str
    html_url: str
    state: str
    id: int = 0
    user: User | None = None
    assignee: User | None = None
    assignees: list[User] = field(default_factory=list)
    body: str = ""
    labels: list[Label] = field(default_factory=list)
    locked: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    closed_at: datetime | None = None

    @classmethod
    def from_json(cls, data: Any) -> Issue:
        """Decode an issue object from the REST API.

        Raises:
            ValueError: If the payload is not an issue object.
        """

        if not isinstance(data, dict):
            raise ValueError("Invalid issue payload: expected a JSON object")

        number = data.get("number")
        if not isinstance(number, int) or isinstance(number, bool):
            raise ValueError("Invalid issue payload: missing number")

        labels: list[Label] = []
        for raw in data.get("labels") or []:
            if isinstance(raw, dict) and isinstance(raw.get("name"), str):
                url = raw.get("url")
                labels.append(Label(name=raw["name"], url=url if isinstance(url, str) else ""))

        assignees = [
            user for user in (User.from_json(a) for a in data.get("assignees") or []) if user
        ]

        issue_id = data.get("id")
        return cls(
            number=number,
            title=_str_or_empty(data.get("title")),
            html_url=_str_or_empty(data.get("html_url")),
            state=_str_or_empty(data.get("state")),
            id=issue_id if isinstance(issue_id, int) else 0,
            user=User.from_json(data.get("user")),
            assignee=User.from_json(data.get("assignee")),
            assignees=assignees,
            body=_str_or_empty(data.get("body")),
            labels=labels,
            locked=bool(data.get("locked", False)),
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
            closed_at=_parse_datetime(data.get("closed_at")),
        )


def _str_or_empty(value: object) -> str:
    return value if isinstance(value, str) else ""


def _parse_datetime(value: object) -> datetime | None:
    if not isinstance(value, str) or not value.strip():
        return None
    # GitHub returns timestamps like "2025-01-01T00:00:00Z".
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _next_link(resp: requests.Response) -> str | None:
    # requests parses the Link header; GitHub omits rel="next" on the last page.
    return resp.links.get("next", {}).get("url")


def _status_line(resp: requests.Response) -> str:
    return f"{resp.status_code} {resp.reason or ''}".strip()


class IssueClient:
    """Thin HTTP layer over the GitHub issues endpoints."""

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> None:
        if max_pages <= 0:
            raise ValueError("max_pages must be a positive integer")

        self._timeout = timeout
        self._max_pages = max_pages
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "github-issue-bridge",
            }
        )

    def search(self, base_url: str, params: dict[str, str] | None = None) -> list[Issue]:
        """Run an issue query and return every page of results.

        The first request carries `params`; later pages are fetched from the
        `rel="next"` link GitHub hands back, which already embeds the query.

        Raises:
            SearchFailed: If any page comes back with a status other than 200.
        """

        logger.debug("Searching issues", extra={"url": base_url, "params": params or {}})
        resp = self._session.get(base_url, params=params or None, timeout=self._timeout)
        issues = self._decode_issue_list(resp)

        seen = {resp.url or base_url}
        pages = 1
        link = _next_link(resp)
        while link is not None:
            if link in seen:
                logger.warning("Pagination link repeats; stopping", extra={"url": link})
                break
            if pages >= self._max_pages:
                logger.warning(
                    "Pagination limit reached; results truncated",
                    extra={"max_pages": self._max_pages, "issues": len(issues)},
                )
                break
            seen.add(link)
            resp = self._session.get(link, timeout=self._timeout)
            issues.extend(self._decode_issue_list(resp))
            pages += 1
            link = _next_link(resp)

        logger.debug("Search complete", extra={"pages": pages, "issues": len(issues)})
        return issues

    @staticmethod
    def _decode_issue_list(resp: requests.Response) -> list[Issue]:
        if resp.status_code != 200:
            raise SearchFailed(_status_line(resp))
        payload = resp.json()
        if not isinstance(payload, list):
            raise ValueError("Unexpected search response: expected a JSON list")
        return [Issue.from_json(item) for item in payload]

    def get_issue(self, base_url: str, number: int) -> Issue:
        """Fetch one issue; transport, status and decode errors propagate."""

        url = f"{base_url.rstrip('/')}/{number}"
        logger.debug("Fetching issue", extra={"issue_number": number})
        resp = self._session.get(url, timeout=self._timeout)
        resp.raise_for_status()
        return Issue.from_json(resp.json())

    def patch(self, base_url: str, token: str, number: int, fields: dict[str, Any]) -> None:
        """Edit an issue; only the keys present in `fields` change.

        See https://docs.github.com/en/rest/issues/issues#update-an-issue

        Raises:
            AuthRequired: If `token` is empty. No request is made.
            requests.HTTPError: If GitHub rejects the change.
        """

        if not token:
            raise AuthRequired()

        url = f"{base_url.rstrip('/')}/{number}"
        resp = self._session.patch(
            url,
            json=fields,
            headers={"Content-Type": "application/json", "Authorization": token},
            timeout=self._timeout,
        )
        logger.debug(
            "Issue patch response",
            extra={"issue_number": number, "fields": fields, "status": _status_line(resp)},
        )
        resp.raise_for_status()

    def close(self) -> None:
        self._session.close()


class RepoAgent:
    """Issue operations bound to one query URL, token and fixed parameters.

    Fixed parameters scope every `fetch_issues` call; parameters passed to
    `fetch_issues` override them on conflict.
    """

    def __init__(
        self,
        base_url: str,
        params: dict[str, str] | None = None,
        *,
        token: str = "",
        client: IssueClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._params = dict(params or {})
        self._token = token
        self._client = client or IssueClient()

    @classmethod
    def for_repository(
        cls,
        repository: str,
        *,
        api_url: str = DEFAULT_API_URL,
        token: str = "",
        client: IssueClient | None = None,
    ) -> RepoAgent:
        """Build an agent for the issues of `owner/repo`."""

        repository = repository.strip().strip("/")
        if repository.count("/") != 1:
            raise ValueError(f"Repository must be in the form 'owner/repo': {repository!r}")
        base_url = f"{api_url.rstrip('/')}/repos/{repository}/issues"
        return cls(base_url, token=token, client=client)

    @property
    def base_url(self) -> str:
        return self._base_url

    def add_param(self, key: str, value: str) -> None:
        self._params[key] = value

    def set_token(self, token: str) -> None:
        self._token = token

    def fetch_issues(self, params: dict[str, str] | None = None) -> list[Issue]:
        merged = {**self._params, **(params or {})}
        return self._client.search(self._base_url, merged)

    def get_issue(self, number: int) -> Issue:
        return self._client.get_issue(self._base_url, number)

    def _modify(self, number: int, fields: dict[str, Any]) -> None:
        self._client.patch(self._base_url, self._token, number, fields)
        logger.info("Issue updated", extra={"issue_number": number, "fields": fields})

    def close_issue(self, number: int) -> None:
        self._modify(number, {"state": "closed"})

    def open_issue(self, number: int) -> None:
        self._modify(number, {"state": "open"})

    def assign_issue(self, number: int, user: str) -> None:
        if not user.strip():
            raise ValueError("assignee is required")
        self._modify(number, {"assignees": [user]})

    def unassign_issue(self, number: int) -> None:
        self._modify(number, {"assignees": []})

    def close(self) -> None:
        self._client.close()
