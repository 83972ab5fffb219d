"""Unit tests for the GitHub issue client (HTTP mocked)."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any
from unittest.mock import Mock

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from issue_bridge.github.client import (
    AuthRequired,
    Issue,
    IssueClient,
    RepoAgent,
    SearchFailed,
)

BASE = "https://api.github.com/repos/octo-org/octo-repo/issues"


def _issue_json(number: int, **overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "number": number,
        "id": 1000 + number,
        "title": f"Issue {number}",
        "html_url": f"https://github.com/octo-org/octo-repo/issues/{number}",
        "state": "open",
        "user": {"login": "reporter", "id": 7, "html_url": "https://github.com/reporter"},
        "assignee": None,
        "assignees": [],
        "body": "",
        "labels": [],
        "locked": False,
        "created_at": "2025-01-01T00:00:00Z",
        "updated_at": "2025-01-02T00:00:00Z",
        "closed_at": None,
    }
    data.update(overrides)
    return data


def _response(
    *,
    status: int = 200,
    reason: str = "OK",
    payload: object = None,
    link: str | None = None,
    url: str = BASE,
) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.reason = reason
    resp.url = url
    resp.headers = CaseInsensitiveDict({"Link": link} if link else {})
    resp._content = json.dumps(payload).encode()
    resp.encoding = "utf-8"
    return resp


def _next(url: str) -> str:
    return f'<{url}>; rel="next", <{BASE}?page=9>; rel="last"'


@pytest.fixture
def session() -> Mock:
    mock_session = Mock(spec=requests.Session)
    mock_session.headers = {}
    return mock_session


def test_client_sets_github_headers(session: Mock) -> None:
    IssueClient(session=session)

    assert session.headers["Accept"] == "application/vnd.github+json"
    assert "User-Agent" in session.headers


def test_search_single_page_passes_query_params(session: Mock) -> None:
    session.get.return_value = _response(payload=[_issue_json(1), _issue_json(2)])
    client = IssueClient(session=session)

    issues = client.search(BASE, {"state": "closed", "labels": "bug,help wanted"})

    assert [i.number for i in issues] == [1, 2]
    session.get.assert_called_once_with(
        BASE, params={"state": "closed", "labels": "bug,help wanted"}, timeout=30.0
    )


def test_search_follows_next_links_in_order(session: Mock) -> None:
    page2 = f"{BASE}?page=2"
    page3 = f"{BASE}?page=3"
    session.get.side_effect = [
        _response(payload=[_issue_json(1), _issue_json(2)], link=_next(page2)),
        _response(payload=[_issue_json(3)], link=_next(page3), url=page2),
        _response(payload=[_issue_json(4), _issue_json(5)], url=page3),
    ]
    client = IssueClient(session=session)

    issues = client.search(BASE, {"per_page": "2"})

    assert [i.number for i in issues] == [1, 2, 3, 4, 5]
    urls = [c.args[0] for c in session.get.call_args_list]
    assert urls == [BASE, page2, page3]
    # Continuation links already carry the query.
    assert "params" not in session.get.call_args_list[1].kwargs


def test_search_non_200_raises_search_failed(session: Mock) -> None:
    session.get.return_value = _response(status=404, reason="Not Found", payload={})
    client = IssueClient(session=session)

    with pytest.raises(SearchFailed) as excinfo:
        client.search(BASE, {})

    assert excinfo.value.status == "404 Not Found"
    assert "404 Not Found" in str(excinfo.value)


def test_search_failure_on_later_page_raises(session: Mock) -> None:
    page2 = f"{BASE}?page=2"
    session.get.side_effect = [
        _response(payload=[_issue_json(1)], link=_next(page2)),
        _response(status=502, reason="Bad Gateway", payload=None, url=page2),
    ]
    client = IssueClient(session=session)

    with pytest.raises(SearchFailed):
        client.search(BASE, {})


def test_search_stops_on_cyclic_links(session: Mock) -> None:
    first = f"{BASE}?page=1"
    page2 = f"{BASE}?page=2"
    session.get.side_effect = [
        _response(payload=[_issue_json(1)], link=_next(page2), url=first),
        _response(payload=[_issue_json(2)], link=_next(first), url=page2),
    ]
    client = IssueClient(session=session)

    issues = client.search(BASE, {"page": "1"})

    assert [i.number for i in issues] == [1, 2]
    assert session.get.call_count == 2


def test_search_stops_at_max_pages(session: Mock) -> None:
    def endless(url: str, **_kwargs: object) -> requests.Response:
        page = int(url.rsplit("=", 1)[1]) if "page=" in url else 1
        return _response(
            payload=[_issue_json(page)],
            link=_next(f"{BASE}?page={page + 1}"),
            url=f"{BASE}?page={page}",
        )

    session.get.side_effect = endless
    client = IssueClient(session=session, max_pages=3)

    issues = client.search(BASE, {})

    assert [i.number for i in issues] == [1, 2, 3]
    assert session.get.call_count == 3


def test_client_rejects_non_positive_page_bound(session: Mock) -> None:
    with pytest.raises(ValueError):
        IssueClient(session=session, max_pages=0)


@pytest.mark.parametrize(
    "header",
    [
        f"<{BASE}?page=2>; rel=next",
        f'<{BASE}?page=1>; rel="prev", <{BASE}?page=2>; rel="next", <{BASE}?page=7>; rel="last"',
    ],
)
def test_search_reads_next_link_forms(session: Mock, header: str) -> None:
    page2 = f"{BASE}?page=2"
    session.get.side_effect = [
        _response(payload=[_issue_json(1)], link=header),
        _response(payload=[_issue_json(2)], link=f'<{BASE}?page=1>; rel="prev"', url=page2),
    ]
    client = IssueClient(session=session)

    issues = client.search(BASE, {})

    assert [i.number for i in issues] == [1, 2]
    assert session.get.call_args_list[1].args == (page2,)


def test_get_issue_decodes_fields(session: Mock) -> None:
    session.get.return_value = _response(
        payload=_issue_json(
            42,
            state="closed",
            assignee={"login": "octocat", "id": 3},
            assignees=[{"login": "octocat", "id": 3}],
            labels=[{"name": "bug", "url": "https://api.github.com/labels/bug"}],
            locked=True,
            closed_at="2025-01-03T12:30:00Z",
        )
    )
    client = IssueClient(session=session)

    issue = client.get_issue(BASE, 42)

    session.get.assert_called_once_with(f"{BASE}/42", timeout=30.0)
    assert issue.number == 42
    assert issue.state == "closed"
    assert issue.assignee is not None and issue.assignee.login == "octocat"
    assert [u.login for u in issue.assignees] == ["octocat"]
    assert [label.name for label in issue.labels] == ["bug"]
    assert issue.locked is True
    assert issue.user is not None and issue.user.id == 7
    assert issue.created_at == datetime(2025, 1, 1, tzinfo=UTC)
    assert issue.closed_at == datetime(2025, 1, 3, 12, 30, tzinfo=UTC)


def test_get_issue_http_error_propagates(session: Mock) -> None:
    session.get.return_value = _response(status=404, reason="Not Found", payload={})
    client = IssueClient(session=session)

    with pytest.raises(requests.HTTPError):
        client.get_issue(BASE, 9999)


def test_get_issue_transport_error_propagates(session: Mock) -> None:
    session.get.side_effect = requests.ConnectionError("dns failure")
    client = IssueClient(session=session)

    with pytest.raises(requests.ConnectionError):
        client.get_issue(BASE, 1)


def test_issue_from_json_rejects_non_issue_payload() -> None:
    with pytest.raises(ValueError):
        Issue.from_json({"message": "Not Found"})
    with pytest.raises(ValueError):
        Issue.from_json([])


def test_patch_without_token_makes_no_request(session: Mock) -> None:
    client = IssueClient(session=session)

    with pytest.raises(AuthRequired):
        client.patch(BASE, "", 3, {"state": "closed"})

    session.patch.assert_not_called()


def test_patch_sends_json_and_verbatim_authorization(session: Mock) -> None:
    session.patch.return_value = _response(payload={})
    client = IssueClient(session=session)

    client.patch(BASE, "Basic dXNlcjpwdw==", 3, {"assignees": []})

    session.patch.assert_called_once_with(
        f"{BASE}/3",
        json={"assignees": []},
        headers={"Content-Type": "application/json", "Authorization": "Basic dXNlcjpwdw=="},
        timeout=30.0,
    )


def test_patch_http_error_propagates_without_retry(session: Mock) -> None:
    session.patch.return_value = _response(status=404, reason="Not Found", payload={})
    client = IssueClient(session=session)

    with pytest.raises(requests.HTTPError):
        client.patch(BASE, "token", 3, {"state": "open"})

    assert session.patch.call_count == 1


def test_repo_agent_builds_repository_issue_url() -> None:
    agent = RepoAgent.for_repository(
        "octo-org/octo-repo", api_url="https://github.example.com/api/v3/"
    )

    assert agent.base_url == "https://github.example.com/api/v3/repos/octo-org/octo-repo/issues"


@pytest.mark.parametrize("repository", ["", "octo-repo", "a/b/c"])
def test_repo_agent_rejects_malformed_repository(repository: str) -> None:
    with pytest.raises(ValueError):
        RepoAgent.for_repository(repository)


def test_repo_agent_fetch_merges_fixed_params() -> None:
    client = Mock(spec=IssueClient)
    client.search.return_value = []
    agent = RepoAgent(BASE, {"state": "open", "per_page": "100"}, client=client)
    agent.add_param("labels", "bug")

    agent.fetch_issues({"state": "closed"})

    client.search.assert_called_once_with(
        BASE, {"state": "closed", "per_page": "100", "labels": "bug"}
    )


@pytest.mark.parametrize(
    ("call", "fields"),
    [
        (lambda a: a.close_issue(5), {"state": "closed"}),
        (lambda a: a.open_issue(5), {"state": "open"}),
        (lambda a: a.assign_issue(5, "octocat"), {"assignees": ["octocat"]}),
        (lambda a: a.unassign_issue(5), {"assignees": []}),
    ],
)
def test_repo_agent_mutations_patch_expected_fields(call, fields: dict[str, object]) -> None:
    client = Mock(spec=IssueClient)
    agent = RepoAgent(BASE, client=client)
    agent.set_token("Basic abc")

    call(agent)

    client.patch.assert_called_once_with(BASE, "Basic abc", 5, fields)
