"""Test configuration and fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

_SETTINGS_ENV_VARS = (
    "GHMOD_PASSWORD",
    "GITHUB_API_URL",
    "LOG_LEVEL",
    "ISSUEBOT_REPO",
    "ISSUEBOT_USER",
    "ISSUEBOT_AUTH",
    "ISSUEBOT_LADDR",
    "ISSUEBOT_LPORT",
    "ISSUEBOT_LOG_LEVEL",
    "ISSUEBOT_COMMAND",
    "ISSUEBOT_ALIASES",
)


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run in an empty directory with no settings variables set.

    Keeps a developer's own `.env` or exported tokens out of the tests.
    """
    for name in _SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path

