"""Configuration for the command-line tools.

Values are loaded from environment variables and a local `.env` file (if
present). Command-line flags take precedence over anything loaded here.
"""

from __future__ import annotations

import base64

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_REPOSITORY = "ctelfer-docker/slkiss"
DEFAULT_USER = "ctelfer-docker"


class ToolSettings(BaseSettings):
    """Settings shared by `ghmod` and `ghfetch`.

    Environment variables:
    - GHMOD_PASSWORD    (optional; password/token when `--auth` is not given)
    - GITHUB_API_URL    (optional)
    - LOG_LEVEL         (optional)

    Notes:
        Tests can point at a specific env file via `ToolSettings(_env_file=path)`.
    """

    password: str = Field(
        default="",
        validation_alias="GHMOD_PASSWORD",
        description="GitHub password or token used when --auth is not given",
    )
    github_api_url: str = Field(
        default=DEFAULT_API_URL,
        validation_alias="GITHUB_API_URL",
        description="GitHub API root (useful for GitHub Enterprise)",
    )
    log_level: str = Field(
        default="WARNING",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )


def encode_basic_auth(user: str, password: str) -> str:
    """Return an HTTP Basic `Authorization` header value for user/password."""

    raw = f"{user}:{password}".encode()
    return "Basic " + base64.b64encode(raw).decode("ascii")
