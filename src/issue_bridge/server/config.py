"""Configuration for the issue bot daemon.

Every setting can come from an `ISSUEBOT_*` environment variable (or `.env`)
and be overridden on the command line. Repository, user and auth are checked
in `issue_bridge.server.main` after flags are merged, so the settings object
itself never fails for missing credentials.
"""

from __future__ import annotations

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from issue_bridge.bot.aliases import AliasConflict, AliasTable, load_alias_table
from issue_bridge.config import DEFAULT_API_URL


class BotSettings(BaseSettings):
    """Settings for the slash-command webhook listener."""

    repository: str = Field(
        default="",
        validation_alias="ISSUEBOT_REPO",
        description="Repository to manage, in the form 'owner/repo'",
    )
    user: str = Field(
        default="",
        validation_alias="ISSUEBOT_USER",
        description="GitHub user the bot operates as",
    )
    auth: str = Field(
        default="",
        validation_alias="ISSUEBOT_AUTH",
        description="GitHub password or token for the bot user",
    )
    listen_address: str = Field(
        default="",
        validation_alias="ISSUEBOT_LADDR",
        description="Address to listen on (empty means all interfaces)",
    )
    listen_port: int = Field(
        default=80,
        validation_alias="ISSUEBOT_LPORT",
        ge=0,
        le=65535,
        description="Port to listen on",
    )
    log_level: str = Field(
        default="INFO",
        validation_alias="ISSUEBOT_LOG_LEVEL",
        description="Root logging level",
    )

    command: str = Field(
        default="/issue",
        validation_alias="ISSUEBOT_COMMAND",
        description="Slash command name shown in usage and help replies",
    )
    aliases: str = Field(
        default="",
        validation_alias="ISSUEBOT_ALIASES",
        description="Comma-separated handle=login pairs registered at startup",
    )

    github_api_url: str = Field(
        default=DEFAULT_API_URL,
        validation_alias="GITHUB_API_URL",
        description="GitHub API root (useful for GitHub Enterprise)",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @field_validator("aliases")
    @classmethod
    def _check_aliases(cls, value: str) -> str:
        try:
            load_alias_table(value)
        except AliasConflict as e:
            raise ValueError(f"Conflicting alias entries: {e}") from e
        return value

    def alias_table(self) -> AliasTable:
        return load_alias_table(self.aliases)

    @property
    def bind_host(self) -> str:
        return self.listen_address.strip() or "0.0.0.0"
