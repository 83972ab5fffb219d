"""`issuebot` entry point: run the slash-command webhook listener."""

from __future__ import annotations

import argparse
import logging
import sys

import uvicorn
from pydantic import ValidationError

from issue_bridge import __version__
from issue_bridge.bot.aliases import AliasConflict
from issue_bridge.bot.dispatcher import IssueBot
from issue_bridge.cli import ArgumentParser
from issue_bridge.config import encode_basic_auth
from issue_bridge.github.client import RepoAgent
from issue_bridge.logging import configure_logging
from issue_bridge.server.app import create_app
from issue_bridge.server.config import BotSettings

logger = logging.getLogger(__name__)

_ENV_HELP = """\
Repository, user and auth are all required. They can also be set through
environment variables:
  ISSUEBOT_REPO       repository (owner/repo)
  ISSUEBOT_USER       github user
  ISSUEBOT_AUTH       github authentication password or token
  ISSUEBOT_LADDR      local address
  ISSUEBOT_LPORT      local port
  ISSUEBOT_LOG_LEVEL  log level
  ISSUEBOT_COMMAND    slash command name used in replies
  ISSUEBOT_ALIASES    handle=login,... registered at startup
"""


def build_parser() -> argparse.ArgumentParser:
    parser = ArgumentParser(
        prog="issuebot",
        description="Manage GitHub issues with chat slash commands",
        epilog=_ENV_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"issuebot {__version__}")
    parser.add_argument("-r", "--repo", default=None, help="Repository to manage (owner/repo)")
    parser.add_argument("-u", "--user", default=None, help="GitHub user for the bot to operate as")
    parser.add_argument("-a", "--auth", default=None, help="Authentication token")
    parser.add_argument("-l", "--address", default=None, help="Address to listen on")
    parser.add_argument("-p", "--port", type=int, default=None, help="Port to listen on")
    parser.add_argument("--log-level", default=None, help="Logging level (default INFO)")
    return parser


def load_settings(args: argparse.Namespace) -> BotSettings:
    """Merge command-line flags over environment settings."""

    overrides = {
        "repository": args.repo,
        "user": args.user,
        "auth": args.auth,
        "listen_address": args.address,
        "listen_port": args.port,
        "log_level": args.log_level,
    }
    # Keyword arguments take priority over environment and .env values.
    return BotSettings(**{key: value for key, value in overrides.items() if value is not None})


def build_bot(settings: BotSettings) -> IssueBot:
    agent = RepoAgent.for_repository(
        settings.repository,
        api_url=settings.github_api_url,
        token=encode_basic_auth(settings.user, settings.auth),
    )
    return IssueBot(agent, command=settings.command, aliases=settings.alias_table())


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args)
    except ValidationError as e:
        print("Configuration error:", file=sys.stderr)
        print(e, file=sys.stderr)
        return 1

    if not (settings.repository and settings.user and settings.auth):
        parser.print_usage(sys.stderr)
        print(_ENV_HELP, file=sys.stderr)
        return 1

    configure_logging(settings.log_level)

    try:
        bot = build_bot(settings)
    except (ValueError, AliasConflict) as e:
        logger.error("Invalid bot configuration", extra={"error": str(e)})
        return 1

    logger.info(
        "Starting bot",
        extra={
            "repo": settings.repository,
            "address": settings.bind_host,
            "port": settings.listen_port,
        },
    )
    # uvicorn logs a bind failure and exits the process itself.
    uvicorn.run(
        create_app(bot),
        host=settings.bind_host,
        port=settings.listen_port,
        log_config=None,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
