"""Slash-command dispatcher for the issue bot.

Each webhook delivery carries the full command line in `text` and the
requesting chat handle in `user_name`. The first word picks the handler; the
reply is always a plain-text string, errors included.

All handlers run under the bot's single lock. That serializes alias-table
reads/writes and, conservatively, the GitHub calls as well.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

import requests

from issue_bridge.bot.aliases import AliasConflict, AliasTable
from issue_bridge.github.client import IssueClientError, RepoAgent

logger = logging.getLogger(__name__)

MALFORMED_REQUEST = "Error: malformed request"
NOT_REGISTERED = "You are currently not registered as a github user"

# Failures of a GitHub call that become an in-band reply.
_REMOTE_ERRORS = (IssueClientError, requests.RequestException, ValueError)


@dataclass(frozen=True, slots=True)
class CommandRequest:
    """One parsed slash-command delivery."""

    command: str
    args: list[str]
    user_name: str | None


Handler = Callable[["IssueBot", CommandRequest], str]


@dataclass(frozen=True, slots=True)
class CommandSpec:
    handler: Handler
    usage: str
    summary: str


def _parse_issue_number(value: str) -> int | None:
    if not (value.isascii() and value.isdigit()):
        return None
    number = int(value)
    return number if number > 0 else None


class IssueBot:
    """Maps chat commands onto issue operations for one repository."""

    def __init__(
        self,
        agent: RepoAgent,
        *,
        command: str = "/issue",
        aliases: AliasTable | None = None,
    ) -> None:
        self._agent = agent
        self._command = command
        self._aliases = aliases if aliases is not None else AliasTable()
        self._lock = threading.Lock()

    @property
    def command(self) -> str:
        return self._command

    def usage(self, name: str) -> str:
        return f"usage: {self._command} {COMMANDS[name].usage}"

    def dispatch(self, text: str | None, user_name: str | None) -> str:
        """Handle one command line and return the reply text."""

        if text is None:
            logger.warning("Request is missing the text field")
            return MALFORMED_REQUEST

        words = text.split()
        name = words[0].lower() if words else "help"
        spec = COMMANDS.get(name)
        if spec is None:
            logger.info("Unknown command", extra={"command": name})
            name, spec = "help", COMMANDS["help"]

        request = CommandRequest(command=name, args=words[1:], user_name=user_name)
        logger.debug(
            "Dispatching command",
            extra={"command": name, "command_args": request.args, "user_name": user_name},
        )
        with self._lock:
            return spec.handler(self, request)

    def _require_user(self, request: CommandRequest) -> str | None:
        if not request.user_name:
            logger.warning(
                "Request is missing the user_name field", extra={"command": request.command}
            )
            return None
        return request.user_name

    def _simple_number(self, request: CommandRequest) -> int | None:
        if len(request.args) != 1:
            return None
        return _parse_issue_number(request.args[0])

    # Handlers. Called with the lock held.

    def _help(self, request: CommandRequest) -> str:
        lines = [f"Manage issues with {self._command} COMMAND:"]
        for spec in COMMANDS.values():
            lines.append(f"\t{self._command} {spec.usage} - {spec.summary}")
        return "\n".join(lines)

    def _find(self, request: CommandRequest) -> str:
        number = self._simple_number(request)
        if number is None:
            return self.usage("find")

        try:
            issue = self._agent.get_issue(number)
        except _REMOTE_ERRORS as e:
            logger.warning(
                "Unable to find issue", extra={"issue_number": number, "error": str(e)}
            )
            return f"Unable to find issue {number}"

        msg = f'Issue {number}: "{issue.title}"\n\tURL: {issue.html_url}\n\tState: {issue.state}'
        if issue.assignee is not None:
            assignee = issue.assignee.login
            handle = self._aliases.handle_for(assignee)
            if handle is not None:
                assignee = "@" + handle
            msg += f"\n\tAssigned to: {assignee}"
        return msg

    def _set_state(self, request: CommandRequest, *, reopen: bool) -> str:
        name = "reopen" if reopen else "close"
        number = self._simple_number(request)
        if number is None:
            return self.usage(name)

        verb = "reopened" if reopen else "closed"
        try:
            if reopen:
                self._agent.open_issue(number)
            else:
                self._agent.close_issue(number)
        except _REMOTE_ERRORS as e:
            logger.warning(
                f"Unable to {name} issue", extra={"issue_number": number, "error": str(e)}
            )
            return f"Unable to {name} issue {number}"
        return f"Issue {number} successfully {verb}"

    def _close(self, request: CommandRequest) -> str:
        return self._set_state(request, reopen=False)

    def _reopen(self, request: CommandRequest) -> str:
        return self._set_state(request, reopen=True)

    def _assign(self, request: CommandRequest) -> str:
        if len(request.args) != 2:
            return self.usage("assign")
        number = _parse_issue_number(request.args[0])
        if number is None:
            return self.usage("assign")

        target = request.args[1]
        login = target
        if target == "@me":
            user_name = self._require_user(request)
            if user_name is None:
                return MALFORMED_REQUEST
            target = "@" + user_name
        if target.startswith("@"):
            resolved = self._aliases.login_for(target[1:])
            if resolved is None:
                return f'"{target}" is not registered'
            login = resolved

        try:
            self._agent.assign_issue(number, login)
        except _REMOTE_ERRORS as e:
            logger.warning(
                "Unable to assign issue",
                extra={"issue_number": number, "login": login, "error": str(e)},
            )
            return f'Unable to assign issue {number} to "{target}"'
        return f"Issue {number} is now assigned to {target}"

    def _unassign(self, request: CommandRequest) -> str:
        number = self._simple_number(request)
        if number is None:
            return self.usage("unassign")

        try:
            self._agent.unassign_issue(number)
        except _REMOTE_ERRORS as e:
            logger.warning(
                "Unable to unassign issue", extra={"issue_number": number, "error": str(e)}
            )
            return f"Unable to unassign issue {number}"
        return f"Issue {number} is no longer assigned to anyone"

    def _register(self, request: CommandRequest) -> str:
        if len(request.args) != 1:
            return self.usage("register")
        user_name = self._require_user(request)
        if user_name is None:
            return MALFORMED_REQUEST

        login = request.args[0]
        try:
            self._aliases.add(user_name, login)
        except AliasConflict as e:
            logger.info(
                "Alias registration rejected",
                extra={"chat_handle": user_name, "login": login, "reason": str(e)},
            )
            return f"Registration conflict: {e}"
        logger.info("Alias registered", extra={"chat_handle": user_name, "login": login})
        return f'You are now registered as github user "{login}"'

    def _get_alias(self, request: CommandRequest) -> str:
        user_name = self._require_user(request)
        if user_name is None:
            return MALFORMED_REQUEST

        login = self._aliases.login_for(user_name)
        if login is None:
            return NOT_REGISTERED
        return f'You are currently registered as github user "{login}"'

    def _unregister(self, request: CommandRequest) -> str:
        user_name = self._require_user(request)
        if user_name is None:
            return MALFORMED_REQUEST

        login = self._aliases.remove(user_name)
        if login is None:
            return NOT_REGISTERED
        logger.info("Alias removed", extra={"chat_handle": user_name, "login": login})
        return f'You are no longer registered as github user "{login}"'


COMMANDS: dict[str, CommandSpec] = {
    "help": CommandSpec(IssueBot._help, "help", "show this message"),
    "find": CommandSpec(IssueBot._find, "find NUMBER", "show an issue"),
    "close": CommandSpec(IssueBot._close, "close NUMBER", "close an issue"),
    "reopen": CommandSpec(IssueBot._reopen, "reopen NUMBER", "reopen a closed issue"),
    "assign": CommandSpec(
        IssueBot._assign,
        "assign NUMBER [@CHATNAME|@me|GITHUBNAME]",
        "assign an issue",
    ),
    "unassign": CommandSpec(IssueBot._unassign, "unassign NUMBER", "remove all assignees"),
    "register": CommandSpec(
        IssueBot._register, "register GITHUBNAME", "link your chat name to a github user"
    ),
    "get-alias": CommandSpec(
        IssueBot._get_alias, "get-alias", "show the github user you are registered as"
    ),
    "unregister": CommandSpec(
        IssueBot._unregister, "unregister", "remove your github user registration"
    ),
}
