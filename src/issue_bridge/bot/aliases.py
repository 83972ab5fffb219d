"""Chat handle <-> GitHub login alias table.

The forward and reverse maps are always exact inverses: an alias exists in
both directions or in neither. The table does no locking of its own; the bot
serializes access to it.
"""

from __future__ import annotations

from dataclasses import dataclass


# Not frozen: re-raising through a context manager assigns __traceback__.
@dataclass
class AliasConflict(Exception):
    """Raised when registering a mapping whose chat handle or login is taken."""

    chat_handle: str
    login: str
    existing_login: str | None = None
    existing_handle: str | None = None

    def __str__(self) -> str:
        if self.existing_login is not None:
            return f"@{self.chat_handle} is already registered as github user {self.existing_login!r}"
        return f"github user {self.login!r} is already registered to @{self.existing_handle}"


class AliasTable:
    def __init__(self) -> None:
        self._chat_to_login: dict[str, str] = {}
        self._login_to_chat: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._chat_to_login)

    def add(self, chat_handle: str, login: str) -> None:
        """Map `chat_handle` to `login` and back.

        Raises:
            AliasConflict: If either side already has a mapping. Nothing changes.
            ValueError: If either name is empty.
        """

        if not chat_handle or not login:
            raise ValueError("chat handle and login are both required")

        existing_login = self._chat_to_login.get(chat_handle)
        existing_handle = self._login_to_chat.get(login)
        if existing_login is not None or existing_handle is not None:
            raise AliasConflict(
                chat_handle=chat_handle,
                login=login,
                existing_login=existing_login,
                existing_handle=existing_handle,
            )

        self._chat_to_login[chat_handle] = login
        self._login_to_chat[login] = chat_handle

    def remove(self, chat_handle: str) -> str | None:
        """Drop the mapping for `chat_handle`; return the login it pointed at."""

        login = self._chat_to_login.pop(chat_handle, None)
        if login is not None:
            del self._login_to_chat[login]
        return login

    def login_for(self, chat_handle: str) -> str | None:
        return self._chat_to_login.get(chat_handle)

    def handle_for(self, login: str) -> str | None:
        return self._login_to_chat.get(login)

    def items(self) -> list[tuple[str, str]]:
        """Return (chat handle, login) pairs."""

        return list(self._chat_to_login.items())


def parse_alias_spec(value: str) -> list[tuple[str, str]]:
    """Parse `handle=login,handle2=login2` into pairs.

    A leading `@` on the handle is accepted and dropped.
    """

    pairs: list[tuple[str, str]] = []
    for part in value.split(","):
        part = part.strip()
        if not part:
            continue
        handle, sep, login = part.partition("=")
        handle = handle.strip().lstrip("@")
        login = login.strip()
        if not sep or not handle or not login:
            raise ValueError(f"Invalid alias entry {part!r}; expected handle=login")
        pairs.append((handle, login))
    return pairs


def load_alias_table(value: str) -> AliasTable:
    """Build a table from a `handle=login,...` list.

    Raises:
        ValueError: If an entry is malformed.
        AliasConflict: If a handle or login appears twice.
    """

    table = AliasTable()
    for handle, login in parse_alias_spec(value):
        table.add(handle, login)
    return table
