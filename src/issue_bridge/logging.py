"""JSON logging for the CLI tools and the issue bot.

Every log line is one JSON object on stderr. Call sites attach context with
``extra=``, and the formatter nests it under ``"extra"``. The keys used across
the package are:

- ``repo`` and ``issue_number`` for the issue being read or changed
- ``command``, ``command_args`` and ``user_name`` for bot requests
- ``chat_handle`` and ``login`` for alias registration
- ``url``, ``pages`` and ``max_pages`` for search pagination

stdout is left to the tools' own output (``ghfetch`` reports, ``ghmod``
success lines), so logging can stay on while piping results.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any, TextIO

# Attributes every LogRecord carries; anything else came in through extra=.
# "message" and "asctime" are only set once a formatter has run.
_STANDARD_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Format a record as ``{"timestamp", "level", "logger", "message"}``.

    ``"extra"`` and ``"exception"`` keys are added only when present. Values
    that are not JSON types (paths, datetimes) are rendered with ``str``.
    """

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (record)
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_")
        }
        if extra:
            payload["extra"] = extra

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: str, *, stream: TextIO | None = None) -> None:
    """Install a single JSON handler on the root logger.

    ``level`` is a standard level name in any case (``"info"``, ``"DEBUG"``).
    The entry points call this once after settings load. Calling it again
    replaces the handler rather than adding a second one. uvicorn's loggers
    propagate to the root logger, so the bot's access and error lines come
    out as JSON too.
    """

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream=stream or sys.stderr)
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
    root.setLevel(level.upper())

    # requests logs every connection through urllib3 at DEBUG.
    logging.getLogger("urllib3").setLevel(max(root.level, logging.INFO))
