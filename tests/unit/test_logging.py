from __future__ import annotations

import io
import json
import logging

from issue_bridge.logging import JsonFormatter, configure_logging


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord(
        name="issue_bridge.bot.dispatcher",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Unable to find issue %d",
        args=(7,),
        exc_info=None,
    )
    record.issue_number = 7

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "WARNING"
    assert payload["logger"] == "issue_bridge.bot.dispatcher"
    assert payload["message"] == "Unable to find issue 7"
    assert payload["extra"] == {"issue_number": 7}


def test_configure_logging_replaces_root_handlers() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    stream = io.StringIO()
    try:
        configure_logging("info", stream=stream)
        configure_logging("info", stream=stream)
        logging.getLogger("issue_bridge.test").info("hello", extra={"repo": "o/r"})
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)

    lines = stream.getvalue().splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["extra"] == {"repo": "o/r"}
