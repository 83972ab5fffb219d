"""Command-line tools: `ghmod` (edit one issue) and `ghfetch` (read issues)."""

from __future__ import annotations

import argparse
import sys
from typing import NoReturn


class ArgumentParser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on usage errors."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid issue number: {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"issue number must be positive: {value!r}")
    return number
