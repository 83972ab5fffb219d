"""FastAPI webhook adapter for the issue bot.

Design intent:
- Keep command semantics in `issue_bridge.bot`
- Keep HTTP concerns (form decoding, listener startup) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from issue_bridge.server.app import create_app
