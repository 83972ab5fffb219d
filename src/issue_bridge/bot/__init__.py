"""Slash-command issue bot: alias table and command dispatch."""

from __future__ import annotations

__all__ = ["AliasConflict", "AliasTable", "IssueBot"]

from issue_bridge.bot.aliases import AliasConflict, AliasTable
from issue_bridge.bot.dispatcher import IssueBot
