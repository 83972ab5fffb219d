"""FastAPI app factory for the slash-command webhook.

The chat platform POSTs a form with `text` and `user_name`; the bot always
answers 200 with a plain-text body, errors included.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import FormData

from issue_bridge import __version__
from issue_bridge.bot.dispatcher import IssueBot


def _single_field(form: FormData, name: str) -> str | None:
    """Return a form field that appears exactly once as text, else None."""

    values = form.getlist(name)
    if len(values) != 1 or not isinstance(values[0], str):
        return None
    return values[0]


def create_app(bot: IssueBot) -> FastAPI:
    app = FastAPI(
        title="GitHub Issue Bot",
        version=__version__,
        description="Slash-command webhook that manages GitHub issues.",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.bot = bot

    @app.get("/health", response_class=PlainTextResponse)
    def health() -> str:
        return "ok"

    @app.post("/", response_class=PlainTextResponse)
    async def slash_command(request: Request) -> str:
        form = await request.form()
        text = _single_field(form, "text")
        user_name = _single_field(form, "user_name")
        issue_bot: IssueBot = request.app.state.bot

        # Dispatch blocks on the bot lock and on GitHub; keep it off the event loop.
        return await run_in_threadpool(issue_bot.dispatch, text, user_name)

    return app