"""CLI command that prints the recent conversation summaries."""

from __future__ import annotations

import json
import logging
import sys
from typing import List, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from conversation_digest.api.config import load_api_config
from conversation_digest.api.errors import FetchError
from conversation_digest.api.session import ApiSession
from conversation_digest.models import ConversationSummary
from conversation_digest.summaries import (
    ON_ERROR_ABORT,
    ON_ERROR_SKIP,
    get_recent_conversation_summaries,
)

console = Console()
logger = logging.getLogger(__name__)


def _render_table(summaries: List[ConversationSummary]) -> Table:
    table = Table(title="Recent conversations", show_lines=False)
    table.add_column("Conversation", style="cyan", no_wrap=True)
    table.add_column("Latest message")
    table.add_column("From", style="magenta", no_wrap=True)
    table.add_column("Avatar", style="dim")
    table.add_column("Sent at", style="green", no_wrap=True)

    for summary in summaries:
        msg = summary.latest_message
        table.add_row(
            escape(summary.id),
            escape(msg.body[:80]),
            escape(msg.from_user.id),
            escape(msg.from_user.avatar_url or "-"),
            summary.created.strftime("%Y-%m-%d %H:%M"),
        )
    return table


@click.command("summaries")
@click.option("--api-url", default=None, help="Override the configured API URL")
@click.option("--token", default=None, help="Bearer token for the current user")
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON instead of a table")
@click.option("--skip-failed", is_flag=True,
              help="Leave out conversations whose messages can't be fetched instead of failing")
@click.option("--parallel", type=click.IntRange(min=1), default=None, help="Max concurrent requests")
@click.option("--timeout", type=float, default=None, help="Request timeout in seconds")
@click.option("--resolve-missing-users", is_flag=True,
              help="Look up senders missing from /users individually")
def summaries(
    api_url: Optional[str],
    token: Optional[str],
    as_json: bool,
    skip_failed: bool,
    parallel: Optional[int],
    timeout: Optional[float],
    resolve_missing_users: bool,
):
    """Show the current user's conversations, most recent first.

    \b
    Examples:
        conversation-digest summaries
        conversation-digest summaries --json --skip-failed
        conversation-digest summaries --api-url http://localhost:8000/api
    """
    config = load_api_config()
    if api_url:
        config["api_url"] = api_url
    if timeout is not None:
        config["timeout"] = timeout
    if parallel is not None:
        config["max_workers"] = parallel

    policy = ON_ERROR_SKIP if skip_failed else ON_ERROR_ABORT

    try:
        with ApiSession.from_config(config, token=token) as session:
            if not session.is_authenticated:
                logger.debug("No token configured, calling %s anonymously", session.api_url)
            result = get_recent_conversation_summaries(
                session,
                on_message_error=policy,
                resolve_missing_users=resolve_missing_users,
            )
    except FetchError as exc:
        console.print("[red]Fetch failed:[/red]", escape(str(exc)))
        sys.exit(1)

    if as_json:
        click.echo(json.dumps([s.to_dict() for s in result], indent=2))
        return

    if not result:
        console.print("[yellow]No conversations with messages found.[/yellow]")
        return

    console.print(_render_table(result))
