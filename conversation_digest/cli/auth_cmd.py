"""CLI commands for configuring the API URL and the user's token."""

from __future__ import annotations

import logging
from typing import Optional

import click
from rich.console import Console

from conversation_digest.api.config import (
    TOKEN_ENV,
    clear_token,
    load_api_config,
    load_token,
    save_api_config,
    store_token,
)

console = Console()
logger = logging.getLogger(__name__)


@click.command("login")
@click.option("--api-url", default=None, help="Conversation API URL (saved to config)")
@click.option("--token", prompt=True, hide_input=True, help="Bearer token for the current user")
def login(api_url: Optional[str], token: str):
    """Store the API URL and the current user's token.

    The token goes to macOS Keychain. Elsewhere, export
    CONVERSATION_DIGEST_TOKEN instead.
    """
    config = load_api_config()

    if api_url:
        config["api_url"] = api_url
        save_api_config(config)

    if store_token(token):
        console.print("[green]✓[/green] Token stored in Keychain")
    else:
        console.print(f"[yellow]Could not store token.[/yellow] Export {TOKEN_ENV} instead.")

    console.print(f"[dim]API URL: {config['api_url']}[/dim]")


@click.command("logout")
def logout():
    """Remove the stored token."""
    clear_token()
    console.print("[green]✓[/green] Logged out. Stored token removed.")


@click.command("whoami")
def whoami():
    """Show the configured API URL and whether a token is available."""
    config = load_api_config()
    console.print(f"API URL: [bold]{config['api_url']}[/bold]")
    if load_token():
        console.print("[green]✓[/green] Token available")
    else:
        console.print(f"[yellow]✗[/yellow] No token. Run: conversation-digest login, or export {TOKEN_ENV}")
