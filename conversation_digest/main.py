"""Conversation Digest CLI — summarise your latest conversations."""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from conversation_digest.cli.auth_cmd import login, logout, whoami
from conversation_digest.cli.summaries_cmd import summaries


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose):
    """Conversation Digest — latest conversations, most recent first."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


cli.add_command(summaries)
cli.add_command(login)
cli.add_command(logout)
cli.add_command(whoami)


if __name__ == "__main__":
    cli()
