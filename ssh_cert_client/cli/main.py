"""Main CLI entry point for get_cert."""

import logging
from typing import Optional

import typer
from rich.console import Console

from ssh_cert_client.cli.commands.get import get_command
from ssh_cert_client.client import VERSION

app = typer.Typer(
    name="get_cert",
    help="Fetch a signed SSH certificate and load its key into ssh-agent",
    add_completion=False,
)
console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"get_cert v.{VERSION}")
        raise typer.Exit()


@app.command()
def get(
    request_id: Optional[str] = typer.Argument(
        None, metavar="CERT_REQUEST_ID", help="Certificate request ID"
    ),
    environment: str = typer.Option(
        None, "-e", "--environment", help="The environment you want (e.g. prod)"
    ),
    json_flag: bool = typer.Option(False, "--json", help="Output as JSON"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Print the version and exit",
    ),
) -> None:
    """Fetch a certificate by request ID and add the matching key to ssh-agent."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    get_command(request_id, environment, json_flag)


def main() -> None:
    """Entry point. Ctrl-C is reported by click as "Aborted!" with exit 1."""
    app()
