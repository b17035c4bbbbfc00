"""Operator command line for snyk-app-auth."""

from __future__ import annotations

import secrets
import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from snyk_app_auth.auth import OAuth2Engine, StrategyAssembler
from snyk_app_auth.config import Settings
from snyk_app_auth.crypto import TokenCipher
from snyk_app_auth.errors import AuthFlowError, DecryptionError
from snyk_app_auth.storage import JsonCredentialStore, decrypt_record_tokens

app = typer.Typer(help="Manage App authorization and stored installs.")
console = Console()

cli_options: dict = {}


def configure_logging(debug: bool) -> None:
    logger.remove()  # Remove default handler
    logger.add(
        sys.stderr,
        level="DEBUG" if debug else "INFO",
        format="{time:YYYY-MM-DD HH:mm:ss} {level} {name}: {message}",
    )


def load_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as exc:
        missing = ", ".join(
            str(err["loc"][0]).upper() for err in exc.errors() if err.get("loc")
        )
        typer.echo(f"Configuration error: missing or invalid {missing}", err=True)
        raise typer.Exit(code=2)


def get_store(settings: Settings) -> JsonCredentialStore:
    db_path: Optional[Path] = cli_options.get("db")
    if db_path is None and settings.data_dir is not None:
        db_path = settings.data_dir / "db.json"
    return JsonCredentialStore(db_path)


@app.callback()
def main(
    db: Optional[Path] = typer.Option(
        None, "--db", help="Path of the install database (JSON)"
    ),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
):
    configure_logging(debug)
    cli_options.clear()
    cli_options["db"] = db


@app.command()
def authorize_url():
    """Print an authorization URL for a new install attempt."""
    settings = load_settings()
    assembler = StrategyAssembler(settings.to_configuration(), get_store(settings))
    request = OAuth2Engine(assembler.build()).authorization_request()
    typer.echo(request.url)


@app.command()
def installs():
    """List stored installs. Tokens are never shown."""
    settings = load_settings()
    try:
        records = get_store(settings).all()
    except AuthFlowError as exc:
        typer.echo(f"Error reading installs: {exc}", err=True)
        raise typer.Exit(code=1)

    if not records:
        typer.echo("No installs stored.")
        return

    table = Table(title="Installs")
    table.add_column("Date")
    table.add_column("User")
    table.add_column("Org")
    table.add_column("Scope")
    table.add_column("Expires in", justify="right")
    for record in records:
        table.add_row(
            record.date.isoformat(timespec="seconds"),
            record.userId or "-",
            record.orgId,
            record.scope,
            str(record.expires_in),
        )
    console.print(table)


@app.command()
def check_key():
    """Check that the configured secret decrypts the latest install."""
    settings = load_settings()
    try:
        record = get_store(settings).latest()
    except AuthFlowError as exc:
        typer.echo(f"Error reading installs: {exc}", err=True)
        raise typer.Exit(code=1)
    if record is None:
        typer.echo("No installs stored.")
        return

    cipher = TokenCipher(settings.encryption_secret.get_secret_value())
    try:
        decrypt_record_tokens(record, cipher)
    except DecryptionError:
        typer.echo(f"Encryption secret does not match the install for org {record.orgId}.")
        raise typer.Exit(code=1)
    typer.echo(f"Encryption secret OK for the install for org {record.orgId}.")


@app.command()
def generate_secret():
    """Print a new random encryption secret."""
    typer.echo(secrets.token_urlsafe(32))


if __name__ == "__main__":
    app()
