"""Typer CLI entry point for reviewguard."""

from __future__ import annotations

import random
import sys
from pathlib import Path

import typer
import uvicorn
from pydantic import ValidationError

from reviewguard import __version__
from reviewguard.config import get_settings
from reviewguard.detector import detect_suspicious_input
from reviewguard.models import MAX_FIELD_LENGTH, ValidationOptions, ValidationResult
from reviewguard.suggestions import generate_password_suggestions
from reviewguard.validators import (
    EmailValidator,
    NameValidator,
    PasswordValidator,
    PhoneValidator,
)

app = typer.Typer(
    name="reviewguard",
    help="reviewguard: validate, sanitize and screen form input.",
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"reviewguard v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None, "--version", "-V", callback=_version_callback, is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """reviewguard CLI."""


def _config(path: Path | None) -> dict:
    try:
        settings = get_settings(config_path=path)
    except ValidationError as exc:
        for err in exc.errors():
            typer.echo(f"Error: {err['msg']}", err=True)
        raise typer.Exit(code=2) from None
    return settings.model_dump(exclude={"api_key"})


def _report(result: ValidationResult, output_json: bool, show_value: bool = True) -> None:
    if output_json:
        payload = result if show_value else result.model_copy(update={"sanitized_value": ""})
        typer.echo(payload.model_dump_json(indent=2))
    else:
        if result.is_valid:
            typer.echo(typer.style("VALID", fg=typer.colors.GREEN, bold=True))
        else:
            typer.echo(typer.style("INVALID", fg=typer.colors.RED, bold=True))
        if show_value and result.sanitized_value:
            typer.echo(f"  Sanitized: {result.sanitized_value}")
        for error in result.errors:
            typer.echo(f"  ✗ {error}")
    if not result.is_valid:
        raise typer.Exit(code=1)


@app.command("check-email")
def check_email(
    value: str = typer.Argument(..., help="Email address to check."),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to YAML config file.",
    ),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output raw JSON."),
) -> None:
    """Validate and sanitize an email address."""
    _report(EmailValidator(_config(config)).validate(value), output_json)


@app.command("check-password")
def check_password(
    value: str | None = typer.Argument(
        None, help="Password to check. Omit to read one line from stdin.",
    ),
    min_length: int | None = typer.Option(None, "--min-length", help="Override minimum length."),
    max_length: int | None = typer.Option(None, "--max-length", help="Override maximum length."),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to YAML config file.",
    ),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output raw JSON."),
) -> None:
    """Check a password against the strength policy. The password is never echoed."""
    if value is None:
        value = sys.stdin.readline().rstrip("\n")
    try:
        options = ValidationOptions(min_length=min_length, max_length=max_length)
    except ValidationError as exc:
        for err in exc.errors():
            typer.echo(f"Error: {err['msg']}", err=True)
        raise typer.Exit(code=2) from None
    result = PasswordValidator(_config(config)).validate(value, options)
    _report(result, output_json, show_value=False)


@app.command("check-name")
def check_name(
    value: str = typer.Argument(..., help="Person name to check."),
    label: str = typer.Option("Name", "--label", help="Field label used in messages."),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to YAML config file.",
    ),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output raw JSON."),
) -> None:
    """Validate and sanitize a person name."""
    _report(NameValidator(_config(config), label=label).validate(value), output_json)


@app.command("check-phone")
def check_phone(
    value: str = typer.Argument(..., help="Phone number to check."),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to YAML config file.",
    ),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output raw JSON."),
) -> None:
    """Validate and sanitize a phone number."""
    _report(PhoneValidator(_config(config)).validate(value), output_json)


@app.command()
def detect(
    text: str | None = typer.Option(None, "--text", "-t", help="Inline text to scan."),
    stdin: bool = typer.Option(False, "--stdin", "-s", help="Read text from stdin."),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output raw JSON."),
) -> None:
    """Scan raw text for injection and traversal signatures."""
    if (text is None) == (not stdin):
        typer.echo("Error: provide exactly one of --text or --stdin", err=True)
        raise typer.Exit(code=2)
    content = text if text is not None else sys.stdin.read()
    if len(content) > MAX_FIELD_LENGTH:
        typer.echo(f"Error: input exceeds {MAX_FIELD_LENGTH:,} characters", err=True)
        raise typer.Exit(code=2)

    report = detect_suspicious_input(content)
    if output_json:
        typer.echo(report.model_dump_json(indent=2))
    elif report.is_suspicious:
        typer.echo(typer.style("SUSPICIOUS", fg=typer.colors.RED, bold=True))
        for reason in report.reasons:
            typer.echo(f"  ✗ {reason}")
    else:
        typer.echo(typer.style("CLEAN", fg=typer.colors.GREEN, bold=True))

    if report.is_suspicious:
        raise typer.Exit(code=1)


@app.command("suggest-passwords")
def suggest_passwords(
    count: int = typer.Option(3, "--count", "-n", min=1, max=50, help="How many to generate."),
    seed: int | None = typer.Option(
        None, "--seed", help="Seed for reproducible output (not for real use).",
    ),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to YAML config file.",
    ),
) -> None:
    """Print strong password suggestions, one per line."""
    rng = random.Random(seed) if seed is not None else None
    policy = PasswordValidator(_config(config))
    for suggestion in generate_password_suggestions(count, rng=rng, validator=policy):
        typer.echo(suggestion)


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Bind address."),
    port: int = typer.Option(8000, "--port", "-p", help="Port number."),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload."),
) -> None:
    """Start the FastAPI server."""
    uvicorn.run(
        "reviewguard.api.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


if __name__ == "__main__":
    app()
