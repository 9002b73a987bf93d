"""Flask CLI commands for provisioning JWT signing secrets."""

from __future__ import annotations

import base64
import secrets

import click

from tokenauth.security.signer import MIN_KEY_BYTES


def _new_secret(num_bytes: int) -> str:
    return base64.b64encode(secrets.token_bytes(num_bytes)).decode("ascii")


@click.group("keys")
def keys_cli() -> None:
    """Signing key helpers."""


@keys_cli.command("generate")
@click.option(
    "--bytes",
    "num_bytes",
    type=click.IntRange(min=MIN_KEY_BYTES),
    default=MIN_KEY_BYTES,
    show_default=True,
    help="Raw key length of each secret.",
)
def generate(num_bytes: int) -> None:
    """Print fresh base64 secrets for JWT_ACCESS_SECRET and JWT_REFRESH_SECRET."""
    access = _new_secret(num_bytes)
    refresh = _new_secret(num_bytes)
    while refresh == access:  # pragma: no cover - astronomically unlikely
        refresh = _new_secret(num_bytes)
    click.echo(f"JWT_ACCESS_SECRET={access}")
    click.echo(f"JWT_REFRESH_SECRET={refresh}")

