"""
Command-line interface for WelcomeSign SDK.

All commands use the persistent client, so tokens obtained by `login` or
`register-device` are reused by later invocations (stored at
WELCOMESIGN_TOKEN_CACHE_PATH).

Available commands:
- login: Log in and store the tokens
- logout: Revoke the session and drop the user tokens
- whoami: Show the current user profile
- tokens: Show which tokens are stored
- clear-tokens: Remove all stored tokens
- pairing-code: Generate a pairing code for a device identifier
- register-device: Pair a device with a property
- device-info: Show the paired device's info
- heartbeat: Send one device heartbeat
"""

import asyncio
import json
import logging
import sys

import click

from welcomesign_sdk.config import WelcomeSignSettings
from welcomesign_sdk.exceptions import WelcomeSignError
from welcomesign_sdk.logging_middleware import LoggingMiddleware
from welcomesign_sdk.persistence import create_client

logger = logging.getLogger("welcomesign_sdk.cli")


def _echo_json(data):
    click.echo(json.dumps(data, indent=2, default=str))


def _run(ctx: click.Context, action):
    """Run ``action(client)`` on a fresh persistent client and print its result."""

    async def _main():
        settings = WelcomeSignSettings()
        middlewares = [LoggingMiddleware()] if ctx.obj["verbose"] else []
        client = create_client(settings, middlewares=middlewares)
        try:
            return await action(client)
        finally:
            await client.aclose()

    try:
        result = asyncio.run(_main())
    except WelcomeSignError as exc:
        logger.exception("Command failed: %s", exc)
        status = f" (status {exc.status_code})" if exc.status_code else ""
        click.echo(f"Error{status}: {exc}", err=True)
        sys.exit(1)
    if result is not None:
        _echo_json(result)


@click.group()
@click.option("--verbose", is_flag=True, help="Log requests and token lifecycle")
@click.pass_context
def cli(ctx, verbose):
    """WelcomeSign SDK CLI"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@cli.command()
@click.option("--email", required=True, help="Account email")
@click.option("--password", prompt=True, hide_input=True, help="Account password")
@click.pass_context
def login(ctx, email, password):
    """Log in and store the issued tokens."""

    async def action(client):
        await client.login(email, password)
        click.echo(f"Logged in as {email}")

    _run(ctx, action)


@cli.command()
@click.pass_context
def logout(ctx):
    """Revoke the current session."""

    async def action(client):
        await client.logout()
        click.echo("Logged out")

    _run(ctx, action)


@cli.command()
@click.pass_context
def whoami(ctx):
    """Show the current user profile."""
    _run(ctx, lambda client: client.request("/users/me"))


@cli.command()
@click.pass_context
def tokens(ctx):
    """Show which tokens are stored (prefixes only)."""

    async def action(client):
        for name, value in client.get_tokens().items():
            shown = f"{value[:10]}..." if value else "-"
            click.echo(f"{name}: {shown}")

    _run(ctx, action)


@cli.command()
@click.pass_context
def clear_tokens(ctx):
    """Remove all stored tokens."""

    async def action(client):
        client.clear_tokens()
        click.echo("Tokens cleared")

    _run(ctx, action)


@cli.command()
@click.option("--identifier", required=True, help="Device serial, MAC or other unique id")
@click.pass_context
def pairing_code(ctx, identifier):
    """Generate a pairing code for a device."""
    _run(ctx, lambda client: client.generate_pairing_code(identifier))


@cli.command()
@click.option("--code", required=True, help="Pairing code shown on the device")
@click.option("--property-id", required=True, help="Property to attach the device to")
@click.option("--platform", required=True, help="roku, android, firetv, ...")
@click.option("--name", default=None, help="Optional device name")
@click.pass_context
def register_device(ctx, code, property_id, platform, name):
    """Pair a device with a property and store its device token."""
    registration = {"code": code, "property_id": property_id, "platform": platform}
    if name:
        registration["name"] = name
    _run(ctx, lambda client: client.register_device(registration))


@cli.command()
@click.pass_context
def device_info(ctx):
    """Show the paired device's info."""
    _run(ctx, lambda client: client.get_device_info())


@cli.command()
@click.pass_context
def heartbeat(ctx):
    """Send one device heartbeat."""
    _run(ctx, lambda client: client.device_heartbeat())


if __name__ == "__main__":
    cli()
