"""Click CLI for running and checking the chat relay."""

from __future__ import annotations

import json
import logging
import os
import sys

import click
import uvicorn

from src.clients.base import ChatClientConfigError
from src.clients.synochat import SynologyChatClient
from src.config import ConfigError, RelayConfig
from src.server.app import create_app

logger = logging.getLogger(__name__)

_LOG_LEVELS = ["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


def _load_config() -> RelayConfig:
    try:
        return RelayConfig.from_env()
    except ConfigError as exc:
        logger.error("%s", exc)
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    default=lambda: os.environ.get("LOG_LEVEL", "INFO"),
    show_default="LOG_LEVEL or INFO",
    help="Python logging level.",
)
def cli(log_level: str) -> None:
    """Synology Chat to Anthropic webhook relay."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True, help="Interface to bind.")
@click.option("--port", type=int, default=None, help="Port to bind (overrides PORT).")
def serve(host: str, port: int | None) -> None:
    """Run the relay HTTP server."""
    config = _load_config()
    try:
        app = create_app(config)
    except ChatClientConfigError as exc:
        logger.error("Failed to create Synology Chat client: %s", exc)
        click.echo(f"Failed to create Synology Chat client: {exc}", err=True)
        sys.exit(1)

    bind_port = port if port is not None else config.port
    logger.info("Starting server on port %d", bind_port)
    uvicorn.run(app, host=host, port=bind_port, log_config=None)


@cli.command("check-config")
def check_config() -> None:
    """Validate environment configuration and print it with secrets masked."""
    config = _load_config()
    try:
        SynologyChatClient(config.chat_base_url)
    except ChatClientConfigError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)
    click.echo(json.dumps(config.redacted(), indent=2))


if __name__ == "__main__":
    cli()
