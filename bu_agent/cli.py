from __future__ import annotations

from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from bu_agent.agent_runtime.settings import UniverseSettings


@click.group()
def main() -> None:
    """Blockchain Universe - LLM-driven agents on a signed event ledger."""


def _load(config_path: str | None, log_level: str | None) -> UniverseSettings:
    from bu_agent.agent_runtime.settings import ConfigError, load_settings

    try:
        settings = load_settings(config_path)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    if log_level:
        settings.log_level = log_level
    return settings


@main.command()
@click.option("--config", "config_path", default=None, help="Path to a YAML configuration file.")
@click.option("--log-level", default=None, help="Log level (debug, info, warning, error).")
@click.option("--json-logs", is_flag=True, default=False, help="Write logs as JSON lines.")
def run(config_path: str | None, log_level: str | None, json_logs: bool) -> None:
    """Run a headless agent until interrupted."""
    import asyncio
    import signal

    from loguru import logger

    from bu_agent.agent_runtime.log import setup_logging
    from bu_agent.agent_runtime.service import start_agent
    from bu_agent.ledger.crypto import KeyGenerationError

    settings = _load(config_path, log_level)
    setup_logging(settings.log_level, json_logs=json_logs)
    logger.info("Starting Blockchain Universe Agent...")

    async def _main() -> None:
        try:
            service = start_agent(settings)
        except (ValueError, KeyGenerationError) as exc:
            raise click.ClickException(f"Failed to initialize agent: {exc}") from exc

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, service.loop.stop)

        logger.info("Agent running. Press Ctrl+C to stop.")
        try:
            await service.loop.run()
        finally:
            await service.aclose()

    asyncio.run(_main())


@main.command()
@click.option("--config", "config_path", default=None, help="Path to a YAML configuration file.")
@click.option("--host", default=None, help="Bind host (default: from BU_HOST or 0.0.0.0).")
@click.option("--port", default=None, type=int, help="Bind port (default: from BU_PORT or 8000).")
@click.option("--log-level", default=None, help="Log level (debug, info, warning, error).")
def serve(config_path: str | None, host: str | None, port: int | None, log_level: str | None) -> None:
    """Start the ledger API server with an agent running in the background."""
    import uvicorn

    from bu_agent.agent_runtime.app import create_app

    settings = _load(config_path, log_level)
    uvicorn.run(
        create_app(settings),
        host=host or settings.host,
        port=port or settings.port,
        log_level="warning",  # uvicorn's own logging is intercepted by loguru
    )


@main.command()
def config() -> None:
    """Print an example configuration file."""
    from bu_agent.agent_runtime.settings import example_config

    click.echo(example_config(), nl=False)


if __name__ == "__main__":
    main()
