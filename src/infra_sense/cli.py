"""Command-line interface for infra-sense."""
from __future__ import annotations

import asyncio
import json
from pathlib import Path

import click
import structlog
import yaml

from infra_sense import __version__
from infra_sense.config import InfraSenseConfig, OutputFormat, load_config
from infra_sense.detection.base import HostSignalReader
from infra_sense.detection.detector import PlatformDetector
from infra_sense.detection.types import ContainerPlatform
from infra_sense.utils.logging import setup_logging


def format_platform(platform: ContainerPlatform, output: OutputFormat) -> str:
    """Render a detected platform for stdout."""
    if output is OutputFormat.JSON:
        return json.dumps(platform.to_dict(), indent=2)
    if output is OutputFormat.YAML:
        return yaml.safe_dump(platform.to_dict(), sort_keys=False).rstrip()

    return "\n".join(
        [
            f"Detected platform: {platform.display_name}",
            f"  Type: {platform.type.value}",
            f"  Runtime: {platform.runtime.value}",
        ]
    )


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="infra-sense")
@click.pass_context
def main(ctx: click.Context) -> None:
    """infra-sense - Container platform detection."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(detect)


@main.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Show debug messages",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default=None,
    help="Logging level",
)
@click.option(
    "--json-logs",
    is_flag=True,
    default=False,
    help="Emit logs as JSON lines instead of plain text",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write logs to this file",
)
@click.option(
    "--output",
    "-o",
    type=click.Choice([f.value for f in OutputFormat]),
    default=None,
    help="Result output format",
)
@click.option(
    "--force-refresh",
    is_flag=True,
    default=False,
    help="Ignore any cached result",
)
def detect(
    config: Path | None = None,
    verbose: bool = False,
    log_level: str | None = None,
    json_logs: bool = False,
    log_file: Path | None = None,
    output: str | None = None,
    force_refresh: bool = False,
) -> None:
    """Detect the container platform this process runs on."""
    # Load configuration
    try:
        cfg = load_config(config) if config else InfraSenseConfig()
    except Exception as e:
        click.echo(f"Configuration error: {e}", err=True)
        raise SystemExit(1) from e

    # Command-line flags override the config file
    if verbose:
        cfg.log_level = "debug"
    elif log_level:
        cfg.log_level = log_level
    if json_logs:
        cfg.json_logs = True
    if log_file:
        cfg.log_file = str(log_file)
    if output:
        cfg.output_format = OutputFormat(output)

    setup_logging(cfg.log_level, json_format=cfg.json_logs, log_file=cfg.log_file)
    logger = structlog.get_logger("infra_sense")

    detector = PlatformDetector(HostSignalReader(cfg.detection))
    logger.debug("Starting container platform detection")

    try:
        platform = asyncio.run(detector.detect(logger, force_refresh=force_refresh))
    except Exception as e:
        logger.error("Detection failed", error=str(e))
        raise SystemExit(1) from e

    logger.info(
        "Detection complete",
        type=platform.type.value,
        runtime=platform.runtime.value,
        display_name=platform.display_name,
    )
    click.echo(format_platform(platform, cfg.output_format))


@main.command("validate-config")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Path to configuration file",
)
def validate_config(config: Path) -> None:
    """Validate a configuration file."""
    try:
        cfg = load_config(config)
        click.echo(f"Configuration valid: {config}")
        click.echo(f"  Log level: {cfg.log_level}")
        click.echo(f"  Output format: {cfg.output_format.value}")
        click.echo(f"  Cache TTL: {cfg.detection.cache_ttl_seconds}s")
        click.echo(f"  DNS timeout: {cfg.detection.dns_timeout_seconds}s")
    except Exception as e:
        click.echo(f"Configuration error: {e}", err=True)
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
