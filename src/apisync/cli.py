"""CLI interface for apisync"""

import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import click

from apisync.application.sync_service import SyncService
from apisync.domain.config import RetryPolicy, SourceSpec
from apisync.domain.models.sync_report import SyncReport
from apisync.infrastructure.config.config_manager import ConfigManager, ConfigurationError
from apisync.infrastructure.http_client import HttpJsonClient
from apisync.infrastructure.retry import RetryController
from apisync.infrastructure.storage import JsonFileSink

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    logging.getLogger().setLevel(level)
    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.INFO if verbose else logging.WARNING)


def _die(message: str, verbose: bool = False, exc: Optional[Exception] = None) -> None:
    """Exit with a user-friendly error message"""
    if exc is not None:
        logger.error(message, exc_info=verbose)
    else:
        logger.error(message)
    raise click.ClickException(message)


def _load_config(ctx) -> ConfigManager:
    try:
        return ConfigManager(config_path=ctx.obj.get("config_path"))
    except ConfigurationError as e:
        _die(str(e), verbose=ctx.obj.get("verbose", False), exc=e)


def _override_policy(
    policy: RetryPolicy,
    max_attempts: Optional[int],
    timeout: Optional[float],
    delay: Optional[float],
) -> RetryPolicy:
    """Apply CLI overrides to a retry policy

    Args:
        policy: Configured policy
        max_attempts: Optional max attempts override
        timeout: Optional per-attempt timeout override (seconds)
        delay: Optional delay override (seconds)

    Returns:
        New validated RetryPolicy
    """
    overrides = {
        "max_attempts": max_attempts,
        "timeout": timeout,
        "delay": delay,
    }
    values = policy.model_dump()
    values.update({k: v for k, v in overrides.items() if v is not None})
    return RetryPolicy(**values)


def _select_sources(config_manager: ConfigManager, names: Tuple[str, ...]) -> List[SourceSpec]:
    if not names:
        return config_manager.get_sources()
    try:
        return [config_manager.get_source(name) for name in names]
    except KeyError as e:
        raise click.BadParameter(e.args[0], param_hint="--source")


def _output_sync_report(report: SyncReport) -> None:
    """Output sync report to console"""
    click.echo("\n" + "=" * 80)
    click.echo("Sync Report")
    click.echo("=" * 80)
    for outcome in report.outcomes:
        if outcome.succeeded:
            click.echo(
                f"OK      {outcome.source}: {outcome.records} records -> {outcome.destination}"
            )
        else:
            click.echo(f"FAILED  {outcome.source}: {outcome.error}", err=True)
    click.echo(f"\n{report.summary()}")


retry_options = [
    click.option("--max-attempts", type=click.IntRange(min=1), help="Maximum attempts per fetch"),
    click.option("--timeout", type=click.FloatRange(min=0, min_open=True), help="Per-attempt timeout in seconds"),
    click.option("--delay", type=click.FloatRange(min=0), help="Delay between attempts in seconds"),
]


def with_retry_options(func):
    for option in reversed(retry_options):
        func = option(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to .apisync.yml config file",
)
@click.pass_context
def cli(ctx, verbose: bool, config: Path):
    """apisync - resilient synchronization of JSON APIs to local files"""
    ctx.ensure_object(dict)
    setup_logging(verbose)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


@cli.command()
@click.option(
    "--source",
    "source_names",
    multiple=True,
    help="Only sync this source (repeatable). Defaults to all configured sources.",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for written files. Overrides config.",
)
@with_retry_options
@click.option("--strict", is_flag=True, help="Exit with status 1 if any source failed")
@click.pass_context
def sync(
    ctx,
    source_names: Tuple[str, ...],
    output_dir: Optional[Path],
    max_attempts: Optional[int],
    timeout: Optional[float],
    delay: Optional[float],
    strict: bool,
):
    """Fetch every configured source and store its records."""
    verbose = ctx.obj.get("verbose", False)
    config_manager = _load_config(ctx)
    sources = _select_sources(config_manager, source_names)

    client = HttpJsonClient()
    try:
        sync_config = config_manager.get_sync_config()
        policy = _override_policy(sync_config.retry, max_attempts, timeout, delay)
        sink = JsonFileSink(output_dir or sync_config.output_dir)
        service = SyncService(retry_controller=RetryController(client=client), sink=sink, policy=policy)
        report = service.run(sources)
    except click.ClickException:
        raise
    except Exception as e:
        _die(f"Fatal error: {e}", verbose=verbose, exc=e)
    finally:
        client.close()

    _output_sync_report(report)
    if strict and not report.all_succeeded:
        sys.exit(1)


@cli.command()
@click.argument("url", type=str)
@with_retry_options
@click.pass_context
def fetch(ctx, url: str, max_attempts: Optional[int], timeout: Optional[float], delay: Optional[float]):
    """Fetch URL with retries and print its JSON payload.

    URL: HTTP(S) endpoint returning JSON
    """
    verbose = ctx.obj.get("verbose", False)
    config_manager = _load_config(ctx)

    client = HttpJsonClient()
    try:
        policy = _override_policy(config_manager.get_retry_config(), max_attempts, timeout, delay)
        result = RetryController(client=client).fetch(url, policy)
    except Exception as e:
        _die(f"Fatal error: {e}", verbose=verbose, exc=e)
    finally:
        client.close()

    if not result.ok:
        _die(f"Fetch failed: {result.failure}", verbose=verbose)
    click.echo(json.dumps(result.payload, indent=2, ensure_ascii=False))


@cli.command()
@click.pass_context
def sources(ctx):
    """List configured sources."""
    config_manager = _load_config(ctx)
    for source in config_manager.get_sources():
        click.echo(f"{source.name}\t{source.endpoint}\t{source.destination}")


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == "__main__":
    main()
