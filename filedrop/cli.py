"""CLI entry point for filedrop."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import click

from filedrop import __version__
from filedrop.config.settings import FileDropConfig, load_config
from filedrop.dispatcher import dispatch_event, parse_event
from filedrop.engine.clock import fixed_clock, utc_timestamp
from filedrop.engine.processor import plan_key
from filedrop.handler import build_runtime
from filedrop.utils.logging import configure_logging, get_logger
from filedrop.utils.result import ExitCode


class Context:
    """CLI context for sharing state between commands."""

    def __init__(
        self,
        config_path: Optional[Path],
        log_level: str,
        log_format: str,
        dry_run: bool,
    ) -> None:
        self.config_path = config_path
        self.log_level = log_level
        self.log_format = log_format
        self.dry_run = dry_run
        self.logger = get_logger("cli")

    def load(self) -> FileDropConfig:
        """Load and validate configuration, exiting on error."""
        result = load_config(self.config_path)
        if result.is_err():
            error = result.unwrap_err()
            self.logger.error("config_invalid", field=error.field, message=error.message)
            output_json({"status": "error", "message": str(error)})
            sys.exit(ExitCode.CONFIG_INVALID)
        return result.unwrap()


pass_context = click.make_pass_decorator(Context)


def output_json(data: dict) -> None:
    """Output JSON to stdout."""
    click.echo(json.dumps(data, indent=2, default=str))


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=False, path_type=Path),
    default=None,
    help="Path to YAML config (defaults to the BUCKET_CONFIG environment variable)",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warn", "error"], case_sensitive=False),
    default="info",
    help="Logging level",
)
@click.option(
    "--log-format",
    type=click.Choice(["json", "text"], case_sensitive=False),
    default="json",
    help="Log format",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Show what would be done without touching storage",
)
@click.version_option(version=__version__)
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Optional[Path],
    log_level: str,
    log_format: str,
    dry_run: bool,
) -> None:
    """
    File drop intake processor.

    Renames newly arrived objects under configured intake paths with a
    timestamp marker, notifies the downstream subscriber, and quarantines
    objects whose notification fails.
    """
    configure_logging(level=log_level, format_type=log_format)

    ctx.obj = Context(
        config_path=config_path,
        log_level=log_level,
        log_format=log_format,
        dry_run=dry_run,
    )


@cli.command("validate-config")
@pass_context
def validate_config(ctx: Context) -> None:
    """Validate configuration and print the intake rules."""
    config = ctx.load()

    output_json({
        "status": "valid",
        "bucket": config.bucket.to_dict(),
        "parallelism": config.parallelism,
    })


@cli.command()
@click.argument("keys", nargs=-1, required=True)
@click.option(
    "--timestamp",
    default=None,
    help="Marker timestamp to use instead of the current time",
)
@pass_context
def classify(ctx: Context, keys: tuple[str, ...], timestamp: Optional[str]) -> None:
    """Show what the engine would do with each KEY."""
    config = ctx.load()
    clock = fixed_clock(timestamp) if timestamp else utc_timestamp

    plans = [plan_key(config.bucket, key, clock).to_dict() for key in keys]
    output_json({"status": "success", "plans": plans})


@cli.command()
@click.argument("event_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@pass_context
def process(ctx: Context, event_file: Path) -> None:
    """Process a saved S3 event against the configured bucket."""
    config = ctx.load()

    try:
        event = json.loads(event_file.read_text())
    except json.JSONDecodeError as e:
        output_json({"status": "error", "message": f"Invalid event JSON: {e}"})
        sys.exit(ExitCode.EVENT_INVALID)

    ctx.logger.info("process_started", event_file=str(event_file), dry_run=ctx.dry_run)

    if ctx.dry_run:
        records, errors = parse_event(event)
        output_json({
            "status": "dry_run",
            "message": "Would process records",
            "plans": [
                plan_key(config.bucket, record.object_key, utc_timestamp).to_dict()
                for record in records
            ],
            "invalid_records": [str(e) for e in errors],
        })
        return

    runtime = build_runtime(config)
    report = asyncio.run(dispatch_event(runtime.engine, event, config.parallelism))

    output_json({
        "status": "success" if report.failed == 0 else "partial",
        **report.to_dict(),
    })

    if report.failed:
        sys.exit(ExitCode.PROCESSING_FAILED)


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except Exception as e:
        logger = get_logger("cli")
        logger.error("cli_error", error=str(e))
        sys.exit(ExitCode.GENERAL_ERROR)


if __name__ == "__main__":
    main()
