#!/usr/bin/env python3
"""CLI entrypoint (v1.0.0)
csv2xlsx SOURCE DESTINATION: tab-delimited CSV in, single-sheet XLSX out.
Exit 0 once the workbook is written; 1 on open/config/write failure; 2 on usage errors.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
import structlog

from converter import ConversionError, convert
from settings import ConfigError, LOG_LEVELS, load_settings

logger = structlog.get_logger()


def configure_logging(level: str) -> None:
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper())),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


@click.command()
@click.argument("source", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("destination", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--config", "config_file", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None, help="TOML file with a [converter] table")
@click.option("--chunk-size", type=click.IntRange(min=1), default=None, help="Bytes read from SOURCE per chunk (default 1024)")
@click.option("--encoding", type=str, default=None, help="Text encoding of SOURCE (default utf-8)")
@click.option("--log-level", type=click.Choice(LOG_LEVELS, case_sensitive=False), default=None, help="Diagnostics threshold (default warning)")
def main(source: Path, destination: Path, config_file: Path | None, chunk_size: int | None, encoding: str | None, log_level: str | None) -> None:
    """Convert tab-delimited SOURCE into the XLSX workbook DESTINATION."""
    configure_logging(log_level or "warning")
    try:
        settings = load_settings(config_file).override(
            chunk_size=chunk_size,
            encoding=encoding,
            log_level=log_level.lower() if log_level else None,
        )
    except ConfigError as e:
        logger.error("config_error", error=str(e))
        sys.exit(1)
    configure_logging(settings.log_level)

    try:
        convert(source, destination, settings)
    except ConversionError as e:
        logger.error("conversion_failed", source=str(source), destination=str(destination), error=str(e))
        sys.exit(1)
    sys.exit(0)


if __name__ == "__main__":
    main()
