"""Command line entry point."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Optional

import click
from pydantic import ValidationError

from gitdrivesync.config import Settings
from gitdrivesync.manager import sync_repository
from gitdrivesync.runlog import RunLog

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(debug: bool = False, log_file: Optional[str] = None) -> None:
    """
    Log to stderr, and to log_file as well when given.

    Third-party HTTP and discovery-cache loggers are kept at WARNING unless
    debugging.
    """
    level = logging.DEBUG if debug else logging.INFO

    handlers: list[logging.Handler] = []
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
    handlers.append(stderr_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(
            logging.Formatter(
                "[%(asctime)s] [%(levelname)s] %(name)s %(message)s",
                datefmt=LOG_DATEFMT,
            )
        )
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    if level != logging.DEBUG:
        logging.getLogger("urllib3").setLevel(logging.WARNING)
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)
        logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)


@click.command()
@click.option(
    "--dry-run",
    is_flag=True,
    default=None,
    help="Plan and report actions without touching Google Drive (overrides DRY_RUN)",
)
@click.option("--debug", is_flag=True, help="Enable debug logging output")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, writable=True),
    help="Also append log output to this file",
)
@click.version_option(package_name="gitdrivesync")
def main(dry_run: Optional[bool], debug: bool, log_file: Optional[str]) -> None:
    """Mirror the files tracked by a git revision into a Google Drive folder.

    Configuration is read from the environment (GOOGLE_KEY, GDRIVE_FOLDERID,
    GIT_ROOT, GIT_SUBDIR, GIT_ORIGIN, GIT_GLOB, SLACK_CHANNELS, DRY_RUN, ...).
    """
    setup_logging(debug=debug, log_file=log_file)

    try:
        settings = Settings()
    except ValidationError as exc:
        logger.error("Invalid configuration: %s", exc)
        sys.exit(1)

    if dry_run:
        settings = settings.model_copy(update={"dry_run": True})

    run_log = RunLog()
    result = asyncio.run(sync_repository(settings, run_log))

    if result.exit_code != 0 and not debug:
        click.echo(run_log.trail(), err=True)
    elif run_log.has_errors:
        click.echo(run_log.errors(), err=True)

    sys.exit(result.exit_code)


if __name__ == "__main__":
    main()
