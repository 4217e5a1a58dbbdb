#!/usr/bin/env python3
"""
Add Encrypted Volume

Creates an additional volume on the startup disk (sharing space with
APFS volumes, or using space freed up from the startup disk on HFS+ and
CoreStorage disks), encrypts it with a randomly generated password and
saves that password to the System keychain.

Usage (Jamf Pro passes the first three arguments itself):
    add-encrypted-volume <mount point> <computer> <user> \\
        "Macintosh HD" "Data" 50 APFS "Journaled HFS+"
    add-encrypted-volume "Macintosh HD" "Data" 50 APFS "Journaled HFS+" --dry-run

Exit codes:
    0   volume created, or already present
    1   unsupported file system, or a disk command failed
    71  insufficient free space on the startup disk
    72  macOS older than 10.12, or startup disk missing
    74  undefined Jamf Pro argument

Dependencies (runtime):
- Python 3
- macOS: diskutil, sw_vers, mount, security
"""

import argparse
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from encvolume.cli_output import get_output
from encvolume.config import build_request, load_config_file
from encvolume.constants import ExitCodes
from encvolume.diskutil import CommandRecord, CommandRunner
from encvolume.errors import AddVolumeError
from encvolume.limits import Limits
from encvolume.safety import VolumePresent
from encvolume.version import VERSION
from encvolume.volume import VolumeCreator

LOGGER_NAME = "encvolume"


# ============================================================
# LOGGING
# ============================================================


def setup_logging(log_file: Optional[Path] = None, verbose: bool = False) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        log_file: Optional rotating log file (created with its directory)
        verbose: Log DEBUG to stderr instead of WARNING

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    stderr_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(stderr_handler)

    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handler = RotatingFileHandler(
                str(log_file),
                maxBytes=Limits.MAX_LOG_FILE_SIZE,
                backupCount=Limits.LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
        except OSError as e:
            get_output().warn(f"Could not open log file {log_file}: {e}")
        else:
            handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s - %(levelname)s - %(name)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
                )
            )
            logger.addHandler(handler)

    return logger


# ============================================================
# DRY RUN REPORT
# ============================================================


def render_plan(history: List[CommandRecord], console: Optional[Console] = None) -> None:
    """Print the commands a dry run ran or skipped. Arguments are already redacted."""
    console = console or Console()
    table = Table(title="Dry run: commands", show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("Command")
    table.add_column("Status")
    for index, record in enumerate(history, start=1):
        status = "[green]queried[/green]" if record.executed else "[yellow]skipped[/yellow]"
        table.add_row(str(index), escape(record.display), status)
    console.print(table)


# ============================================================
# ENTRY POINT
# ============================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="add-encrypted-volume",
        description="Add a randomly-keyed encrypted volume to the macOS startup disk",
    )
    parser.add_argument(
        "params",
        nargs="*",
        metavar="PARAM",
        help="[mount point, computer, user,] startup disk, volume name, size (GB), "
        "APFS format, classic format",
    )
    parser.add_argument("--config", "-c", type=Path, metavar="PATH", help="JSON file with default parameters")
    parser.add_argument("--dry-run", action="store_true", help="Run checks only; print planned commands")
    parser.add_argument("--log-file", type=Path, metavar="PATH", help="Also log to a rotating file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging on stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the tool and return its exit code."""
    args = build_parser().parse_args(argv)
    out = get_output()
    logger = setup_logging(args.log_file, args.verbose)
    runner = CommandRunner(dry_run=args.dry_run)

    try:
        config = load_config_file(args.config)
        request = build_request(args.params, config)
        logger.info(
            "Adding volume %s (%sG) to %s", request.volume_name, request.volume_size, request.startup_disk_name
        )
        VolumeCreator(request, runner, out).run()
    except VolumePresent as e:
        out.log(str(e))
        return int(ExitCodes.SUCCESS)
    except AddVolumeError as e:
        logger.debug("Run failed with exit code %d", int(e.exit_code), exc_info=True)
        message = e.message if e.message.startswith("ERROR:") else f"ERROR: {e.message}"
        out.error(message)
        return int(e.exit_code)
    finally:
        if args.dry_run:
            render_plan(runner.history)

    return int(ExitCodes.SUCCESS)


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
