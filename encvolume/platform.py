# encvolume/platform.py - SINGLE SOURCE OF TRUTH for platform detection
"""
Platform-specific detection and capability checks.

This module provides:
- is_admin(): Check if current process has root privileges
- parse_macos_version(): "10.15.7" -> (10, 15, 7)
- macos_version(): Product version reported by sw_vers
- check_macos(): Fail unless macOS meets Limits.MIN_MACOS_VERSION
"""

import logging
import os
from typing import Tuple

from encvolume.constants import Tools
from encvolume.diskutil import CommandRunner
from encvolume.errors import UnsupportedSystemError
from encvolume.limits import Limits

_platform_logger = logging.getLogger("encvolume.platform")


def is_admin() -> bool:
    """
    Check if the current process has root privileges.

    Checks the effective user ID only; never attempts a privileged
    operation to find out.
    """
    try:
        return os.geteuid() == 0
    except AttributeError:
        return False


def parse_macos_version(text: str) -> Tuple[int, ...]:
    """
    Parse a product version string into a comparable tuple.

    Non-numeric components stop the parse ("10.13.6 beta" -> (10, 13, 6)).

    Raises:
        ValueError: If no leading numeric component is present
    """
    tokens = text.split()
    parts = []
    for component in (tokens[0].split(".") if tokens else []):
        if not component.isdigit():
            break
        parts.append(int(component))
    if not parts:
        raise ValueError(f"Unrecognized macOS version: {text!r}")
    return tuple(parts)


def macos_version(runner: CommandRunner) -> Tuple[int, ...]:
    """Return the macOS product version as a tuple."""
    result = runner.run([Tools.SW_VERS, "-productVersion"])
    version = parse_macos_version(result.stdout)
    _platform_logger.debug("macOS product version: %s", ".".join(map(str, version)))
    return version


def check_macos(runner: CommandRunner) -> Tuple[int, ...]:
    """
    Exit early on macOS older than 10.12 Sierra.

    Compares the full version tuple, so macOS 11 and later pass.

    Raises:
        UnsupportedSystemError: macOS is too old or its version unreadable
    """
    try:
        version = macos_version(runner)
    except ValueError as e:
        _platform_logger.error("%s", e)
        raise UnsupportedSystemError("ERROR: This script requires macOS 10.12 Sierra or later.") from e

    if version < Limits.MIN_MACOS_VERSION:
        raise UnsupportedSystemError("ERROR: This script requires macOS 10.12 Sierra or later.")
    return version
