# encvolume/config.py - Jamf Pro parameters and optional JSON configuration
"""
SINGLE SOURCE OF TRUTH for turning script parameters into a VolumeRequest.

Jamf Pro runs policy scripts as:

    script <mount point> <computer name> <username> $4 $5 $6 $7 $8 ...

$4 startup disk name, $5 volume name, $6 volume size (GB),
$7 volume format for APFS, $8 volume format for classic disks.

Values missing on the command line may come from a JSON config file
(see ConfigKeys); the command line always wins.
"""

import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from encvolume.constants import JAMF_RESERVED_ARGUMENT_COUNT, ConfigKeys
from encvolume.errors import UndefinedArgumentError
from encvolume.limits import Limits

_config_logger = logging.getLogger("encvolume.config")

UNDEFINED_ARGUMENT_MESSAGE = "ERROR: Undefined Jamf Pro argument, unable to proceed."

_KNOWN_KEYS = ConfigKeys.JAMF_PARAMETERS + (
    ConfigKeys.CORESTORAGE_CAPACITY_PERCENT,
    ConfigKeys.SETTLE_DELAY,
)


@dataclass(frozen=True)
class VolumeRequest:
    """Validated inputs for one run."""

    startup_disk_name: str
    volume_name: str
    volume_size: float  # GB
    volume_format_apfs: str
    volume_format_classic: str
    corestorage_capacity_percent: float = Limits.CORESTORAGE_CAPACITY_PERCENT
    settle_delay: float = Limits.VOLUME_SETTLE_DELAY
    mount_point: str = ""
    computer_name: str = ""
    username: str = ""


def split_jamf_arguments(positional: Sequence[str]) -> Dict[str, str]:
    """
    Map positional arguments to parameter names.

    More than five arguments means Jamf Pro's reserved three come first.
    Exactly five (or fewer) are taken as $4-$8 directly.
    """
    positional = list(positional)
    reserved = ["", "", ""]
    if len(positional) > len(ConfigKeys.JAMF_PARAMETERS):
        reserved = positional[:JAMF_RESERVED_ARGUMENT_COUNT]
        positional = positional[JAMF_RESERVED_ARGUMENT_COUNT:]

    values = {key: "" for key in ConfigKeys.JAMF_PARAMETERS}
    for key, value in zip(ConfigKeys.JAMF_PARAMETERS, positional):
        values[key] = (value or "").strip()

    values["mount_point"], values["computer_name"], values["username"] = reserved
    return values


def load_config_file(config_path: Optional[Path]) -> Dict[str, Any]:
    """
    Load the optional JSON config file.

    Returns:
        Config dictionary, or empty dict if no path was given

    Raises:
        UndefinedArgumentError: File missing, unreadable or not a JSON object
    """
    if config_path is None:
        return {}

    cfg_path = Path(config_path)
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        _config_logger.error("Cannot read config file %s: %s", cfg_path, e)
        raise UndefinedArgumentError(f"ERROR: Unable to read config file {cfg_path}.") from e

    if not isinstance(data, dict):
        raise UndefinedArgumentError(f"ERROR: Config file {cfg_path} must contain a JSON object.")

    unknown = sorted(set(data) - set(_KNOWN_KEYS))
    if unknown:
        _config_logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))

    _config_logger.debug("Loaded config from %s", cfg_path)
    return data


def _parse_number(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def build_request(positional: Sequence[str], config: Optional[Dict[str, Any]] = None) -> VolumeRequest:
    """
    Build a VolumeRequest from positional arguments and config.

    Raises:
        UndefinedArgumentError: A required parameter is empty, or the
            volume size / tuning values are not usable numbers
    """
    config = config or {}
    values = split_jamf_arguments(positional)

    for key in ConfigKeys.JAMF_PARAMETERS:
        if not values[key] and config.get(key) not in (None, ""):
            values[key] = str(config[key]).strip()

    missing = [key for key in ConfigKeys.JAMF_PARAMETERS if not values[key]]
    if missing:
        _config_logger.error("Undefined parameters: %s", ", ".join(missing))
        raise UndefinedArgumentError(UNDEFINED_ARGUMENT_MESSAGE)

    volume_size = _parse_number(values[ConfigKeys.VOLUME_SIZE])
    if volume_size is None or volume_size <= 0:
        _config_logger.error("Volume size is not a positive number: %r", values[ConfigKeys.VOLUME_SIZE])
        raise UndefinedArgumentError(UNDEFINED_ARGUMENT_MESSAGE)

    percent = _parse_number(
        config.get(ConfigKeys.CORESTORAGE_CAPACITY_PERCENT, Limits.CORESTORAGE_CAPACITY_PERCENT)
    )
    if percent is None or not 0 <= percent < 100:
        raise UndefinedArgumentError(
            f"ERROR: {ConfigKeys.CORESTORAGE_CAPACITY_PERCENT} must be a number from 0 to 99."
        )

    settle_delay = _parse_number(config.get(ConfigKeys.SETTLE_DELAY, Limits.VOLUME_SETTLE_DELAY))
    if settle_delay is None or settle_delay < 0:
        raise UndefinedArgumentError(f"ERROR: {ConfigKeys.SETTLE_DELAY} must be a non-negative number.")

    return VolumeRequest(
        startup_disk_name=values[ConfigKeys.STARTUP_DISK_NAME],
        volume_name=values[ConfigKeys.VOLUME_NAME],
        volume_size=volume_size,
        volume_format_apfs=values[ConfigKeys.VOLUME_FORMAT_APFS],
        volume_format_classic=values[ConfigKeys.VOLUME_FORMAT_CLASSIC],
        corestorage_capacity_percent=percent,
        settle_delay=settle_delay,
        mount_point=values["mount_point"],
        computer_name=values["computer_name"],
        username=values["username"],
    )
