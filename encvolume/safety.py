# encvolume/safety.py - SINGLE SOURCE OF TRUTH for preflight guardrails
"""
Checks that run before any disk is touched.

This module provides:
- check_volume(): target volume already present means nothing to do
- check_startup_disk(): startup disk must exist
- Space arithmetic for startup disks that have to shrink

CRITICAL: A failed space check MUST stop the run before resizeVolume or
resizeStack is called. The comparison is strict: the new startup disk
size has to be larger than the minimum.
"""

import logging
from dataclasses import dataclass

from encvolume.constants import DiskutilFields
from encvolume.diskutil import DiskInfo, Diskutil, ResizeLimits, floor_gb, format_gb
from encvolume.errors import AddVolumeError, InsufficientSpaceError, UnsupportedSystemError

_safety_logger = logging.getLogger("encvolume.safety")


class VolumePresent(Exception):
    """The target volume already exists; the run ends successfully."""

    def __init__(self, volume_name: str):
        super().__init__(f"Volume {volume_name} already present, no action required.")
        self.volume_name = volume_name


# =============================================================================
# Presence Checks
# =============================================================================


def check_volume(diskutil: Diskutil, volume_name: str) -> None:
    """
    Raise VolumePresent if a volume called volume_name is already there.

    Anything other than diskutil's "Could not find disk" answer counts
    as present.
    """
    found, _ = diskutil.info(volume_name)
    if found:
        raise VolumePresent(volume_name)
    _safety_logger.debug("Volume %s not present", volume_name)


def check_startup_disk(diskutil: Diskutil, startup_disk_name: str) -> DiskInfo:
    """
    Return the startup disk's info.

    Raises:
        UnsupportedSystemError: diskutil cannot find the startup disk
    """
    found, info = diskutil.info(startup_disk_name)
    if not found:
        raise UnsupportedSystemError(f"ERROR: Volume {startup_disk_name} missing, unable to proceed.")
    return info


# =============================================================================
# Space Checks
# =============================================================================


@dataclass(frozen=True)
class SpaceCheckResult:
    """
    Result of a startup disk space check (all sizes in GB).

    Use .is_sufficient to check if the resize can proceed.
    """

    minimum: float
    new_size: float

    @property
    def is_sufficient(self) -> bool:
        return self.minimum < self.new_size

    def __bool__(self) -> bool:
        return self.is_sufficient


def classic_space(limits: ResizeLimits, volume_size: float) -> SpaceCheckResult:
    """
    Space check for a plain HFS+ partition using diskutil's limits.

    new_size is rounded down so new_size + volume_size never exceeds
    the maximum.
    """
    return SpaceCheckResult(
        minimum=limits.recommended_minimum,
        new_size=floor_gb(limits.maximum - volume_size),
    )


def corestorage_space(
    disk_size: float, used_space: float, volume_size: float, capacity_percent: float
) -> SpaceCheckResult:
    """
    Space check for a CoreStorage startup disk.

    minimum = (capacity_percent of disk size) + used space
    """
    return SpaceCheckResult(
        minimum=disk_size * capacity_percent / 100 + used_space,
        new_size=floor_gb(disk_size - volume_size),
    )


def insufficient_space_error(
    startup_disk_name: str, volume_name: str, result: SpaceCheckResult
) -> InsufficientSpaceError:
    return InsufficientSpaceError(
        f"ERROR: Startup disk {startup_disk_name} has insufficient free space or is too small "
        f"to shrink to {format_gb(result.new_size)} (needs to be at least {format_gb(result.minimum)}). "
        f"Please select a smaller target size for {volume_name} or free up space on the startup disk."
    )


def check_disk_space_classic(
    diskutil: Diskutil, startup_disk_name: str, volume_name: str, volume_size: float
) -> SpaceCheckResult:
    """
    Verify a plain HFS+ startup disk can shrink to fit the new volume.

    Raises:
        InsufficientSpaceError: New size is not above the recommended minimum
    """
    limits = diskutil.resize_limits(startup_disk_name)
    result = classic_space(limits, volume_size)
    _safety_logger.info(
        "Classic space check: minimum %.2f GB, maximum %.2f GB, new size %.2f GB",
        limits.recommended_minimum,
        limits.maximum,
        result.new_size,
    )
    if not result:
        raise insufficient_space_error(startup_disk_name, volume_name, result)
    return result


def check_disk_space_corestorage(
    startup_info: DiskInfo,
    startup_disk_name: str,
    volume_name: str,
    volume_size: float,
    capacity_percent: float,
) -> SpaceCheckResult:
    """
    Verify a CoreStorage startup disk can shrink to fit the new volume.

    diskutil gives no recommended minimum for CoreStorage, so the
    minimum is computed from total and used space.

    Raises:
        AddVolumeError: Disk size or used space missing from diskutil info
        InsufficientSpaceError: New size is not above the computed minimum
    """
    disk_size = startup_info.size_gb(DiskutilFields.DISK_SIZE)
    used_space = startup_info.size_gb(DiskutilFields.VOLUME_USED_SPACE)
    if disk_size is None or used_space is None:
        raise AddVolumeError(f"ERROR: Unable to read size of startup disk {startup_disk_name}.")

    result = corestorage_space(disk_size, used_space, volume_size, capacity_percent)
    _safety_logger.info(
        "CoreStorage space check: disk %.2f GB, used %.2f GB, minimum %.2f GB, new size %.2f GB",
        disk_size,
        used_space,
        result.minimum,
        result.new_size,
    )
    if not result:
        raise insufficient_space_error(startup_disk_name, volume_name, result)
    return result
