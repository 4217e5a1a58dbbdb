# encvolume/constants.py - SINGLE SOURCE OF TRUTH for all shared string literals
"""
All shared string constants MUST be defined here.
No other module may define these values.

Categories:
- ExitCodes: Process exit codes returned to the management agent
- ConfigKeys: JSON config keys
- Tools: Absolute paths of the macOS utilities we shell out to
- DiskutilFields: Field labels in diskutil text output
- DiskutilMessages: Fixed diskutil responses we compare against
- FileSystemPersonality: Markers for the startup disk format
- Keychain: System keychain parameters
- Passphrase: Passphrase alphabet
"""

import string
from enum import IntEnum


# =============================================================================
# Exit Codes
# =============================================================================


class ExitCodes(IntEnum):
    """
    Exit codes reported back to Jamf Pro.

    The non-zero values follow sysexits.h so they stay stable across
    policy revisions that match on them.
    """

    SUCCESS = 0
    FAILURE = 1  # Unsupported filesystem or failed disk command
    INSUFFICIENT_SPACE = 71  # EX_OSERR
    UNSUPPORTED_SYSTEM = 72  # EX_OSFILE: macOS too old or startup disk missing
    UNDEFINED_ARGUMENT = 74  # EX_IOERR


# =============================================================================
# Config Keys
# =============================================================================


class ConfigKeys:
    """JSON keys accepted in the optional --config file."""

    STARTUP_DISK_NAME = "startup_disk_name"
    VOLUME_NAME = "volume_name"
    VOLUME_SIZE = "volume_size"
    VOLUME_FORMAT_APFS = "volume_format_apfs"
    VOLUME_FORMAT_CLASSIC = "volume_format_classic"
    CORESTORAGE_CAPACITY_PERCENT = "corestorage_capacity_percent"
    SETTLE_DELAY = "settle_delay"

    # Order matches Jamf Pro script parameters $4-$8
    JAMF_PARAMETERS = (
        STARTUP_DISK_NAME,
        VOLUME_NAME,
        VOLUME_SIZE,
        VOLUME_FORMAT_APFS,
        VOLUME_FORMAT_CLASSIC,
    )


# Jamf Pro always passes mount point, computer name and username first
JAMF_RESERVED_ARGUMENT_COUNT = 3


# =============================================================================
# External Tools
# =============================================================================


class Tools:
    """Absolute paths so a tampered PATH cannot redirect disk operations."""

    SW_VERS = "/usr/bin/sw_vers"
    DISKUTIL = "/usr/sbin/diskutil"
    MOUNT = "/sbin/mount"
    SECURITY = "/usr/bin/security"


# =============================================================================
# diskutil Output
# =============================================================================


class DiskutilFields:
    """Field labels as printed by diskutil."""

    DEVICE_IDENTIFIER = "Device Identifier"
    FILE_SYSTEM_PERSONALITY = "File System Personality"
    PART_OF_WHOLE = "Part of Whole"
    DISK_SIZE = "Disk Size"
    VOLUME_USED_SPACE = "Volume Used Space"
    VOLUME_UUID = "Volume UUID"
    LV_UUID = "LV UUID"
    RECOMMENDED_MINIMUM_SIZE = "Recommended minimum size"
    MAXIMUM_SIZE = "Maximum size"


class DiskutilMessages:
    """Fixed diskutil responses (format with the queried name)."""

    DISK_NOT_FOUND = "Could not find disk: {name}"
    NOT_CORESTORAGE = "{name} is not a CoreStorage disk"


RECOVERY_VOLUME_NAME = "Recovery HD"

# Size suffix understood by diskutil for gigabytes
SIZE_SUFFIX = "G"


class FileSystemPersonality:
    """Substrings of the File System Personality field."""

    APFS = "APFS"
    JOURNALED_HFS_PLUS = "Journaled HFS+"


# =============================================================================
# Keychain
# =============================================================================


class Keychain:
    """System keychain item parameters."""

    SYSTEM_KEYCHAIN = "/Library/Keychains/System.keychain"
    ITEM_KIND = "encrypted volume password"


# =============================================================================
# Passphrase
# =============================================================================


class Passphrase:
    """Random passphrase alphabet: letters and digits without 'O' and 'l'."""

    ALPHABET = "".join(c for c in string.ascii_letters + string.digits if c not in "Ol")

    # Placeholder used wherever a passphrase would appear in logs
    REDACTED = "<PW>"
