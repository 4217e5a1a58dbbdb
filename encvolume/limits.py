# encvolume/limits.py - SINGLE SOURCE OF TRUTH for timeouts, thresholds, sizes
"""
All numeric limits, timeouts, and thresholds MUST be defined here.
No other module may define these values.
"""


class Limits:
    """Operational limits and thresholds."""

    # ==========================================================================
    # Timeouts (seconds)
    # ==========================================================================

    # Quick queries (sw_vers, diskutil info, diskutil list, mount)
    QUERY_TIMEOUT = 30

    # Volume creation / resizing can take a while on spinning disks
    DISKUTIL_ADD_VOLUME_TIMEOUT = 900

    # Starting encryption returns quickly; conversion continues in background
    DISKUTIL_ENCRYPT_TIMEOUT = 300

    # Unmount of the Recovery HD volume
    DISKUTIL_UNMOUNT_TIMEOUT = 60

    # security add-generic-password
    KEYCHAIN_TIMEOUT = 30

    # ==========================================================================
    # Timing delays
    # ==========================================================================

    # Delay after add/encrypt to let diskutil and DiskArbitration settle
    VOLUME_SETTLE_DELAY = 5

    # ==========================================================================
    # Size policy
    # ==========================================================================

    # CoreStorage startup disks get no recommended minimum from diskutil.
    # Minimum startup disk size = (percent of total disk size) + used space.
    CORESTORAGE_CAPACITY_PERCENT = 10

    # Bytes per gigabyte as reported by diskutil (decimal units)
    BYTES_PER_GB = 1000**3

    # ==========================================================================
    # Passphrase policy
    # ==========================================================================

    PASSPHRASE_LENGTH = 20

    # ==========================================================================
    # Log rotation
    # ==========================================================================

    MAX_LOG_FILE_SIZE = 5 * 1024 * 1024  # 5 MB
    LOG_BACKUP_COUNT = 3

    # ==========================================================================
    # OS requirements
    # ==========================================================================

    # macOS 10.12 Sierra introduced APFS-aware diskutil verbs
    MIN_MACOS_VERSION = (10, 12)
