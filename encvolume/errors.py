# encvolume/errors.py - Exception hierarchy mapped to exit codes
"""
Every precondition failure raises an AddVolumeError subclass.

The CLI catches AddVolumeError, prints its message and exits with
its exit_code. Nothing below the CLI calls sys.exit().
"""

from encvolume.constants import ExitCodes


class AddVolumeError(Exception):
    """Base class for failures that end the run with a specific exit code."""

    exit_code = ExitCodes.FAILURE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UndefinedArgumentError(AddVolumeError):
    """A required Jamf Pro script parameter is missing or unusable."""

    exit_code = ExitCodes.UNDEFINED_ARGUMENT


class UnsupportedSystemError(AddVolumeError):
    """macOS is too old or the startup disk does not exist."""

    exit_code = ExitCodes.UNSUPPORTED_SYSTEM


class InsufficientSpaceError(AddVolumeError):
    """The startup disk cannot shrink enough to fit the new volume."""

    exit_code = ExitCodes.INSUFFICIENT_SPACE


class UnsupportedFileSystemError(AddVolumeError):
    """The startup disk is neither APFS nor Journaled HFS+."""

    exit_code = ExitCodes.FAILURE


class VolumeNotFoundError(AddVolumeError):
    """The new volume could not be located after creation."""

    exit_code = ExitCodes.FAILURE


class CommandError(AddVolumeError, RuntimeError):
    """An external command exited non-zero or timed out."""

    exit_code = ExitCodes.FAILURE

    def __init__(self, message: str, argv=None, returncode=None, output: str = ""):
        super().__init__(message)
        self.argv = list(argv or [])
        self.returncode = returncode
        self.output = output
