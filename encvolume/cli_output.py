"""
CLI Output Formatting Module (SSOT)

Consistent, encoding-safe terminal output for the policy log.
Jamf Pro records stdout verbatim, and some agents run with a
non-UTF-8 locale, so every symbol has an ASCII fallback.

Usage:
    from encvolume.cli_output import CLIOutput

    out = CLIOutput.detect()
    out.log("Volume Data created (50G), formatted as APFS.")
    out.warn("Not running as root")
    out.error("ERROR: Undefined Jamf Pro argument, unable to proceed.")
"""

import os
import sys
from typing import Optional


class CLIOutput:
    """
    SSOT for consistent CLI output formatting.

    Features:
    - ASCII-safe mode for consoles that cannot encode Unicode
    - Consistent warning/error prefixes
    - Everything on stdout, where the policy log reads it
    """

    # Unicode symbols (preferred)
    UNICODE_SYMBOLS = {
        "warn": "⚠️",
        "error": "❌",
    }

    # ASCII fallbacks (for broken consoles)
    ASCII_SYMBOLS = {
        "warn": "[!!]",
        "error": "[XX]",
    }

    def __init__(self, use_unicode: bool = True, stream=None):
        """
        Initialize CLI output formatter.

        Args:
            use_unicode: Use Unicode symbols (True) or ASCII fallback (False)
            stream: Output stream (default: sys.stdout at call time)
        """
        self.use_unicode = use_unicode
        self._stream = stream
        self._symbols = self.UNICODE_SYMBOLS if use_unicode else self.ASCII_SYMBOLS

    @classmethod
    def detect(cls) -> "CLIOutput":
        """
        Auto-detect console capabilities and return appropriate formatter.

        Checks PYTHONIOENCODING and the stdout encoding.
        """
        use_unicode = True

        io_encoding = os.environ.get("PYTHONIOENCODING", "")
        if io_encoding and "utf" not in io_encoding.lower():
            use_unicode = False

        stdout_encoding = getattr(sys.stdout, "encoding", None) or ""
        if stdout_encoding and "utf" not in stdout_encoding.lower():
            use_unicode = False

        return cls(use_unicode=use_unicode)

    def _print(self, msg: str):
        """Print with safe encoding fallback."""
        target = self._stream or sys.stdout
        try:
            print(msg, file=target)
        except UnicodeEncodeError:
            safe_msg = msg.encode("ascii", errors="replace").decode("ascii")
            print(safe_msg, file=target)

    def warn(self, message: str, prefix: Optional[str] = None):
        """Print warning message."""
        sym = prefix or self._symbols["warn"]
        self._print(f"{sym} {message}")

    def error(self, message: str, prefix: Optional[str] = None):
        """Print error message."""
        sym = prefix or self._symbols["error"]
        self._print(f"{sym} {message}")

    def log(self, message: str):
        """Print plain log message."""
        self._print(message)


# Module-level convenience accessor
_default_output = None


def get_output() -> CLIOutput:
    """Get or create default CLIOutput instance."""
    global _default_output
    if _default_output is None:
        _default_output = CLIOutput.detect()
    return _default_output
