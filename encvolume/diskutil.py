# encvolume/diskutil.py - SINGLE SOURCE OF TRUTH for external commands and their output
"""
Command execution and diskutil output parsing.

This module provides:
- CommandRunner: the only place subprocess.run() is called
- redact_argv(): passphrase-safe argv for logs and dry-run plans
- DiskInfo / ResizeLimits: parsed `diskutil` text output
- Diskutil: thin wrappers for the diskutil verbs the workflows use

All commands run with shell=False and an explicit timeout.
Mutating commands are skipped (but recorded) in dry-run mode.
"""

import logging
import math
import re
import subprocess
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from encvolume.constants import (
    DiskutilFields,
    DiskutilMessages,
    Passphrase,
    SIZE_SUFFIX,
    Tools,
)
from encvolume.errors import AddVolumeError, CommandError
from encvolume.limits import Limits

_diskutil_logger = logging.getLogger("encvolume.diskutil")

# Flags whose following argument is secret
SECRET_FLAGS = frozenset({"-passphrase", "-w"})

_UNIT_FACTORS = {
    "B": 1 / Limits.BYTES_PER_GB,
    "KB": 1 / 1000**2,
    "MB": 1 / 1000,
    "GB": 1.0,
    "TB": 1000.0,
}


def redact_argv(argv: Sequence[str]) -> List[str]:
    """Return argv with the value after any secret flag replaced."""
    sanitized = []
    skip_next = False
    for arg in argv:
        if skip_next:
            sanitized.append(Passphrase.REDACTED)
            skip_next = False
        elif arg in SECRET_FLAGS:
            sanitized.append(arg)
            skip_next = True
        else:
            sanitized.append(str(arg))
    return sanitized


# =============================================================================
# Command Runner
# =============================================================================


@dataclass
class CommandRecord:
    """One command as it was run (or planned), already redacted."""

    argv: List[str]
    executed: bool
    returncode: Optional[int] = None

    @property
    def display(self) -> str:
        return " ".join(self.argv)


@dataclass
class CommandRunner:
    """
    Runs external commands and keeps a redacted history.

    In dry-run mode, commands flagged as mutating are recorded but not
    executed and report success with empty output.
    """

    dry_run: bool = False
    history: List[CommandRecord] = field(default_factory=list)

    def run(
        self,
        argv: Sequence[str],
        *,
        timeout: float = Limits.QUERY_TIMEOUT,
        check: bool = True,
        merge_stderr: bool = False,
        mutating: bool = False,
    ) -> subprocess.CompletedProcess:
        """
        Run a command and return the completed process.

        Args:
            argv: Command and arguments (never passed through a shell)
            timeout: Seconds before the command is killed
            check: Raise CommandError on non-zero exit
            merge_stderr: Fold stderr into stdout (like `2>&1`)
            mutating: Command changes disk or keychain state

        Raises:
            CommandError: Command missing, timed out, or failed with check=True
        """
        argv = [str(a) for a in argv]
        redacted = redact_argv(argv)

        if mutating and self.dry_run:
            _diskutil_logger.info("Dry run, skipping: %s", " ".join(redacted))
            self.history.append(CommandRecord(argv=redacted, executed=False))
            return subprocess.CompletedProcess(argv, 0, stdout="", stderr="")

        _diskutil_logger.debug("Running: %s", " ".join(redacted))
        try:
            result = subprocess.run(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
                text=True,
                errors="replace",
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            self.history.append(CommandRecord(argv=redacted, executed=True))
            raise CommandError(
                f"Command timed out after {timeout}s: {' '.join(redacted)}", argv=redacted
            ) from e
        except OSError as e:
            self.history.append(CommandRecord(argv=redacted, executed=False))
            raise CommandError(f"Unable to run {redacted[0]}: {e}", argv=redacted) from e

        self.history.append(CommandRecord(argv=redacted, executed=True, returncode=result.returncode))
        _diskutil_logger.debug("Exit code %s from %s", result.returncode, redacted[0])

        if check and result.returncode != 0:
            details = []
            if result.stdout:
                details.append(f"stdout: {result.stdout.strip()}")
            if result.stderr:
                details.append(f"stderr: {result.stderr.strip()}")
            detail_msg = "\n".join(details) if details else f"exit code {result.returncode}"
            raise CommandError(
                f"Command failed: {' '.join(redacted)}\n{detail_msg}",
                argv=redacted,
                returncode=result.returncode,
                output="\n".join(details),
            )

        return result


# =============================================================================
# Output Parsing
# =============================================================================


def parse_key_values(text: str) -> Dict[str, str]:
    """
    Parse `Label:   value` lines into a dict.

    The key is everything before the first colon. Repeated keys keep
    their first value. Lines without a colon are ignored.
    """
    fields: Dict[str, str] = {}
    for line in (text or "").splitlines():
        if ":" not in line:
            continue
        key, _, value = line.partition(":")
        key = key.strip()
        if key and key not in fields:
            fields[key] = value.strip()
    return fields


def parse_size_gb(value: str) -> Optional[float]:
    """
    Convert a diskutil size string to decimal gigabytes.

    Prefers the exact "(N Bytes)" parenthetical; falls back to the
    leading number and unit. A bare number is taken as GB.

    Example: "500.1 GB (500107862016 Bytes)" gives 500.107862016.
    """
    if not value:
        return None

    exact = re.search(r"\((\d+) Bytes\)", value)
    if exact:
        return int(exact.group(1)) / Limits.BYTES_PER_GB

    approx = re.match(r"\s*(\d+(?:\.\d+)?)\s*([KMGT]?B)?\b", value)
    if not approx:
        return None
    number = float(approx.group(1))
    unit = approx.group(2) or "GB"
    return number * _UNIT_FACTORS[unit]


def is_not_found(output: str, name: str) -> bool:
    """True when diskutil answered "Could not find disk: <name>"."""
    expected = DiskutilMessages.DISK_NOT_FOUND.format(name=name)
    return any(line.strip() == expected for line in (output or "").splitlines())


# "   3:                APFS Volume Data     20.5 KB    disk1s3"
_LIST_ENTRY = re.compile(
    r"^(?P<head>\s*\d+:.*?)\s+[*+]?\d+(?:\.\d+)?\s+[KMGTP]?B\s+(?P<identifier>disk\S+)\s*$"
)


def find_identifier(list_output: str, name: str) -> Optional[str]:
    """
    Find the device identifier of a volume in `diskutil list` output.

    The NAME column starts where the table header prints "NAME". An entry
    matches only when that whole column equals `name`, so "Data" matches
    neither "Data 2" nor "Macintosh HD - Data". First match wins.
    """
    name_column = None
    for line in (list_output or "").splitlines():
        if "TYPE NAME" in line:
            name_column = line.index("NAME")
            continue
        entry = _LIST_ENTRY.match(line)
        if entry is None or name_column is None:
            continue
        head = entry.group("head")
        # Type text overflowing into the NAME column means the row is misaligned
        if len(head) <= name_column or not head[name_column - 1].isspace():
            continue
        if head[name_column:].strip() == name:
            return entry.group("identifier")
    return None


@dataclass
class DiskInfo:
    """Parsed output of `diskutil info <disk>`."""

    fields: Dict[str, str]

    @classmethod
    def from_output(cls, text: str) -> "DiskInfo":
        return cls(fields=parse_key_values(text))

    def get(self, label: str, default: str = "") -> str:
        """
        Look up a field by label.

        Exact match first, then the first key starting with the label,
        then the first key containing it.
        """
        if label in self.fields:
            return self.fields[label]
        for key, value in self.fields.items():
            if key.startswith(label):
                return value
        for key, value in self.fields.items():
            if label in key:
                return value
        return default

    def size_gb(self, label: str) -> Optional[float]:
        return parse_size_gb(self.get(label))

    def first_token(self, label: str) -> str:
        """First whitespace-separated token of a field (UUIDs, identifiers)."""
        parts = self.get(label).split()
        return parts[0] if parts else ""

    @property
    def file_system_personality(self) -> str:
        return self.get(DiskutilFields.FILE_SYSTEM_PERSONALITY)

    @property
    def part_of_whole(self) -> str:
        return self.first_token(DiskutilFields.PART_OF_WHOLE)


@dataclass(frozen=True)
class ResizeLimits:
    """Parsed output of `diskutil resizeVolume <disk> limits` (GB)."""

    recommended_minimum: float
    maximum: float

    @classmethod
    def from_output(cls, text: str) -> "ResizeLimits":
        info = DiskInfo.from_output(text)
        minimum = info.size_gb(DiskutilFields.RECOMMENDED_MINIMUM_SIZE)
        if minimum is None:
            # Newer diskutil drops the word "size"
            minimum = info.size_gb("Recommended minimum")
        maximum = info.size_gb(DiskutilFields.MAXIMUM_SIZE)
        if maximum is None:
            maximum = info.size_gb("Maximum")
        if minimum is None or maximum is None:
            raise AddVolumeError("Unable to read resize limits from diskutil output.")
        return cls(recommended_minimum=minimum, maximum=maximum)


# =============================================================================
# diskutil Verbs
# =============================================================================


class Diskutil:
    """diskutil/mount queries and mutations over a CommandRunner."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def info(self, name: str) -> Tuple[bool, DiskInfo]:
        """Return (found, info) for a disk, volume name or identifier."""
        result = self.runner.run([Tools.DISKUTIL, "info", name], check=False, merge_stderr=True)
        if is_not_found(result.stdout, name):
            return False, DiskInfo(fields={})
        return True, DiskInfo.from_output(result.stdout)

    def list_disks(self) -> str:
        return self.runner.run([Tools.DISKUTIL, "list"]).stdout

    def resize_limits(self, disk: str) -> ResizeLimits:
        result = self.runner.run([Tools.DISKUTIL, "resizeVolume", disk, "limits"])
        return ResizeLimits.from_output(result.stdout)

    def is_corestorage(self, disk: str) -> bool:
        """False when diskutil reports the disk is not a CoreStorage disk."""
        result = self.runner.run([Tools.DISKUTIL, "coreStorage", "info", disk], check=False)
        expected = DiskutilMessages.NOT_CORESTORAGE.format(name=disk)
        output = f"{result.stderr or ''}\n{result.stdout or ''}"
        return not any(line.strip() == expected for line in output.splitlines())

    def mounted_filesystems(self) -> str:
        return self.runner.run([Tools.MOUNT]).stdout

    def unmount(self, identifier: str) -> None:
        self.runner.run(
            [Tools.DISKUTIL, "unmount", identifier],
            timeout=Limits.DISKUTIL_UNMOUNT_TIMEOUT,
            mutating=True,
        )

    def run_verb(self, verb: Sequence[str], args: Sequence[str], timeout: float) -> None:
        """Run a mutating diskutil verb (e.g. ["apfs", "addVolume"])."""
        self.runner.run([Tools.DISKUTIL, *verb, *args], timeout=timeout, mutating=True)


def format_gb(value: float) -> str:
    """Format a GB amount the way diskutil accepts it, with the G suffix."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text}{SIZE_SUFFIX}"


def floor_gb(value: float) -> float:
    """
    Round a GB amount down to the 0.01 that format_gb prints.

    Shrink targets must never round up past the partition's maximum.
    """
    return math.floor(round(value * 100, 6)) / 100
