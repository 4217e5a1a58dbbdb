#!/usr/bin/env python3
"""
Pytest configuration and shared fixtures for Add Encrypted Volume tests.

Sets up the Python path and provides FakeMac, a scripted stand-in for
sw_vers, diskutil, mount and security that is patched in for
subprocess.run so workflows run end to end on any OS.
"""

import logging
import subprocess
import sys
from pathlib import Path
from typing import Dict, List, Optional
from unittest.mock import patch

# =============================================================================
# Path Setup - Execute BEFORE any test imports
# =============================================================================

_tests_dir = Path(__file__).resolve().parent
_repo_root = _tests_dir.parent

if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))
if str(_tests_dir) not in sys.path:
    sys.path.insert(0, str(_tests_dir))

REPO_ROOT = _repo_root
TESTS_DIR = _tests_dir

import pytest

import diskutil_samples as samples
from encvolume import cli_output
from encvolume.cli_output import CLIOutput
from encvolume.config import VolumeRequest
from encvolume.constants import Tools


# =============================================================================
# Fake macOS command line
# =============================================================================


class FakeMac:
    """
    Answers subprocess.run() calls the way macOS utilities would.

    State is plain attributes so each test can set up the machine it
    needs; every argv is recorded in .calls.
    """

    def __init__(
        self,
        startup_info: str = samples.APFS_STARTUP_INFO,
        list_output: str = samples.APFS_LIST,
        new_volume_info: str = samples.NEW_APFS_VOLUME_INFO,
        new_volume_identifier: str = "disk1s5",
    ):
        self.product_version = "10.15.7"
        self.volumes: Dict[str, str] = {"Macintosh HD": startup_info}
        self.list_output = list_output
        self.mount_output = samples.MOUNT_WITHOUT_RECOVERY
        self.limits_output = samples.RESIZE_LIMITS
        self.corestorage = False
        self.new_volume_info = new_volume_info
        self.new_volume_identifier = new_volume_identifier
        self.register_new_volume = True
        self.failures: Dict[str, int] = {}
        self.calls: List[List[str]] = []

    # -------------------------------------------------------------------------

    def __call__(self, argv, **kwargs) -> subprocess.CompletedProcess:
        argv = list(argv)
        self.calls.append(argv)
        merge = kwargs.get("stderr") == subprocess.STDOUT

        tool, args = argv[0], argv[1:]
        key = " ".join([tool.rsplit("/", 1)[-1], *args[:2]])
        for prefix, code in self.failures.items():
            if key.startswith(prefix):
                return self._result(argv, code, stderr=f"{prefix} failed\n", merge=merge)

        if tool == Tools.SW_VERS:
            return self._result(argv, 0, f"{self.product_version}\n")
        if tool == Tools.MOUNT:
            return self._result(argv, 0, self.mount_output)
        if tool == Tools.SECURITY:
            return self._result(argv, 0)
        if tool == Tools.DISKUTIL:
            return self._diskutil(argv, args, merge)
        raise AssertionError(f"Unexpected command: {argv}")

    def _diskutil(self, argv, args, merge) -> subprocess.CompletedProcess:
        verb = args[0]
        if verb == "info":
            name = args[1]
            if name in self.volumes:
                return self._result(argv, 0, self.volumes[name])
            return self._result(argv, 1, stderr=f"Could not find disk: {name}\n", merge=merge)
        if verb == "list":
            return self._result(argv, 0, self.list_output)
        if verb == "resizeVolume" and args[-1] == "limits":
            return self._result(argv, 0, self.limits_output)
        if args[:2] == ["coreStorage", "info"]:
            if self.corestorage:
                return self._result(argv, 0, "Core Storage Properties:\n   Role: Logical Volume (LV)\n")
            return self._result(argv, 1, stderr=f"{args[2]} is not a CoreStorage disk\n")
        if args[:2] == ["apfs", "addVolume"]:
            return self._add_volume(argv, args[4])
        if verb == "resizeVolume":
            return self._add_volume(argv, args[4])
        if args[:2] == ["coreStorage", "resizeStack"]:
            return self._add_volume(argv, args[5])
        if args[:2] in (["apfs", "encryptVolume"], ["coreStorage", "convert"]) or verb == "unmount":
            return self._result(argv, 0)
        raise AssertionError(f"Unexpected diskutil call: {argv}")

    def _add_volume(self, argv, name: str) -> subprocess.CompletedProcess:
        if self.register_new_volume:
            self.volumes[name] = (
                f"   Device Identifier:         {self.new_volume_identifier}\n" + self.new_volume_info
            )
        return self._result(argv, 0)

    @staticmethod
    def _result(argv, code: int, stdout: str = "", stderr: str = "", merge: bool = False):
        if merge:
            return subprocess.CompletedProcess(argv, code, stdout=stdout + stderr, stderr=None)
        return subprocess.CompletedProcess(argv, code, stdout=stdout, stderr=stderr)

    # -------------------------------------------------------------------------

    def commands(self, tool: Optional[str] = None) -> List[List[str]]:
        """Recorded calls, optionally filtered by tool path."""
        return [c for c in self.calls if tool is None or c[0] == tool]

    def find_call(self, *words: str) -> Optional[List[str]]:
        """First recorded call whose argv starts with tool + words."""
        for call in self.calls:
            if call[1 : 1 + len(words)] == list(words):
                return call
        return None


# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture
def fake_mac():
    """FakeMac patched in for subprocess.run, with an APFS startup disk."""
    mac = FakeMac()
    with patch("encvolume.diskutil.subprocess.run", side_effect=mac):
        yield mac


@pytest.fixture
def hfs_mac(fake_mac):
    """Plain Journaled HFS+ startup disk with a mounted Recovery HD."""
    fake_mac.volumes["Macintosh HD"] = samples.HFS_STARTUP_INFO
    fake_mac.list_output = samples.HFS_LIST
    fake_mac.mount_output = samples.MOUNT_WITH_RECOVERY
    fake_mac.new_volume_info = samples.NEW_CORESTORAGE_VOLUME_INFO
    fake_mac.new_volume_identifier = "disk0s4"
    return fake_mac


@pytest.fixture
def corestorage_mac(hfs_mac):
    """CoreStorage startup disk."""
    hfs_mac.volumes["Macintosh HD"] = samples.CORESTORAGE_STARTUP_INFO
    hfs_mac.corestorage = True
    hfs_mac.new_volume_identifier = "disk2"
    return hfs_mac


@pytest.fixture
def request_factory():
    """Build a VolumeRequest with test defaults (no settle delay)."""

    def _make(**overrides) -> VolumeRequest:
        values = dict(
            startup_disk_name="Macintosh HD",
            volume_name="Data",
            volume_size=50.0,
            volume_format_apfs="APFS",
            volume_format_classic="Journaled HFS+",
            settle_delay=0,
        )
        values.update(overrides)
        return VolumeRequest(**values)

    return _make


@pytest.fixture
def output(monkeypatch):
    """Unicode CLIOutput installed as the default instance."""
    out = CLIOutput(use_unicode=True)
    monkeypatch.setattr(cli_output, "_default_output", out)
    return out


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop handlers main() attached so they never outlive a test's streams."""
    yield
    logger = logging.getLogger("encvolume")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def _as_root():
    """Pretend to run as root so no privilege warning is printed."""
    with patch("encvolume.volume.is_admin", return_value=True):
        yield
