# encvolume/volume.py - Encrypted volume creation workflow
"""
Create, encrypt and register an additional volume on the startup disk.

Sequence (each step exits early through an AddVolumeError):

1. macOS >= 10.12
2. Target volume not already present (VolumePresent ends the run with 0)
3. Startup disk present
4. Branch on File System Personality:
   - APFS: add a volume to the startup disk's container with a quota
   - Journaled HFS+: shrink the startup disk (plain partition or
     CoreStorage stack) after a space check, unmount Recovery HD
5. Add volume, wait, read its identifier from `diskutil info <volume>`
6. Encrypt with a random passphrase, wait
7. Read the volume UUID
8. Save the passphrase to the System keychain under that UUID
"""

import logging
import time
from dataclasses import dataclass
from typing import List, Optional

from encvolume.cli_output import CLIOutput, get_output
from encvolume.config import VolumeRequest
from encvolume.constants import RECOVERY_VOLUME_NAME, DiskutilFields
from encvolume.diskutil import CommandRunner, Diskutil, find_identifier, format_gb
from encvolume.errors import AddVolumeError, VolumeNotFoundError
from encvolume.filesystems import APFS, CORESTORAGE, VolumeWorkflow, is_journaled_hfs_plus, select_workflow
from encvolume.keychain import generate_passphrase, save_volume_password
from encvolume.limits import Limits
from encvolume.platform import check_macos, is_admin
from encvolume.safety import (
    SpaceCheckResult,
    check_disk_space_classic,
    check_disk_space_corestorage,
    check_startup_disk,
    check_volume,
)

_volume_logger = logging.getLogger("encvolume.volume")

# Stand-ins for values that only exist after a real run
DRY_RUN_IDENTIFIER = "<new volume identifier>"
DRY_RUN_UUID = "<new volume UUID>"


@dataclass
class VolumeResult:
    """Outcome of a completed run. Never carries the passphrase."""

    workflow: VolumeWorkflow
    volume_name: str
    volume_identifier: str
    volume_uuid: str
    startup_disk_new_size: Optional[float] = None
    space_check: Optional[SpaceCheckResult] = None
    dry_run: bool = False


@dataclass
class VolumePlan:
    """Arguments for the add and encrypt steps of one run."""

    workflow: VolumeWorkflow
    device: str
    volume_format: str
    startup_disk_new_size: Optional[float] = None
    space_check: Optional[SpaceCheckResult] = None

    def add_args(self, request: VolumeRequest) -> List[str]:
        size = format_gb(request.volume_size)
        if self.workflow is APFS:
            return [self.device, self.volume_format, request.volume_name, "-quota", size]
        return [
            self.device,
            format_gb(self.startup_disk_new_size),
            self.volume_format,
            request.volume_name,
            size,
        ]

    def encrypt_args(self, volume_identifier: str, passphrase: str) -> List[str]:
        return [volume_identifier, *self.workflow.encrypt_user_args, "-passphrase", passphrase]


class VolumeCreator:
    """Runs the workflow for one VolumeRequest."""

    def __init__(self, request: VolumeRequest, runner: CommandRunner, output: Optional[CLIOutput] = None):
        self.request = request
        self.runner = runner
        self.diskutil = Diskutil(runner)
        self.out = output or get_output()

    @property
    def dry_run(self) -> bool:
        return self.runner.dry_run

    def _report(self, message: str) -> None:
        self.out.log(f"[dry run] {message}" if self.dry_run else message)

    def _settle(self) -> None:
        if self.dry_run or self.request.settle_delay <= 0:
            return
        time.sleep(self.request.settle_delay)

    # -------------------------------------------------------------------------
    # Planning
    # -------------------------------------------------------------------------

    def plan(self) -> VolumePlan:
        """
        Run the preflight checks and decide how to add the volume.

        Raises:
            VolumePresent: Nothing to do
            AddVolumeError: Any precondition failed
        """
        request = self.request
        check_macos(self.runner)
        check_volume(self.diskutil, request.volume_name)
        startup_info = check_startup_disk(self.diskutil, request.startup_disk_name)

        personality = startup_info.file_system_personality
        _volume_logger.info("Startup disk %s personality: %s", request.startup_disk_name, personality)

        corestorage = is_journaled_hfs_plus(personality) and self.diskutil.is_corestorage(
            request.startup_disk_name
        )
        workflow = select_workflow(personality, corestorage=corestorage)

        if workflow is APFS:
            container = startup_info.part_of_whole
            if not container:
                raise AddVolumeError(
                    f"ERROR: Unable to find the APFS container of {request.startup_disk_name}."
                )
            return VolumePlan(workflow=APFS, device=container, volume_format=request.volume_format_apfs)

        if workflow is CORESTORAGE:
            space = check_disk_space_corestorage(
                startup_info,
                request.startup_disk_name,
                request.volume_name,
                request.volume_size,
                request.corestorage_capacity_percent,
            )
        else:
            space = check_disk_space_classic(
                self.diskutil, request.startup_disk_name, request.volume_name, request.volume_size
            )
        return VolumePlan(
            workflow=workflow,
            device=request.startup_disk_name,
            volume_format=request.volume_format_classic,
            startup_disk_new_size=space.new_size,
            space_check=space,
        )

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def unmount_recovery_volume(self) -> bool:
        """Unmount Recovery HD if it is mounted. Returns True if unmounted."""
        identifier = find_identifier(self.diskutil.list_disks(), RECOVERY_VOLUME_NAME)
        if not identifier:
            _volume_logger.debug("No %s volume listed", RECOVERY_VOLUME_NAME)
            return False

        device = f"/dev/{identifier}"
        mounted = any(
            line.split()[0] == device for line in self.diskutil.mounted_filesystems().splitlines() if line.strip()
        )
        if not mounted:
            return False

        self.diskutil.unmount(identifier)
        self._report("Unmounted Recovery volume.")
        return True

    def add_volume(self, plan: VolumePlan) -> str:
        """Create the volume and return its device identifier."""
        request = self.request
        self.diskutil.run_verb(
            plan.workflow.add_verb, plan.add_args(request), timeout=Limits.DISKUTIL_ADD_VOLUME_TIMEOUT
        )
        self._report(
            f"Volume {request.volume_name} created ({format_gb(request.volume_size)}), "
            f"formatted as {plan.volume_format}."
        )
        if plan.startup_disk_new_size is not None:
            self._report(
                f"Startup disk {request.startup_disk_name} resized ({format_gb(plan.startup_disk_new_size)})."
            )
        self._settle()

        found, info = self.diskutil.info(request.volume_name)
        identifier = info.first_token(DiskutilFields.DEVICE_IDENTIFIER) if found else ""
        if identifier:
            return identifier
        if self.dry_run:
            return DRY_RUN_IDENTIFIER
        raise VolumeNotFoundError(f"ERROR: Volume {request.volume_name} not found after creation.")

    def encrypt_volume(self, plan: VolumePlan, volume_identifier: str, passphrase: str) -> None:
        self.diskutil.run_verb(
            plan.workflow.encrypt_verb,
            plan.encrypt_args(volume_identifier, passphrase),
            timeout=Limits.DISKUTIL_ENCRYPT_TIMEOUT,
        )
        self._settle()
        self._report(f"Volume {self.request.volume_name} is encrypting with a randomized password.")

    def volume_uuid(self, plan: VolumePlan) -> str:
        found, info = self.diskutil.info(self.request.volume_name)
        volume_uuid = info.first_token(plan.workflow.uuid_field) if found else ""
        if volume_uuid:
            return volume_uuid
        if self.dry_run:
            return DRY_RUN_UUID
        raise VolumeNotFoundError(
            f"ERROR: Unable to read {plan.workflow.uuid_field} of {self.request.volume_name}; "
            "password was not saved."
        )

    # -------------------------------------------------------------------------
    # Orchestration
    # -------------------------------------------------------------------------

    def run(self) -> VolumeResult:
        """
        Create the encrypted volume and save its password.

        Raises:
            VolumePresent: Volume already exists (success, nothing done)
            AddVolumeError: Any failure; carries the exit code
        """
        if not is_admin() and not self.dry_run:
            self.out.warn("Not running as root; diskutil and the System keychain will likely refuse changes.")

        request = self.request
        if request.computer_name or request.username or request.mount_point:
            _volume_logger.info(
                "Jamf Pro context: computer %s, user %s, target volume %s",
                request.computer_name,
                request.username,
                request.mount_point,
            )

        plan = self.plan()
        _volume_logger.info("Using %s workflow on %s", plan.workflow.display, plan.device)

        if plan.workflow.resizes_startup_disk:
            self.unmount_recovery_volume()

        volume_identifier = self.add_volume(plan)
        passphrase = generate_passphrase()
        self.encrypt_volume(plan, volume_identifier, passphrase)
        volume_uuid = self.volume_uuid(plan)

        save_volume_password(self.runner, volume_uuid, self.request.volume_name, passphrase)
        self._report(f"{self.request.volume_name} password saved to the System keychain.")

        return VolumeResult(
            workflow=plan.workflow,
            volume_name=self.request.volume_name,
            volume_identifier=volume_identifier,
            volume_uuid=volume_uuid,
            startup_disk_new_size=plan.startup_disk_new_size,
            space_check=plan.space_check,
            dry_run=self.dry_run,
        )


def add_encrypted_volume(
    request: VolumeRequest, runner: Optional[CommandRunner] = None, output: Optional[CLIOutput] = None
) -> VolumeResult:
    """Convenience wrapper: run the full workflow for request."""
    return VolumeCreator(request, runner or CommandRunner(), output).run()
