# encvolume/filesystems.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from encvolume.constants import DiskutilFields, FileSystemPersonality
from encvolume.errors import UnsupportedFileSystemError


@dataclass(frozen=True)
class VolumeWorkflow:
    display: str
    add_verb: Tuple[str, ...]  # diskutil verb; args follow
    encrypt_verb: Tuple[str, ...]
    encrypt_user_args: Tuple[str, ...]
    uuid_field: str
    resizes_startup_disk: bool  # shrinks the startup disk to make room


APFS = VolumeWorkflow(
    display="APFS",
    add_verb=("apfs", "addVolume"),
    encrypt_verb=("apfs", "encryptVolume"),
    encrypt_user_args=("-user", "disk"),
    uuid_field=DiskutilFields.VOLUME_UUID,
    resizes_startup_disk=False,
)

CLASSIC = VolumeWorkflow(
    display="Journaled HFS+",
    add_verb=("resizeVolume",),
    encrypt_verb=("coreStorage", "convert"),
    encrypt_user_args=(),
    uuid_field=DiskutilFields.LV_UUID,
    resizes_startup_disk=True,
)

CORESTORAGE = VolumeWorkflow(
    display="Journaled HFS+ (CoreStorage)",
    add_verb=("coreStorage", "resizeStack"),
    encrypt_verb=("coreStorage", "convert"),
    encrypt_user_args=(),
    uuid_field=DiskutilFields.LV_UUID,
    resizes_startup_disk=True,
)


def is_apfs(personality: str) -> bool:
    return FileSystemPersonality.APFS in personality


def is_journaled_hfs_plus(personality: str) -> bool:
    return FileSystemPersonality.JOURNALED_HFS_PLUS in personality


def select_workflow(personality: str, corestorage: bool = False) -> VolumeWorkflow:
    """Pick the workflow for a startup disk's File System Personality."""
    if is_apfs(personality):
        return APFS
    if is_journaled_hfs_plus(personality):
        return CORESTORAGE if corestorage else CLASSIC
    raise UnsupportedFileSystemError(f"ERROR: Unsupported file system: {personality}")
