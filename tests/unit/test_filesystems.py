#!/usr/bin/env python3
"""Unit tests for workflow selection by File System Personality."""

import pytest

from encvolume.constants import DiskutilFields, ExitCodes
from encvolume.errors import UnsupportedFileSystemError
from encvolume.filesystems import APFS, CLASSIC, CORESTORAGE, select_workflow


class TestSelectWorkflow:
    @pytest.mark.parametrize("personality", ["APFS", "APFS (Case-sensitive)", "Encrypted APFS"])
    def test_apfs(self, personality):
        assert select_workflow(personality) is APFS

    def test_apfs_ignores_corestorage_flag(self):
        assert select_workflow("APFS", corestorage=True) is APFS

    def test_classic(self):
        assert select_workflow("Journaled HFS+") is CLASSIC

    def test_corestorage(self):
        assert select_workflow("Journaled HFS+", corestorage=True) is CORESTORAGE

    @pytest.mark.parametrize("personality", ["ExFAT", "MS-DOS FAT32", "HFS+", ""])
    def test_unsupported(self, personality):
        with pytest.raises(UnsupportedFileSystemError) as exc_info:
            select_workflow(personality)
        assert exc_info.value.exit_code == ExitCodes.FAILURE
        assert exc_info.value.message == f"ERROR: Unsupported file system: {personality}"


class TestWorkflowTable:
    def test_verbs(self):
        assert APFS.add_verb == ("apfs", "addVolume")
        assert APFS.encrypt_verb == ("apfs", "encryptVolume")
        assert CLASSIC.add_verb == ("resizeVolume",)
        assert CORESTORAGE.add_verb == ("coreStorage", "resizeStack")
        assert CLASSIC.encrypt_verb == CORESTORAGE.encrypt_verb == ("coreStorage", "convert")

    def test_uuid_fields(self):
        assert APFS.uuid_field == DiskutilFields.VOLUME_UUID
        assert CLASSIC.uuid_field == CORESTORAGE.uuid_field == DiskutilFields.LV_UUID

    def test_only_hfs_workflows_resize(self):
        assert not APFS.resizes_startup_disk
        assert CLASSIC.resizes_startup_disk and CORESTORAGE.resizes_startup_disk
