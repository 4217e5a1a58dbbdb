"""
Captured diskutil/mount output used by the tests.

Trimmed to the fields the tool reads, with the surrounding noise kept
so parsing is exercised against realistic text.
"""

APFS_STARTUP_INFO = """\
   Device Identifier:         disk1s1
   Device Node:               /dev/disk1s1
   Whole:                     No
   Part of Whole:             disk1

   Volume Name:               Macintosh HD
   Mounted:                   Yes
   Mount Point:               /

   Partition Type:            41504653-0000-11AA-AA11-00306543ECAC
   File System Personality:   APFS
   Type (Bundle):             apfs
   Name (User Visible):       APFS

   Disk / Partition UUID:     0A81F3B1-51D9-3335-B3E3-169C3640360D
   Volume UUID:               0A81F3B1-51D9-3335-B3E3-169C3640360D
   Disk Size:                 500.1 GB (500068036608 Bytes) (exactly 976695384 512-Byte-Units)
   Volume Used Space:         123.4 GB (123400000000 Bytes) (exactly 241015625 512-Byte-Units)
"""

HFS_STARTUP_INFO = """\
   Device Identifier:         disk0s2
   Device Node:               /dev/disk0s2
   Whole:                     No
   Part of Whole:             disk0

   Volume Name:               Macintosh HD
   Mounted:                   Yes
   Mount Point:               /

   Partition Type:            Apple_HFS
   File System Personality:   Journaled HFS+
   Type (Bundle):             hfs
   Name (User Visible):       Mac OS Extended (Journaled)
   Journal:                   Journal size 40960 KB at offset 0xe8e000
   Owners:                    Enabled

   Disk Size:                 499.4 GB (499418034176 Bytes) (exactly 975425848 512-Byte-Units)
   Volume Used Space:         120.0 GB (120000000000 Bytes) (exactly 234375000 512-Byte-Units)
"""

CORESTORAGE_STARTUP_INFO = """\
   Device Identifier:         disk1
   Device Node:               /dev/disk1
   Whole:                     Yes
   Part of Whole:             disk1

   Volume Name:               Macintosh HD
   Mounted:                   Yes
   Mount Point:               /

   Content (IOContent):       Apple_HFS
   File System Personality:   Journaled HFS+
   Type (Bundle):             hfs

   Disk Size:                 250.0 GB (250000000000 Bytes) (exactly 488281250 512-Byte-Units)
   Volume Used Space:         100.0 GB (100000000000 Bytes) (exactly 195312500 512-Byte-Units)

   LV UUID:                   5E9D8D5D-3C09-4D65-8E2B-0F0F6A9B1C11
"""

EXFAT_STARTUP_INFO = """\
   Device Identifier:         disk2s1
   Part of Whole:             disk2
   Volume Name:               Macintosh HD
   File System Personality:   ExFAT
"""

NEW_APFS_VOLUME_INFO = """\
   Part of Whole:             disk1
   Volume Name:               Data
   File System Personality:   APFS
   Volume UUID:               7C3D1E52-8A1B-4C3F-9E0D-2B6A4F1E9D37
"""

NEW_CORESTORAGE_VOLUME_INFO = """\
   Volume Name:               Data
   File System Personality:   Journaled HFS+
   LV UUID:                   9B2C4A61-0E5F-4D7A-8C31-6F2E1D0B7A48
"""

APFS_LIST = """\
/dev/disk0 (internal, physical):
   #:                       TYPE NAME                    SIZE       IDENTIFIER
   0:      GUID_partition_scheme                        *500.3 GB   disk0
   1:                        EFI EFI                     209.7 MB   disk0s1
   2:                 Apple_APFS Container disk1         500.1 GB   disk0s2

/dev/disk1 (synthesized):
   #:                       TYPE NAME                    SIZE       IDENTIFIER
   0:      APFS Container Scheme -                      +500.1 GB   disk1
                                 Physical Store disk0s2
   1:                APFS Volume Macintosh HD            123.4 GB   disk1s1
   2:                APFS Volume Preboot                 45.1 MB    disk1s2
   3:                APFS Volume Recovery                510.4 MB   disk1s3
   4:                APFS Volume VM                      1.1 GB     disk1s4
"""

# New volume "Data" (disk1s3, reused slice) listed before look-alike names
DATA_LOOKALIKE_LIST = """\
/dev/disk1 (synthesized):
   #:                       TYPE NAME                    SIZE       IDENTIFIER
   0:      APFS Container Scheme -                      +500.1 GB   disk1
                                 Physical Store disk0s2
   1:                APFS Volume Macintosh HD            15.0 GB    disk1s1
   2:                APFS Volume Preboot                 45.1 MB    disk1s2
   3:                APFS Volume Data                    20.5 KB    disk1s3
   4:                APFS Volume VM                      1.1 GB     disk1s4
   5:                APFS Volume Macintosh HD - Data     80.0 GB    disk1s5
   6:                APFS Volume Data 2                  12.0 GB    disk1s6
"""

HFS_LIST = """\
/dev/disk0 (internal, physical):
   #:                       TYPE NAME                    SIZE       IDENTIFIER
   0:      GUID_partition_scheme                        *500.3 GB   disk0
   1:                        EFI EFI                     209.7 MB   disk0s1
   2:                  Apple_HFS Macintosh HD            499.4 GB   disk0s2
   3:                 Apple_Boot Recovery HD             650.0 MB   disk0s3
"""

MOUNT_WITH_RECOVERY = """\
/dev/disk0s2 on / (hfs, local, journaled)
devfs on /dev (devfs, local, nobrowse)
/dev/disk0s3 on /Volumes/Recovery HD (hfs, local, nodev, nosuid, journaled)
"""

MOUNT_WITHOUT_RECOVERY = """\
/dev/disk0s2 on / (hfs, local, journaled)
devfs on /dev (devfs, local, nobrowse)
/dev/disk0s30 on /Volumes/Other (hfs, local, nodev, nosuid, journaled)
"""

# Older diskutil wording
RESIZE_LIMITS = """\
For device disk0s2 Macintosh HD:
   Current size:  499.4 GB (499418034176 Bytes)
   Minimum size:  125.3 GB (125300000000 Bytes)
   Recommended minimum size (if used with macOS):  200.0 GB (200000000000 Bytes)
   Maximum size (constrained by partition map):  499.4 GB (499418034176 Bytes)
"""

# Newer diskutil wording
RESIZE_LIMITS_MODERN = """\
Resize limits for partition disk0s2 Macintosh HD:
  Current partition size on map:       499.4 GB (499418034176 Bytes)
  Minimum (constrained by file usage): 215.7 GB (215737503744 Bytes)
  Recommended minimum (if used with macOS): 231.7 GB (231737503744 Bytes)
  Maximum (constrained by map space):  499.4 GB (499418034176 Bytes)
"""
