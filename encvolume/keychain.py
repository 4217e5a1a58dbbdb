#!/usr/bin/env python3
"""
Secret handling (SSOT) - encvolume/keychain.py

SINGLE SOURCE OF TRUTH for the volume passphrase.

- Generation: CSPRNG (secrets module), fixed alphabet without the
  easily-confused 'O' and 'l'
- Storage: System keychain generic password, keyed by volume UUID
- NEVER print or log the passphrase; command logs go through
  diskutil.redact_argv()

Usage:
    from encvolume.keychain import generate_passphrase, save_volume_password

    passphrase = generate_passphrase()
    save_volume_password(runner, volume_uuid, "Data", passphrase)
"""

import logging
import secrets

from encvolume.constants import Keychain, Passphrase, Tools
from encvolume.diskutil import CommandRunner
from encvolume.limits import Limits

_keychain_logger = logging.getLogger("encvolume.keychain")


def generate_passphrase(length: int = Limits.PASSPHRASE_LENGTH, alphabet: str = Passphrase.ALPHABET) -> str:
    """Return a random passphrase drawn uniformly from alphabet."""
    if length <= 0:
        raise ValueError("Passphrase length must be positive")
    if not alphabet:
        raise ValueError("Passphrase alphabet must not be empty")
    return "".join(secrets.choice(alphabet) for _ in range(length))


def add_generic_password_argv(volume_uuid: str, volume_name: str, passphrase: str) -> list:
    """
    Build the `security add-generic-password` command line.

    Account and service are both the volume UUID, the label is the
    volume name, and -A allows any application to read the item.
    """
    return [
        Tools.SECURITY,
        "add-generic-password",
        "-a",
        volume_uuid,
        "-l",
        volume_name,
        "-s",
        volume_uuid,
        "-w",
        passphrase,
        "-A",
        "-D",
        Keychain.ITEM_KIND,
        Keychain.SYSTEM_KEYCHAIN,
    ]


def save_volume_password(runner: CommandRunner, volume_uuid: str, volume_name: str, passphrase: str) -> None:
    """
    Save the encrypted volume passphrase to the System keychain.

    Raises:
        CommandError: security exited non-zero (e.g. not running as root)
    """
    _keychain_logger.info("Saving password for %s (%s) to %s", volume_name, volume_uuid, Keychain.SYSTEM_KEYCHAIN)
    runner.run(
        add_generic_password_argv(volume_uuid, volume_name, passphrase),
        timeout=Limits.KEYCHAIN_TIMEOUT,
        mutating=True,
    )
