"""
Backup Services Package

Encrypted JSON and plain-text backups of the transaction store,
plus restore from files and streams.
"""

from budgetbee.services.backup.errors import (
    BackupError,
    BackupIOError,
    DecodeError,
    EncodeError,
    UnsupportedVersionError,
)
from budgetbee.services.backup.codec import BackupCodec
from budgetbee.services.backup.manager import BackupManager

__all__ = [
    # Exceptions
    "BackupError",
    "BackupIOError",
    "DecodeError",
    "EncodeError",
    "UnsupportedVersionError",
    # Services
    "BackupCodec",
    "BackupManager",
]
