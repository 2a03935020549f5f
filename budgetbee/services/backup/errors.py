"""Backup exception hierarchy."""

from typing import Optional


class BackupError(Exception):
    """Base exception for backup operations."""
    pass


class EncodeError(BackupError):
    """A snapshot could not be serialized or encrypted."""
    pass


class DecodeError(BackupError):
    """A backup could not be decrypted, parsed or validated."""
    pass


class UnsupportedVersionError(BackupError):
    """A backup was written by a newer schema than this build understands."""

    def __init__(self, version: int, supported: int, message: Optional[str] = None):
        self.version = version
        self.supported = supported
        super().__init__(
            message or f"Backup schema version {version} is newer than supported version {supported}"
        )


class BackupIOError(BackupError):
    """Reading or writing a backup file or stream failed."""
    pass
