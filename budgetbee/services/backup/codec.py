"""
Backup Codec

Converts a BackupSnapshot to and from its two wire forms.

JSON backups are canonical camelCase JSON encrypted with AES-256-GCM:

    b"BBK1" || 12-byte random nonce || ciphertext + 16-byte tag

The magic prefix is bound in as associated data, so a blob that has
been truncated, re-labelled or tampered with fails authentication
instead of decrypting to garbage.

TEXT backups are human-readable reports. They are write-only.
"""

import json
import os
from datetime import datetime
from decimal import Decimal
from functools import cached_property
from typing import Optional

import structlog
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from pydantic import ValidationError

from budgetbee.models.backup import BackupFormat, BackupSnapshot
from budgetbee.services.backup.errors import (
    DecodeError,
    EncodeError,
    UnsupportedVersionError,
)


logger = structlog.get_logger(__name__)

MAGIC = b"BBK1"
NONCE_SIZE = 12
TAG_SIZE = 16
KEY_SIZE = 32
MIN_ITERATIONS = 10_000

REPORT_BANNER = "BudgetBee Backup"
REPORT_SEPARATOR = "-------------------"
REPORT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _sort_key(transaction) -> datetime:
    """Transaction date as naive local time, so aware and naive dates compare."""
    if transaction.date.tzinfo is None:
        return transaction.date
    return transaction.date.astimezone().replace(tzinfo=None)


class BackupCodec:
    """
    Encodes and decodes snapshots.

    The AES key is derived once per codec instance with
    PBKDF2-HMAC-SHA256 from the configured passphrase and salt.
    """

    def __init__(self, passphrase: str, salt: str, iterations: int = 65536):
        if not passphrase:
            raise ValueError("Backup passphrase cannot be empty")
        if not salt:
            raise ValueError("Backup salt cannot be empty")
        if iterations < MIN_ITERATIONS:
            raise ValueError(f"KDF iterations must be at least {MIN_ITERATIONS}")

        self._passphrase = passphrase
        self._salt = salt
        self._iterations = iterations

    @cached_property
    def _key(self) -> bytes:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_SIZE,
            salt=self._salt.encode("utf-8"),
            iterations=self._iterations,
        )
        return kdf.derive(self._passphrase.encode("utf-8"))

    # =========================================================================
    # ENCODING
    # =========================================================================

    def encode(self, snapshot: BackupSnapshot, fmt: BackupFormat) -> bytes:
        """
        Encode a snapshot in the given format.

        The metadata transaction count is restamped from the snapshot's
        actual transactions before encoding.

        Raises:
            EncodeError: If serialization or encryption fails
        """
        snapshot = snapshot.with_counted_metadata()

        try:
            if fmt == BackupFormat.JSON:
                return self._encrypt(self.to_json(snapshot).encode("utf-8"))
            if fmt == BackupFormat.TEXT:
                return self.to_text(snapshot).encode("utf-8")
        except EncodeError:
            raise
        except Exception as e:
            raise EncodeError(f"Failed to encode {fmt.value} backup: {e}") from e

        raise EncodeError(f"Unknown backup format: {fmt!r}")

    @staticmethod
    def to_json(snapshot: BackupSnapshot) -> str:
        """Canonical JSON document, absent fields omitted."""
        return snapshot.model_dump_json(by_alias=True, exclude_none=True)

    @staticmethod
    def to_text(snapshot: BackupSnapshot) -> str:
        """Human-readable report of a snapshot."""
        metadata = snapshot.metadata
        currency = snapshot.currency or "USD"
        budget = snapshot.monthly_budget if snapshot.monthly_budget is not None else Decimal("0")
        created = datetime.fromtimestamp(metadata.created_at / 1000)

        lines = [
            REPORT_BANNER,
            "=" * len(REPORT_BANNER),
            "",
            "Backup Information:",
            f"Created: {created.strftime(REPORT_DATE_FORMAT)}",
            f"Device: {metadata.device_model}",
            f"App Version: {metadata.app_version}",
            f"Transaction Count: {metadata.transaction_count}",
            "",
            "Budget Information:",
            f"Currency: {currency}",
            f"Monthly Budget: {currency} {budget:.2f}",
            "",
            "Transactions:",
        ]

        for transaction in sorted(snapshot.transactions or [], key=_sort_key, reverse=True):
            lines.extend([
                f"Date: {transaction.date.strftime(REPORT_DATE_FORMAT)}",
                f"Title: {transaction.title}",
                f"Amount: {currency} {transaction.amount:.2f}",
                f"Type: {transaction.type.value}",
                f"Category: {transaction.category}",
                REPORT_SEPARATOR,
            ])

        return "\n".join(lines) + "\n"

    def _encrypt(self, plaintext: bytes) -> bytes:
        nonce = os.urandom(NONCE_SIZE)
        return MAGIC + nonce + AESGCM(self._key).encrypt(nonce, plaintext, MAGIC)

    # =========================================================================
    # DECODING
    # =========================================================================

    def decode(
        self,
        data: bytes,
        fmt: BackupFormat,
        max_version: Optional[int] = None,
    ) -> BackupSnapshot:
        """
        Decode backup bytes into a snapshot.

        Args:
            data: Raw backup bytes
            fmt: Format the bytes were written in
            max_version: Newest schema version accepted. Checked
                         before the document is fully validated.

        Raises:
            DecodeError: Undecryptable, malformed or text-format data
            UnsupportedVersionError: Schema newer than max_version
        """
        if fmt == BackupFormat.TEXT:
            raise DecodeError("Text backups are reports and cannot be restored")
        if fmt != BackupFormat.JSON:
            raise DecodeError(f"Unknown backup format: {fmt!r}")

        document = self._parse(self._decrypt(bytes(data)))

        if max_version is not None:
            version = self.read_schema_version(document)
            if version is not None and version > max_version:
                raise UnsupportedVersionError(version, max_version)

        try:
            return BackupSnapshot.model_validate(document)
        except ValidationError as e:
            raise DecodeError(f"Backup does not match the snapshot schema: {e}") from e

    @staticmethod
    def read_schema_version(document: dict) -> Optional[int]:
        """
        Schema version of a parsed document, or None if it is missing.
        Legacy documents use the "version" key.

        Raises:
            DecodeError: The version is present but not a whole number
        """
        metadata = document.get("metadata")
        if not isinstance(metadata, dict):
            return None
        version = metadata.get("schemaVersion", metadata.get("version"))
        if version is None:
            return None
        if isinstance(version, float) and version.is_integer():
            return int(version)
        if isinstance(version, bool) or not isinstance(version, int):
            raise DecodeError(f"Backup schema version is not a whole number: {version!r}")
        return version

    def _decrypt(self, data: bytes) -> bytes:
        if not data.startswith(MAGIC):
            raise DecodeError("Not a BudgetBee backup (bad header)")
        if len(data) < len(MAGIC) + NONCE_SIZE + TAG_SIZE:
            raise DecodeError("Backup is truncated")

        nonce = data[len(MAGIC):len(MAGIC) + NONCE_SIZE]
        ciphertext = data[len(MAGIC) + NONCE_SIZE:]

        try:
            return AESGCM(self._key).decrypt(nonce, ciphertext, MAGIC)
        except InvalidTag as e:
            logger.warning("backup_authentication_failed", size=len(data))
            raise DecodeError("Backup failed authentication (wrong key or corrupted data)") from e

    @staticmethod
    def _parse(plaintext: bytes) -> dict:
        try:
            document = json.loads(plaintext.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DecodeError(f"Backup is not valid JSON: {e}") from e

        if not isinstance(document, dict):
            raise DecodeError("Backup document must be a JSON object")
        return document
