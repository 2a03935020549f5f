"""
Backup Manager

Builds snapshots from the store, writes them to local backup files,
copies them to external streams, lists them, and restores from them.

DESIGN DECISION: Every public operation returns a BackupResult.
Faults are converted to BackupFailure values carrying the underlying
exception, so callers (usually UI code) never need a try block.

RESTORE ORDER:
1. Stage (streams only) and read the bytes
2. Decrypt, parse and check the schema version
3. Apply present fields to the store

Nothing is written to the store until step 3, so a backup that fails
to decode or comes from a newer schema leaves the store untouched.
"""

import os
import re
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Callable, Optional, Union

import structlog

from budgetbee.audit import AuditLogger
from budgetbee.models.backup import (
    BackupFailure,
    BackupFormat,
    BackupMetadata,
    BackupResult,
    BackupSnapshot,
    BackupSuccess,
)
from budgetbee.services.backup.codec import BackupCodec
from budgetbee.services.backup.errors import BackupIOError
from budgetbee.store.transaction_store import TransactionStore


logger = structlog.get_logger(__name__)

FILE_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"

RestoreSource = Union[str, Path, BinaryIO]


class BackupManager:
    """
    Local backup and restore for one TransactionStore.

    Backup files are named <prefix>_Backup_<yyyyMMdd_HHmmss>.<ext> and
    accumulate in the backups directory; nothing prunes them.
    """

    def __init__(
        self,
        store: TransactionStore,
        codec: BackupCodec,
        backups_dir: Path,
        staging_dir: Path,
        schema_version: int = 1,
        file_prefix: str = "BudgetBee",
        app_version: str = "unknown",
        device_model: str = "unknown",
        clock: Callable[[], datetime] = datetime.now,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self.store = store
        self.codec = codec
        self.backups_dir = Path(backups_dir)
        self.staging_dir = Path(staging_dir)
        self.schema_version = schema_version
        self.file_prefix = file_prefix
        self.app_version = app_version
        self.device_model = device_model
        self._clock = clock
        self._audit = audit_logger or AuditLogger()
        self._file_pattern = re.compile(
            rf"^{re.escape(file_prefix)}_Backup_\d{{8}}_\d{{6}}\.(?P<ext>json|text)$"
        )

    # =========================================================================
    # SNAPSHOTS
    # =========================================================================

    def build_snapshot(self, now: Optional[datetime] = None) -> BackupSnapshot:
        """Capture the store's current state."""
        now = now or self._clock()
        transactions = self.store.get_transactions()

        return BackupSnapshot(
            metadata=BackupMetadata(
                schema_version=self.schema_version,
                created_at=int(now.timestamp() * 1000),
                device_model=self.device_model,
                app_version=self.app_version,
                transaction_count=len(transactions),
            ),
            transactions=transactions,
            monthly_budget=self.store.get_monthly_budget(),
            currency=self.store.get_selected_currency(),
            notification_preferences=self.store.get_notification_preferences(),
        )

    def backup_file_name(self, fmt: BackupFormat, now: datetime) -> str:
        return f"{self.file_prefix}_Backup_{now.strftime(FILE_TIMESTAMP_FORMAT)}.{fmt.extension}"

    # =========================================================================
    # CREATE / EXPORT
    # =========================================================================

    def create_local_backup(self, fmt: BackupFormat = BackupFormat.JSON) -> BackupResult:
        """
        Write a backup of the current state into the backups directory.

        Two backups of the same format taken within the same second
        share a file name; the later one replaces the earlier.
        """
        try:
            now = self._clock()
            snapshot = self.build_snapshot(now).with_counted_metadata()
            data = self.codec.encode(snapshot, fmt)
            path = self.backups_dir / self.backup_file_name(fmt, now)
            self._write_atomic(path, data)
        except Exception as e:
            self._audit.log_backup_failed("create_local_backup", e)
            return BackupFailure(message=f"Failed to create backup: {e}", exception=e)

        self._audit.log_backup_created(path.name, snapshot.metadata.transaction_count, fmt.value)
        return BackupSuccess(path=path, metadata=snapshot.metadata)

    def export_to_stream(
        self,
        sink: BinaryIO,
        fmt: BackupFormat = BackupFormat.JSON,
    ) -> BackupResult:
        """
        Create a local backup and copy its bytes into a caller stream.

        The stream is flushed but not closed; it belongs to the caller.
        """
        result = self.create_local_backup(fmt)
        if not result.ok:
            return result

        try:
            with open(result.path, "rb") as f:
                shutil.copyfileobj(f, sink)
            sink.flush()
            size = result.path.stat().st_size
        except Exception as e:
            self._audit.log_backup_failed("export_to_stream", e)
            return BackupFailure(message=f"Failed to export backup: {e}", exception=e)

        self._audit.log_backup_exported(result.path.name, size)
        return result

    def _write_atomic(self, path: Path, data: bytes) -> None:
        """Write to a temp file in the same directory, then rename."""
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BackupIOError(f"Cannot create backups directory {path.parent}: {e}") from e

        temp_path = path.with_name(path.name + ".tmp")
        try:
            with open(temp_path, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            temp_path.replace(path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            raise BackupIOError(f"Cannot write backup file {path}: {e}") from e

    # =========================================================================
    # LISTING
    # =========================================================================

    def list_backups(self, fmt: Optional[BackupFormat] = None) -> list[Path]:
        """
        Backup files in the backups directory, newest first.

        Files that don't follow the backup naming convention are ignored.
        """
        if not self.backups_dir.is_dir():
            return []

        try:
            backups = []
            for path in self.backups_dir.iterdir():
                match = self._file_pattern.match(path.name)
                if not match or not path.is_file():
                    continue
                if fmt is not None and match.group("ext") != fmt.extension:
                    continue
                backups.append((path.stat().st_mtime, path.name, path))
        except OSError as e:
            logger.warning("list_backups_failed", directory=str(self.backups_dir), error=str(e))
            return []

        backups.sort(reverse=True)
        return [path for _, _, path in backups]

    # =========================================================================
    # RESTORE
    # =========================================================================

    def restore(self, source: RestoreSource) -> BackupResult:
        """
        Restore state from a backup file path or a readable binary stream.

        Streams are staged into a temporary file under the staging
        directory, which is removed whatever the outcome.
        """
        if isinstance(source, (str, os.PathLike)):
            path = Path(source)
            return self._restore_file(path, self._format_of(path), label=path.name, source_path=path)

        staged = None
        try:
            try:
                staged = self._stage_stream(source)
            except BackupIOError as e:
                self._audit.log_restore_failed("stream", e)
                return BackupFailure(message=f"Failed to restore backup: {e}", exception=e)
            return self._restore_file(staged, BackupFormat.JSON, label="stream", source_path=None)
        finally:
            if staged is not None:
                staged.unlink(missing_ok=True)

    def _stage_stream(self, source: BinaryIO) -> Path:
        staged = None
        try:
            self.staging_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                dir=self.staging_dir,
                prefix="restore_",
                suffix=".json",
                delete=False,
            ) as f:
                staged = Path(f.name)
                shutil.copyfileobj(source, f)
        except Exception as e:
            # Closed, text-mode or non-stream sources fail here too
            if staged is not None:
                staged.unlink(missing_ok=True)
            raise BackupIOError(f"Cannot stage backup stream: {e}") from e
        return staged

    @staticmethod
    def _format_of(path: Path) -> BackupFormat:
        if path.suffix == "." + BackupFormat.TEXT.extension:
            return BackupFormat.TEXT
        return BackupFormat.JSON

    def _restore_file(
        self,
        path: Path,
        fmt: BackupFormat,
        label: str,
        source_path: Optional[Path],
    ) -> BackupResult:
        try:
            try:
                data = path.read_bytes()
            except OSError as e:
                raise BackupIOError(f"Cannot read backup file {path}: {e}") from e
            snapshot = self.codec.decode(data, fmt, max_version=self.schema_version)
        except Exception as e:
            self._audit.log_restore_failed(label, e)
            return BackupFailure(message=f"Failed to restore backup: {e}", exception=e)

        try:
            applied = self._apply(snapshot)
        except Exception as e:
            self._audit.log_restore_failed(label, e)
            return BackupFailure(message=f"Failed to restore backup: {e}", exception=e)

        self._audit.log_restore_completed(label, applied)
        return BackupSuccess(path=source_path, metadata=snapshot.metadata)

    def _apply(self, snapshot: BackupSnapshot) -> list[str]:
        """
        Write each field the snapshot carries; absent fields are kept.

        Transactions go last so the budget check that follows their
        write sees the restored budget and currency.
        """
        applied = []

        if snapshot.notification_preferences is not None:
            self.store.save_notification_preferences(snapshot.notification_preferences)
            applied.append("notification_preferences")

        if snapshot.currency is not None:
            self.store.set_selected_currency(snapshot.currency)
            applied.append("currency")

        if snapshot.monthly_budget is not None:
            self.store.save_monthly_budget(snapshot.monthly_budget)
            applied.append("monthly_budget")

        if snapshot.transactions is not None:
            self.store.save_transactions(snapshot.transactions)
            applied.append("transactions")

        return applied
