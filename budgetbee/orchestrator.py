"""
Core Wiring for BudgetBee

Builds the store, the backup pipeline and the audit trail from
settings, sharing one TransactionStore between them.

DESIGN DECISION: No global singleton.
create_core() returns explicit objects; callers pass the store to
whatever needs it. Two cores over the same data directory are two
independent writers, which the store does not coordinate.
"""

from datetime import datetime
from typing import Callable, NamedTuple, Optional

from budgetbee.alerts import LoggingNotificationSink, NotificationSink
from budgetbee.audit import AuditLogger, get_logger
from budgetbee.config import Settings, get_settings
from budgetbee.services.backup import BackupCodec, BackupManager
from budgetbee.services.storage import JsonPreferencesStore, KeyValueStore
from budgetbee.store import TransactionStore


logger = get_logger(__name__)


class BudgetBeeCore(NamedTuple):
    """Everything a front end needs, wired together."""
    store: TransactionStore
    backup_manager: BackupManager
    codec: BackupCodec
    kv: KeyValueStore
    audit_logger: AuditLogger
    notification_sink: NotificationSink


def create_core(
    settings: Optional[Settings] = None,
    notification_sink: Optional[NotificationSink] = None,
    kv: Optional[KeyValueStore] = None,
    clock: Callable[[], datetime] = datetime.now,
) -> BudgetBeeCore:
    """
    Factory function to create all core components.

    Args:
        settings: Settings to build from. Defaults to get_settings().
        notification_sink: Receives budget alerts. Defaults to a
                           LoggingNotificationSink.
        kv: Key-value backend. Defaults to the JSON preferences file
            in the configured data directory.
        clock: Source of "now" for expenses and backup timestamps.

    Raises:
        StorageError: If the data directory cannot be created
    """
    settings = settings or get_settings()
    store_settings = settings.store
    backup_settings = settings.backup
    app_settings = settings.app

    audit_logger = AuditLogger()
    notification_sink = notification_sink or LoggingNotificationSink()
    kv = kv or JsonPreferencesStore(store_settings.preferences_path)

    store = TransactionStore(
        kv,
        notification_sink=notification_sink,
        categories=store_settings.categories_list,
        clock=clock,
        audit_logger=audit_logger,
        default_currency=store_settings.default_currency,
    )

    codec = BackupCodec(
        passphrase=backup_settings.kdf_passphrase,
        salt=backup_settings.kdf_salt,
        iterations=backup_settings.kdf_iterations,
    )

    backup_manager = BackupManager(
        store,
        codec,
        backups_dir=store_settings.data_dir / backup_settings.directory_name,
        staging_dir=store_settings.data_dir / backup_settings.staging_directory_name,
        schema_version=backup_settings.schema_version,
        file_prefix=backup_settings.file_prefix,
        app_version=app_settings.app_version,
        device_model=app_settings.device_model,
        clock=clock,
        audit_logger=audit_logger,
    )

    logger.info(
        "core_created",
        data_dir=str(store_settings.data_dir),
        environment=app_settings.app_environment,
    )

    return BudgetBeeCore(
        store=store,
        backup_manager=backup_manager,
        codec=codec,
        kv=kv,
        audit_logger=audit_logger,
        notification_sink=notification_sink,
    )
