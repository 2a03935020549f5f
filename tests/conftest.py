"""
Shared fixtures for BudgetBee Core tests.

No real data directory is touched: file-backed tests use tmp_path,
everything else runs on in-memory key-value stores.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from budgetbee.alerts import RecordingNotificationSink
from budgetbee.models import Transaction, TransactionType
from budgetbee.services.backup import BackupCodec, BackupManager
from budgetbee.services.storage import InMemoryKeyValueStore, StorageError
from budgetbee.store import TransactionStore


NOW = datetime(2024, 3, 15, 12, 30, 45)

CATEGORIES = ["Food", "Transport", "Shopping", "Bills", "Salary", "Other"]


class FaultyKeyValueStore(InMemoryKeyValueStore):
    """In-memory store with injectable read and write faults."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_writes = 0
        self.should_fail = None
        self.fail_reads = False
        self.writes = []

    def _put(self, key, value):
        self.writes.append((key, value))
        if self.fail_writes > 0:
            self.fail_writes -= 1
            raise StorageError("injected write fault")
        if self.should_fail is not None and self.should_fail(key, value):
            raise StorageError("injected write fault")
        super()._put(key, value)

    def get_string(self, key, default=None):
        if self.fail_reads:
            raise StorageError("injected read fault")
        return super().get_string(key, default)


def make_transaction(
    title="Lunch",
    amount="10.00",
    type=TransactionType.EXPENSE,
    category="Food",
    date=NOW,
    **kwargs,
) -> Transaction:
    return Transaction(
        title=title,
        amount=Decimal(amount),
        type=type,
        category=category,
        date=date,
        **kwargs,
    )


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def kv():
    return FaultyKeyValueStore()


@pytest.fixture
def sink():
    return RecordingNotificationSink()


@pytest.fixture
def store(kv, sink, clock):
    return TransactionStore(kv, notification_sink=sink, categories=CATEGORIES, clock=clock)


@pytest.fixture
def codec():
    # Minimum iteration count keeps key derivation fast
    return BackupCodec(passphrase="test-passphrase", salt="test-salt-value", iterations=10_000)


@pytest.fixture
def manager(store, codec, clock, tmp_path):
    return BackupManager(
        store,
        codec,
        backups_dir=tmp_path / "backups",
        staging_dir=tmp_path / "cache",
        schema_version=1,
        file_prefix="BudgetBee",
        app_version="1.0.0",
        device_model="test-device",
        clock=clock,
    )
