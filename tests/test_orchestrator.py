"""
Tests for settings and core wiring.
"""

import pytest
from decimal import Decimal

from budgetbee import __version__
from budgetbee.alerts import LoggingNotificationSink, RecordingNotificationSink
from budgetbee.config import BackupSettings, StoreSettings, get_settings, validate_all_settings
from budgetbee.models import AlertLevel, BackupFormat
from budgetbee.orchestrator import create_core
from budgetbee.services.storage import JsonPreferencesStore

from conftest import NOW, make_transaction


@pytest.fixture
def env_settings(tmp_path, monkeypatch):
    monkeypatch.setenv("BUDGETBEE_STORE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("BUDGETBEE_BACKUP_KDF_ITERATIONS", "10000")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


class TestSettings:
    """Tests for pydantic-settings configuration."""

    def test_store_defaults(self, monkeypatch):
        monkeypatch.delenv("BUDGETBEE_STORE_DEFAULT_CURRENCY", raising=False)
        settings = StoreSettings()
        assert settings.default_currency == "USD"
        assert settings.preferences_file == "BudgetBeePrefs.json"
        assert "Food" in settings.categories_list

    def test_categories_from_environment(self, monkeypatch):
        monkeypatch.setenv("BUDGETBEE_STORE_TRANSACTION_CATEGORIES", "Rent, Food ,,Fun")
        assert StoreSettings().categories_list == ["Rent", "Food", "Fun"]

    def test_currency_normalized(self, monkeypatch):
        monkeypatch.setenv("BUDGETBEE_STORE_DEFAULT_CURRENCY", "inr")
        assert StoreSettings().default_currency == "INR"

    @pytest.mark.parametrize("code", ["U$D", "EURO", "E1"])
    def test_malformed_currency_rejected(self, monkeypatch, code):
        monkeypatch.setenv("BUDGETBEE_STORE_DEFAULT_CURRENCY", code)
        with pytest.raises(ValueError):
            StoreSettings()

    def test_backup_defaults(self):
        settings = BackupSettings()
        assert settings.schema_version >= 1
        assert settings.kdf_iterations >= 10000

    def test_file_prefix_rejects_path_separators(self, monkeypatch):
        monkeypatch.setenv("BUDGETBEE_BACKUP_FILE_PREFIX", "../evil")
        with pytest.raises(ValueError):
            BackupSettings()

    def test_low_iterations_rejected(self, monkeypatch):
        monkeypatch.setenv("BUDGETBEE_BACKUP_KDF_ITERATIONS", "100")
        with pytest.raises(ValueError):
            BackupSettings()

    def test_preferences_path(self, env_settings, tmp_path):
        assert env_settings.store.preferences_path == tmp_path / "data" / "BudgetBeePrefs.json"

    def test_validate_all_settings(self, env_settings):
        results = validate_all_settings()
        assert results == {"store": True, "backup": True, "app": True}

    def test_validate_all_settings_reports_errors(self, env_settings, monkeypatch):
        monkeypatch.setenv("BUDGETBEE_BACKUP_SCHEMA_VERSION", "0")
        results = validate_all_settings()
        assert results["backup"] is False
        assert "backup_error" in results


class TestCreateCore:
    """Tests for create_core wiring."""

    def test_components_share_one_store(self, env_settings):
        core = create_core(env_settings)

        assert core.backup_manager.store is core.store
        assert isinstance(core.kv, JsonPreferencesStore)
        assert isinstance(core.notification_sink, LoggingNotificationSink)
        assert core.backup_manager.app_version == __version__

    def test_directories_follow_settings(self, env_settings, tmp_path):
        core = create_core(env_settings)
        assert core.backup_manager.backups_dir == tmp_path / "data" / "backups"
        assert core.backup_manager.staging_dir == tmp_path / "data" / "cache"

    def test_category_vocabulary_applied(self, env_settings):
        core = create_core(env_settings)
        assert core.store.get_categories() == env_settings.store.categories_list

    def test_state_survives_restart(self, env_settings):
        first = create_core(env_settings)
        transaction = make_transaction()
        first.store.add_transaction(transaction)
        first.store.save_monthly_budget(Decimal("300"))

        second = create_core(env_settings)

        assert second.store.get_transactions() == [transaction]
        assert second.store.get_monthly_budget() == Decimal("300")

    def test_end_to_end_backup_and_restore(self, env_settings):
        sink = RecordingNotificationSink()
        core = create_core(env_settings, notification_sink=sink, clock=lambda: NOW)
        core.store.save_monthly_budget(Decimal("100"))
        transaction = make_transaction(amount="120")
        core.store.add_transaction(transaction)
        assert sink.last.level == AlertLevel.EXCEEDED

        backup = core.backup_manager.create_local_backup(BackupFormat.JSON)
        assert backup.ok

        core.store.delete_transaction(transaction)
        assert core.store.get_transactions() == []

        restored = core.backup_manager.restore(backup.path)

        assert restored.ok
        assert core.store.get_transactions() == [transaction]
        assert core.backup_manager.list_backups() == [backup.path]
