"""Tests for app/stores/settings_store.py"""

import json
from datetime import datetime

import pytest

from app.errors import ValidationFailed
from app.models.settings_model import SettingsEntry
from app.schemas.settings_schema import AppSettings, DisplaySettings, UnitSettings
from app.stores.settings_store import SETTINGS_KEY, SettingsStore
from app.utils import unit_formatter


@pytest.fixture
def store(db_session, bus):
    return SettingsStore(db_session, bus)


def save_quota(store, used, reset_date):
    settings = AppSettings()
    settings.ai.used_quota = used
    settings.ai.quota_reset_date = reset_date
    store.save(settings)


class TestKeyValue:
    def test_missing_key_returns_default(self, store):
        assert store.get_value("nope", 42) == 42

    def test_roundtrip_and_overwrite(self, store):
        store.set_value("selected", "abc")
        store.set_value("selected", "def")

        assert store.get_value("selected") == "def"


class TestLoadAndSave:
    def test_defaults_when_absent(self, store):
        settings = store.load()

        assert settings.privacy.auto_lock_timeout == 300
        assert settings.ai.analysis_quota == 30
        assert settings.display.language == "pt-BR"

    def test_corrupt_blob_falls_back_to_defaults(self, store, db_session):
        db_session.add(SettingsEntry(key=SETTINGS_KEY, value="{not json"))
        db_session.commit()

        settings = store.load()

        assert settings.ai.analysis_quota == 30
        assert store.error_message

    def test_save_publishes_event(self, store, bus):
        events = []
        bus.subscribe("settings.changed", lambda topic, payload: events.append(payload))

        store.save(AppSettings())

        assert events == [{"action": "saved"}]

    def test_update_section_merges(self, store):
        store.update_section("privacy", {"app_lock_enabled": True})
        settings = store.update_section("privacy", {"auto_lock_timeout": 120})

        assert settings.privacy.app_lock_enabled is True
        assert settings.privacy.auto_lock_timeout == 120

    def test_update_unknown_section(self, store):
        with pytest.raises(ValidationFailed):
            store.update_section("colors", {})

    def test_update_section_with_invalid_value(self, store):
        with pytest.raises(ValidationFailed):
            store.update_section("display", {"theme": "neon"})

    def test_reset_section(self, store):
        store.update_section("sync", {"auto_sync": False})
        store.update_section("privacy", {"auto_lock_timeout": 90})

        settings = store.reset_section("sync")

        assert settings.sync.auto_sync is True
        assert settings.privacy.auto_lock_timeout == 90

    def test_reset_to_defaults(self, store):
        store.update_section("privacy", {"auto_lock_timeout": 90})
        assert store.reset_to_defaults().privacy.auto_lock_timeout == 300


class TestImportExport:
    def test_export_then_import(self, store, db_session, bus):
        store.update_section("display", {"theme": "dark"})
        exported = store.export_settings()

        other = SettingsStore(db_session, bus)
        other.reset_to_defaults()
        assert other.import_settings(exported) is True
        assert other.load().display.theme == "dark"

    def test_bad_import_keeps_current_settings(self, store):
        store.update_section("display", {"theme": "dark"})

        assert store.import_settings(json.dumps({"display": {"theme": 3}})) is False
        assert store.error_message
        assert store.load().display.theme == "dark"


class TestValidate:
    def test_defaults_are_valid(self, store):
        assert store.validate_settings() == []

    def test_warnings(self, store):
        settings = AppSettings()
        settings.privacy.auto_lock_timeout = 30
        settings.ai.analysis_quota = -1

        warnings = store.validate_settings(settings)

        assert len(warnings) == 3  # bloqueio curto, cota negativa, usado > cota

    def test_used_above_quota(self, store):
        settings = AppSettings()
        settings.ai.used_quota = 31

        assert store.validate_settings(settings) == ["A cota usada excede a cota disponível"]


class TestQuota:
    def test_same_day_keeps_usage(self, store):
        save_quota(store, 5, datetime(2024, 3, 10, 0, 5))

        assert store.check_quota_reset(datetime(2024, 3, 10, 23, 59)) is False
        assert store.load(datetime(2024, 3, 10, 23, 59)).ai.used_quota == 5

    def test_new_calendar_day_resets(self, store):
        # menos de 24h, mas outro dia do calendário
        save_quota(store, 5, datetime(2024, 3, 10, 23, 59))

        assert store.check_quota_reset(datetime(2024, 3, 11, 0, 1)) is True
        settings = store.load(datetime(2024, 3, 11, 0, 2))
        assert settings.ai.used_quota == 0
        assert settings.ai.quota_reset_date == datetime(2024, 3, 11, 0, 1)

    def test_load_runs_daily_check(self, store):
        save_quota(store, 7, datetime(2024, 3, 9, 10, 0))

        assert store.load(datetime(2024, 3, 10, 8, 0)).ai.used_quota == 0

    def test_increment_and_available(self, store):
        store.reset_quota()
        store.increment_used_quota()
        store.increment_used_quota()

        assert store.available_analysis_count() == 28

    def test_available_never_negative(self, store):
        save_quota(store, 40, datetime.now())
        assert store.available_analysis_count() == 0


class TestUnitFormatter:
    def test_metric_defaults(self):
        display = DisplaySettings()

        assert unit_formatter.format_weight(5.43, display) == "5.4 kg"
        assert unit_formatter.format_height(60, display) == "60.0 cm"
        assert unit_formatter.format_temperature(37, display) == "37.0°C"
        assert unit_formatter.format_volume(120, display) == "120 ml"

    def test_imperial(self):
        display = DisplaySettings(units=UnitSettings(weight="lb", height="inch", temperature="fahrenheit", volume="oz"))

        assert unit_formatter.format_weight(1, display) == "2.2 lb"
        assert unit_formatter.format_height(2.54, display) == "1.0 in"
        assert unit_formatter.format_temperature(100, display) == "212.0°F"
        assert unit_formatter.format_volume(29.5735, display) == "1.0 oz"

    def test_date_and_time(self):
        display = DisplaySettings()
        moment = datetime(2024, 3, 10, 7, 5)

        assert unit_formatter.format_date(moment, display) == "10/03/2024"
        assert unit_formatter.format_time(moment, display) == "07:05"
