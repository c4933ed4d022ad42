# app/stores/settings_store.py

import json
from datetime import datetime
from typing import Any, List, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.errors import ValidationFailed
from app.models.settings_model import SettingsEntry
from app.schemas.settings_schema import SECTION_MODELS, AppSettings
from app.utils.event_bus import EventBus
from config.logging_config import get_logger

logger = get_logger(__name__)

SETTINGS_KEY = "app_settings"
TOPIC = "settings.changed"
MIN_AUTO_LOCK_SECONDS = 60


class SettingsStore:
    """Preferências do app, gravadas como JSON na tabela chave/valor."""

    def __init__(self, db: Session, bus: Optional[EventBus] = None):
        self.db = db
        self.bus = bus
        self.error_message: Optional[str] = None

    # ------------------ chave/valor ------------------

    def get_value(self, key: str, default: Any = None) -> Any:
        entry = self.db.query(SettingsEntry).filter_by(key=key).first()
        if not entry:
            return default
        return json.loads(entry.value)

    def set_value(self, key: str, value: Any) -> None:
        raw = json.dumps(value, ensure_ascii=False, default=str)
        entry = self.db.query(SettingsEntry).filter_by(key=key).first()
        if entry:
            entry.value = raw
        else:
            self.db.add(SettingsEntry(key=key, value=raw))
        self.db.commit()

    def delete_value(self, key: str) -> None:
        self.db.query(SettingsEntry).filter_by(key=key).delete()
        self.db.commit()

    # ------------------ configurações ------------------

    def load(self, now: Optional[datetime] = None) -> AppSettings:
        settings = self._read()
        if self._reset_if_new_day(settings, now or datetime.now()):
            self._write(settings)
        return settings

    def save(self, settings: AppSettings) -> AppSettings:
        self._write(settings)
        logger.info("settings_saved")
        self._publish("saved")
        return settings

    def update_section(self, section: str, data: dict) -> AppSettings:
        model = self._section_model(section)
        settings = self._read()

        merged = getattr(settings, section).model_dump()
        merged.update(data)
        try:
            setattr(settings, section, model.model_validate(merged))
        except ValidationError as exc:
            raise ValidationFailed([err["msg"] for err in exc.errors()])

        return self.save(settings)

    def reset_to_defaults(self) -> AppSettings:
        logger.info("settings_reset")
        return self.save(AppSettings())

    def reset_section(self, section: str) -> AppSettings:
        model = self._section_model(section)
        settings = self._read()
        setattr(settings, section, model())
        return self.save(settings)

    def export_settings(self) -> str:
        return self._read().model_dump_json(indent=2)

    def import_settings(self, raw: str) -> bool:
        try:
            settings = AppSettings.model_validate_json(raw)
        except ValidationError as exc:
            self.error_message = f"Falha ao importar configurações: {exc.error_count()} erro(s) de validação"
            logger.warning("settings_import_failed", errors=exc.error_count())
            return False

        self.error_message = None
        self.save(settings)
        return True

    def validate_settings(self, settings: Optional[AppSettings] = None) -> List[str]:
        settings = settings or self._read()
        warnings = []

        if settings.privacy.auto_lock_timeout < MIN_AUTO_LOCK_SECONDS:
            warnings.append("O bloqueio automático deve ser de pelo menos 60 segundos")
        if settings.ai.analysis_quota < 0:
            warnings.append("A cota de análises não pode ser negativa")
        if settings.ai.used_quota > settings.ai.analysis_quota:
            warnings.append("A cota usada excede a cota disponível")

        return warnings

    # ------------------ cota de análise ------------------

    def available_analysis_count(self) -> int:
        ai = self.load().ai
        return max(0, ai.analysis_quota - ai.used_quota)

    def increment_used_quota(self) -> AppSettings:
        settings = self._read()
        settings.ai.used_quota += 1
        return self.save(settings)

    def reset_quota(self, now: Optional[datetime] = None) -> AppSettings:
        settings = self._read()
        settings.ai.used_quota = 0
        settings.ai.quota_reset_date = now or datetime.now()
        return self.save(settings)

    def check_quota_reset(self, now: Optional[datetime] = None) -> bool:
        """Zera a cota usada quando o dia do calendário mudou desde o último reset."""
        settings = self._read()
        if not self._reset_if_new_day(settings, now or datetime.now()):
            return False
        self._write(settings)
        self._publish("quota_reset")
        return True

    # ------------------ auxiliares ------------------

    @staticmethod
    def _reset_if_new_day(settings: AppSettings, now: datetime) -> bool:
        if settings.ai.quota_reset_date.date() == now.date():
            return False
        settings.ai.used_quota = 0
        settings.ai.quota_reset_date = now
        logger.info("analysis_quota_reset", reset_date=now.isoformat())
        return True

    def _read(self) -> AppSettings:
        entry = self.db.query(SettingsEntry).filter_by(key=SETTINGS_KEY).first()
        if not entry:
            return AppSettings()
        try:
            return AppSettings.model_validate_json(entry.value)
        except ValidationError as exc:
            self.error_message = "Configurações salvas inválidas, usando os padrões"
            logger.warning("settings_load_failed", errors=exc.error_count())
            return AppSettings()

    def _write(self, settings: AppSettings) -> None:
        raw = settings.model_dump_json()
        entry = self.db.query(SettingsEntry).filter_by(key=SETTINGS_KEY).first()
        if entry:
            entry.value = raw
        else:
            self.db.add(SettingsEntry(key=SETTINGS_KEY, value=raw))
        self.db.commit()

    @staticmethod
    def _section_model(section: str):
        model = SECTION_MODELS.get(section)
        if model is None:
            raise ValidationFailed([f"Seção desconhecida: {section}"])
        return model

    def _publish(self, action: str) -> None:
        if self.bus is not None:
            self.bus.publish(TOPIC, {"action": action})
