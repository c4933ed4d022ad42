# app/stores/baby_store.py

import json
from datetime import date
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.errors import RecordNotFound, ValidationFailed
from app.models.activity_model import ActivityRecord
from app.models.baby_model import Baby
from app.models.daily_report_model import DailyReport
from app.schemas.baby_schema import BabyAgeInfo, BabyCreate, BabyResponse, BabyUpdate
from app.stores.settings_store import SettingsStore
from app.utils.event_bus import EventBus
from config.logging_config import get_logger

logger = get_logger(__name__)

TOPIC = "baby.changed"
MAX_AGE_YEARS = 10


def months_between(birth_date: date, today: date) -> int:
    months = (today.year - birth_date.year) * 12 + today.month - birth_date.month
    if today.day < birth_date.day:
        months -= 1
    return max(0, months)


def add_months(day: date, months: int) -> date:
    year, month = divmod(day.month - 1 + months, 12)
    year += day.year
    month += 1
    # 31/01 + 1 mês -> último dia de fevereiro
    for candidate in (day.day, 30, 29, 28):
        try:
            return date(year, month, candidate)
        except ValueError:
            continue
    raise ValueError(f"data inválida: {day} + {months} meses")


def age_info(birth_date: date, today: Optional[date] = None) -> BabyAgeInfo:
    """Idade em meses completos mais os dias restantes."""
    today = today or date.today()
    months = months_between(birth_date, today)
    days = (today - add_months(birth_date, months)).days if today >= birth_date else 0

    if months >= 12:
        years, remaining = divmod(months, 12)
        age_string = f"{years} ano" if years == 1 else f"{years} anos"
        if remaining:
            age_string += f" e {remaining} {'mês' if remaining == 1 else 'meses'}"
    elif months > 0:
        age_string = f"{months} {'mês' if months == 1 else 'meses'}"
    else:
        age_string = f"{days} {'dia' if days == 1 else 'dias'}"

    return BabyAgeInfo(months=months, days=days, age_string=age_string)


def validate_baby(name: str, birth_date: date, today: Optional[date] = None) -> List[str]:
    today = today or date.today()
    errors = []

    if not name or not name.strip():
        errors.append("O nome do bebê é obrigatório")
    if birth_date > today:
        errors.append("A data de nascimento não pode ser no futuro")
    elif months_between(birth_date, today) > MAX_AGE_YEARS * 12:
        errors.append("A data de nascimento não pode ser anterior a 10 anos")

    return errors


class BabyStore:
    def __init__(self, db: Session, bus: Optional[EventBus] = None):
        self.db = db
        self.bus = bus

    def load_babies(self, user_id: str) -> List[Baby]:
        return (
            self.db.query(Baby)
            .filter(Baby.user_id == user_id)
            .order_by(Baby.created_at.desc())
            .all()
        )

    def get_baby(self, baby_id: str, user_id: Optional[str] = None) -> Baby:
        query = self.db.query(Baby).filter(Baby.id == baby_id)
        if user_id is not None:
            query = query.filter(Baby.user_id == user_id)
        baby = query.first()
        if not baby:
            raise RecordNotFound("Bebê não encontrado.")
        return baby

    def search_babies(self, user_id: str, query: str) -> List[Baby]:
        needle = query.strip().lower()
        babies = self.load_babies(user_id)
        if not needle:
            return babies
        return [b for b in babies if needle in b.name.lower()]

    def add_baby(self, data: BabyCreate, user_id: str) -> Baby:
        errors = validate_baby(data.name, data.birth_date)
        if errors:
            raise ValidationFailed(errors)

        baby = Baby(user_id=user_id, **data.model_dump())
        baby.name = baby.name.strip()
        self.db.add(baby)
        self.db.commit()
        self.db.refresh(baby)

        logger.info("baby_created", baby_id=baby.id, user_id=user_id)
        self._publish("created", baby)
        return baby

    def update_baby(self, baby_id: str, changes: BabyUpdate, user_id: str) -> Baby:
        baby = self.get_baby(baby_id, user_id)
        data = changes.model_dump(exclude_unset=True)

        errors = validate_baby(data.get("name", baby.name), data.get("birth_date", baby.birth_date))
        if errors:
            raise ValidationFailed(errors)

        for key, value in data.items():
            setattr(baby, key, value)
        self.db.commit()
        self.db.refresh(baby)

        logger.info("baby_updated", baby_id=baby.id)
        self._publish("updated", baby)
        return baby

    def delete_baby(self, baby_id: str, user_id: str) -> None:
        """Remove o bebê e os registros ligados a ele.

        Os arquivos de mídia ficam a cargo do MediaStore e devem ser
        apagados antes.
        """
        baby = self.get_baby(baby_id, user_id)

        self.db.query(ActivityRecord).filter(ActivityRecord.baby_id == baby_id).delete()
        self.db.query(DailyReport).filter(DailyReport.baby_id == baby_id).delete()
        self.db.delete(baby)
        self.db.commit()

        settings = SettingsStore(self.db)
        if settings.get_value(self._selected_key(user_id)) == baby_id:
            settings.delete_value(self._selected_key(user_id))

        logger.info("baby_deleted", baby_id=baby_id)
        self._publish("deleted", baby)

    # ------------------ seleção ------------------

    def select_baby(self, baby_id: str, user_id: str) -> Baby:
        baby = self.get_baby(baby_id, user_id)
        SettingsStore(self.db).set_value(self._selected_key(user_id), baby.id)
        self._publish("selected", baby)
        return baby

    def get_selected_baby(self, user_id: str) -> Optional[Baby]:
        selected_id = SettingsStore(self.db).get_value(self._selected_key(user_id))
        if selected_id:
            baby = self.db.query(Baby).filter_by(id=selected_id, user_id=user_id).first()
            if baby:
                return baby
        babies = self.load_babies(user_id)
        return babies[0] if babies else None

    # ------------------ exportação ------------------

    def export_baby(self, baby_id: str, user_id: str) -> str:
        baby = self.get_baby(baby_id, user_id)
        return BabyResponse.model_validate(baby).model_dump_json()

    def import_baby(self, raw: str, user_id: str) -> Baby:
        try:
            payload = json.loads(raw)
            data = BabyCreate.model_validate(payload)
        except (ValueError, ValidationError) as exc:
            raise ValidationFailed([f"Dados de bebê inválidos: {exc}"])
        return self.add_baby(data, user_id)

    @staticmethod
    def _selected_key(user_id: str) -> str:
        return f"selected_baby_id:{user_id}"

    def _publish(self, action: str, baby: Baby) -> None:
        if self.bus is not None:
            self.bus.publish(TOPIC, {"action": action, "baby_id": baby.id})
