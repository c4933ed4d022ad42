# app/stores/activity_store.py

import json
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from app.errors import RecordNotFound, ValidationFailed
from app.models.activity_model import ActivityRecord
from app.models.baby_model import Baby
from app.schemas.activity_schema import (
    ACTIVITY_DISPLAY_NAMES,
    ActivityCreate,
    ActivityRead,
    ActivityType,
    ActivityUpdate,
)
from app.utils.event_bus import EventBus
from config.logging_config import get_logger

logger = get_logger(__name__)

TOPIC = "activity.changed"


class ActivityStore:
    """CRUD e consultas simples sobre os registros de atividade."""

    def __init__(self, db: Session, bus: Optional[EventBus] = None):
        self.db = db
        self.bus = bus

    # ------------------ leitura ------------------

    def load_activities(self, baby_id: str) -> List[ActivityRecord]:
        return (
            self.db.query(ActivityRecord)
            .filter(ActivityRecord.baby_id == baby_id)
            .order_by(ActivityRecord.start_time.desc())
            .all()
        )

    def activities_between(
        self,
        baby_id: str,
        start: datetime,
        end: datetime,
        activity_type: Optional[ActivityType] = None,
    ) -> List[ActivityRecord]:
        query = self.db.query(ActivityRecord).filter(
            ActivityRecord.baby_id == baby_id,
            ActivityRecord.start_time >= start,
            ActivityRecord.start_time < end,
        )
        if activity_type is not None:
            query = query.filter(ActivityRecord.type == ActivityType(activity_type).value)
        return query.order_by(ActivityRecord.start_time.desc()).all()

    def load_today_activities(self, baby_id: str, today: Optional[date] = None) -> List[ActivityRecord]:
        today = today or date.today()
        start = datetime.combine(today, datetime.min.time())
        return self.activities_between(baby_id, start, start + timedelta(days=1))

    def get_activity(self, activity_id: str) -> ActivityRecord:
        activity = self.db.query(ActivityRecord).filter_by(id=activity_id).first()
        if not activity:
            raise RecordNotFound("Atividade não encontrada.")
        return activity

    def get_last_activity(self, baby_id: str, activity_type: ActivityType) -> Optional[ActivityRecord]:
        return (
            self.db.query(ActivityRecord)
            .filter_by(baby_id=baby_id, type=ActivityType(activity_type).value)
            .order_by(ActivityRecord.start_time.desc())
            .first()
        )

    def time_since_last_activity(
        self, baby_id: str, activity_type: ActivityType, now: Optional[datetime] = None
    ) -> Optional[float]:
        last = self.get_last_activity(baby_id, activity_type)
        if last is None:
            return None
        return ((now or datetime.now()) - last.start_time).total_seconds()

    def search_activities(
        self, baby_id: str, query: str = "", activity_type: Optional[ActivityType] = None
    ) -> List[ActivityRecord]:
        activities = self.load_activities(baby_id)
        if activity_type is not None:
            activities = [a for a in activities if a.type == ActivityType(activity_type).value]

        needle = query.strip().lower()
        if needle:
            activities = [a for a in activities if self._matches(a, needle)]
        return activities

    def activity_summary(self, baby_id: str, day: Optional[date] = None) -> Dict[str, int]:
        summary: Dict[str, int] = {}
        for activity in self.load_today_activities(baby_id, day):
            summary[activity.type] = summary.get(activity.type, 0) + 1
        return summary

    def export_activities(self, baby_id: str) -> str:
        records = [
            ActivityRead.model_validate(activity).model_dump(mode="json")
            for activity in self.load_activities(baby_id)
        ]
        return json.dumps(records, ensure_ascii=False)

    # ------------------ escrita ------------------

    def add_activity(self, data: ActivityCreate, created_by: str) -> ActivityRecord:
        return self.add_activities([data], created_by)[0]

    def add_activities(self, items: List[ActivityCreate], created_by: str) -> List[ActivityRecord]:
        """Grava todas as atividades num único commit; se um bebê não existe, nada é gravado."""
        for baby_id in {data.baby_id for data in items}:
            self._require_baby(baby_id)

        activities = [
            ActivityRecord(
                baby_id=data.baby_id,
                type=data.type.value,
                start_time=data.start_time,
                end_time=data.end_time,
                duration=data.duration,
                details=data.details.model_dump(),
                notes=data.notes,
                created_by=created_by,
            )
            for data in items
        ]
        self.db.add_all(activities)
        self.db.commit()

        for activity in activities:
            self.db.refresh(activity)
            logger.info("activity_created", activity_id=activity.id, baby_id=activity.baby_id, type=activity.type)
            self._publish("created", activity)
        return activities

    def update_activity(self, activity_id: str, changes: ActivityUpdate) -> ActivityRecord:
        activity = self.get_activity(activity_id)

        new_type = changes.type.value if changes.type is not None else activity.type
        if changes.details is not None and changes.details.kind != new_type:
            raise ValidationFailed([f"details.kind '{changes.details.kind}' não corresponde ao tipo '{new_type}'"])

        sent = changes.model_fields_set
        start_time = changes.start_time or activity.start_time
        # end_time: null explícito limpa o fim
        end_time = changes.end_time if "end_time" in sent else activity.end_time
        if end_time is not None and end_time < start_time:
            raise ValidationFailed(["end_time não pode ser anterior a start_time"])

        activity.type = new_type
        activity.start_time = start_time
        activity.end_time = end_time
        if changes.duration is not None:
            activity.duration = changes.duration
        elif sent & {"start_time", "end_time"} and end_time is not None:
            activity.duration = (end_time - start_time).total_seconds()
        elif "end_time" in sent:
            activity.duration = None
        if changes.details is not None:
            activity.details = changes.details.model_dump()
        if changes.notes is not None:
            activity.notes = changes.notes

        self.db.commit()
        self.db.refresh(activity)

        logger.info("activity_updated", activity_id=activity.id, baby_id=activity.baby_id)
        self._publish("updated", activity)
        return activity

    def delete_activity(self, activity_id: str) -> None:
        activity = self.get_activity(activity_id)
        self.db.delete(activity)
        self.db.commit()

        logger.info("activity_deleted", activity_id=activity_id, baby_id=activity.baby_id)
        self._publish("deleted", activity)

    # ------------------ auxiliares ------------------

    def _require_baby(self, baby_id: str) -> None:
        if not self.db.query(Baby.id).filter_by(id=baby_id).first():
            raise RecordNotFound("Bebê não encontrado.")

    @staticmethod
    def _matches(activity: ActivityRecord, needle: str) -> bool:
        display_name = ACTIVITY_DISPLAY_NAMES.get(ActivityType(activity.type), "")
        haystacks = [activity.notes or "", activity.type, display_name]
        return any(needle in text.lower() for text in haystacks)

    def _publish(self, action: str, activity: ActivityRecord) -> None:
        if self.bus is not None:
            self.bus.publish(TOPIC, {"action": action, "activity_id": activity.id, "baby_id": activity.baby_id})
