from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.errors import ValidationFailed
from app.models.auth_models import User
from app.schemas.activity_schema import ActivityRead
from app.schemas.notification_schema import (
    AuthorizationRequest,
    CalendarReminderRequest,
    IntervalReminderRequest,
    MedicineReminderRequest,
    MilestoneCheckRequest,
    NotificationActionRequest,
    NotificationRequestRead,
    SmartSuggestionRequest,
)
from app.dependencies.auth import get_current_user, require_baby_owner
from app.dependencies.services import get_activity_store, get_notification_scheduler
from app.services.notification_scheduler import NotificationScheduler
from app.stores.activity_store import ActivityStore
from config.database import get_db

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _read(requests) -> List[NotificationRequestRead]:
    return [NotificationRequestRead(**asdict(r)) for r in requests if r is not None]


@router.post("/authorize")
def authorize(
    payload: AuthorizationRequest,
    scheduler: NotificationScheduler = Depends(get_notification_scheduler),
    current_user: User = Depends(get_current_user),
):
    return {"enabled": scheduler.request_authorization(payload.granted, owner=current_user.id)}


@router.post("/feeding", response_model=List[NotificationRequestRead])
def schedule_feeding(
    payload: IntervalReminderRequest,
    scheduler: NotificationScheduler = Depends(get_notification_scheduler),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_baby_owner(payload.baby_id, db, current_user)
    request = scheduler.schedule_feeding_reminder(payload.baby_id, payload.interval_seconds, owner=current_user.id)
    return _read([request])


@router.post("/sleep", response_model=List[NotificationRequestRead])
def schedule_sleep(
    payload: CalendarReminderRequest,
    scheduler: NotificationScheduler = Depends(get_notification_scheduler),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_baby_owner(payload.baby_id, db, current_user)
    request = scheduler.schedule_sleep_reminder(payload.baby_id, payload.hour, payload.minute, owner=current_user.id)
    return _read([request])


@router.post("/diaper", response_model=List[NotificationRequestRead])
def schedule_diaper(
    payload: IntervalReminderRequest,
    scheduler: NotificationScheduler = Depends(get_notification_scheduler),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_baby_owner(payload.baby_id, db, current_user)
    request = scheduler.schedule_diaper_reminder(payload.baby_id, payload.interval_seconds, owner=current_user.id)
    return _read([request])


@router.post("/medicine", response_model=List[NotificationRequestRead])
def schedule_medicine(
    payload: MedicineReminderRequest,
    scheduler: NotificationScheduler = Depends(get_notification_scheduler),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_baby_owner(payload.baby_id, db, current_user)
    return _read(scheduler.schedule_medicine_reminder(
        payload.baby_id,
        payload.medicine_name,
        payload.hour,
        payload.minute,
        payload.repeat_weekdays,
        owner=current_user.id,
    ))


@router.post("/milestones", response_model=List[NotificationRequestRead])
def schedule_milestones(
    payload: MilestoneCheckRequest,
    scheduler: NotificationScheduler = Depends(get_notification_scheduler),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_baby_owner(payload.baby_id, db, current_user)
    return _read(scheduler.schedule_milestone_check(payload.baby_id, payload.age_in_months, owner=current_user.id))


@router.post("/suggestion", response_model=List[NotificationRequestRead])
def schedule_suggestion(
    payload: SmartSuggestionRequest,
    scheduler: NotificationScheduler = Depends(get_notification_scheduler),
    current_user: User = Depends(get_current_user),
):
    return _read([scheduler.schedule_smart_suggestion(
        payload.title, payload.body, payload.delay_seconds, owner=current_user.id
    )])


@router.get("/pending", response_model=List[NotificationRequestRead])
def pending(
    scheduler: NotificationScheduler = Depends(get_notification_scheduler),
    current_user: User = Depends(get_current_user),
):
    return _read(scheduler.pending(owner=current_user.id))


@router.delete("/{kind}/{baby_id}")
def cancel(
    kind: str,
    baby_id: str,
    medicine_name: Optional[str] = Query(None),
    scheduler: NotificationScheduler = Depends(get_notification_scheduler),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Cancela lembretes de feeding, sleep, diaper ou medicine (exige medicine_name)."""
    require_baby_owner(baby_id, db, current_user)
    if kind == "feeding":
        removed = scheduler.cancel_feeding_reminder(baby_id, owner=current_user.id)
    elif kind == "sleep":
        removed = scheduler.cancel_sleep_reminder(baby_id, owner=current_user.id)
    elif kind == "diaper":
        removed = scheduler.cancel_diaper_reminder(baby_id, owner=current_user.id)
    elif kind == "medicine" and medicine_name:
        removed = scheduler.cancel_medicine_reminder(baby_id, medicine_name, owner=current_user.id)
    else:
        raise ValidationFailed([f"Tipo de lembrete inválido: {kind}"])
    return {"removed": removed}


@router.delete("")
def remove_all(
    scheduler: NotificationScheduler = Depends(get_notification_scheduler),
    current_user: User = Depends(get_current_user),
):
    removed = scheduler.remove_all(owner=current_user.id)
    return {"msg": "Notificações removidas.", "removed": removed}


@router.post("/action", response_model=Optional[ActivityRead])
def handle_action(
    payload: NotificationActionRequest,
    scheduler: NotificationScheduler = Depends(get_notification_scheduler),
    store: ActivityStore = Depends(get_activity_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Registra a atividade correspondente à ação tocada na notificação."""
    if payload.baby_id:
        require_baby_owner(payload.baby_id, db, current_user)
    return scheduler.handle_action(
        payload.action_identifier,
        payload.baby_id,
        store,
        current_user.id,
        medicine_name=payload.medicine_name,
    )
