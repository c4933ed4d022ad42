from dataclasses import asdict
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.models.auth_models import User
from app.schemas.activity_schema import ActivityType
from app.schemas.assistant_schema import (
    AdviceRequest,
    AdviceResponse,
    AppContext,
    ParentingTip,
    PredictedEvent,
    RelaxationTechnique,
    ScheduleSuggestion,
    SupportMessage,
    UserInteraction,
)
from app.dependencies.auth import get_current_user, require_baby_owner
from app.dependencies.services import get_activity_store, get_smart_assistant
from app.services.smart_assistant import SmartAssistant
from app.stores.activity_store import ActivityStore
from config.database import get_db

router = APIRouter(prefix="/assistant", tags=["assistant"])


@router.post("/learn")
def learn_patterns(
    baby_id: str = Query(...),
    assistant: SmartAssistant = Depends(get_smart_assistant),
    store: ActivityStore = Depends(get_activity_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Reaprende os padrões do bebê a partir de todo o histórico."""
    require_baby_owner(baby_id, db, current_user)
    pattern = assistant.pattern_learner.learn_patterns(baby_id, store.load_activities(baby_id))
    return asdict(pattern)


@router.get("/schedule", response_model=List[ScheduleSuggestion])
def daily_schedule(
    baby_id: str = Query(...),
    day: Optional[date] = None,
    assistant: SmartAssistant = Depends(get_smart_assistant),
    store: ActivityStore = Depends(get_activity_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_baby_owner(baby_id, db, current_user)
    assistant.ensure_learned(baby_id, lambda: store.load_activities(baby_id))
    return assistant.schedule(baby_id, day)


@router.get("/next-event", response_model=Optional[PredictedEvent])
def next_event(
    baby_id: str = Query(...),
    assistant: SmartAssistant = Depends(get_smart_assistant),
    store: ActivityStore = Depends(get_activity_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_baby_owner(baby_id, db, current_user)
    assistant.ensure_learned(baby_id, lambda: store.load_activities(baby_id))
    return assistant.next_event(baby_id)


@router.post("/advice", response_model=AdviceResponse)
def get_advice(
    payload: AdviceRequest,
    assistant: SmartAssistant = Depends(get_smart_assistant),
    current_user: User = Depends(get_current_user),
):
    return assistant.advice(payload.query)


@router.get("/tips", response_model=List[ParentingTip])
def daily_tips(
    assistant: SmartAssistant = Depends(get_smart_assistant),
    current_user: User = Depends(get_current_user),
):
    return assistant.daily_tips()


@router.get("/tips/{context}", response_model=List[ParentingTip])
def contextual_tips(
    context: AppContext,
    assistant: SmartAssistant = Depends(get_smart_assistant),
    current_user: User = Depends(get_current_user),
):
    return assistant.contextual_tips(context)


@router.post("/interactions")
def record_interaction(
    interaction: UserInteraction,
    assistant: SmartAssistant = Depends(get_smart_assistant),
    current_user: User = Depends(get_current_user),
):
    level = assistant.record_interaction(interaction)
    return {"stress_level": level}


@router.get("/stress")
def stress_level(
    assistant: SmartAssistant = Depends(get_smart_assistant),
    current_user: User = Depends(get_current_user),
):
    return {"stress_level": assistant.stress_level()}


@router.get("/support", response_model=SupportMessage)
def support_message(
    assistant: SmartAssistant = Depends(get_smart_assistant),
    current_user: User = Depends(get_current_user),
):
    return assistant.support_message()


@router.get("/relaxation", response_model=RelaxationTechnique)
def relaxation_technique(
    assistant: SmartAssistant = Depends(get_smart_assistant),
    current_user: User = Depends(get_current_user),
):
    return assistant.relaxation_technique()


@router.get("/suggestions", response_model=List[str])
def activity_suggestions(
    baby_id: str = Query(...),
    assistant: SmartAssistant = Depends(get_smart_assistant),
    store: ActivityStore = Depends(get_activity_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_baby_owner(baby_id, db, current_user)
    last_by_type = {}
    for activity_type in (ActivityType.feeding, ActivityType.diaper, ActivityType.sleep):
        last = store.get_last_activity(baby_id, activity_type)
        last_by_type[activity_type.value] = last.start_time if last else None
    return assistant.activity_suggestions(last_by_type)
