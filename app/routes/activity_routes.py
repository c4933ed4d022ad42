from datetime import date
from typing import Dict, List, Optional, Union

from fastapi import APIRouter, Body, Depends, Query, Response, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.models.auth_models import User
from app.schemas.activity_schema import ActivityCreate, ActivityRead, ActivityType, ActivityUpdate
from app.dependencies.auth import get_current_user, require_baby_owner
from app.dependencies.services import get_activity_store
from app.stores.activity_store import ActivityStore
from config.database import get_db

router = APIRouter(prefix="/activities", tags=["activities"])


class LastActivityResponse(BaseModel):
    activity: Optional[ActivityRead] = None
    seconds_since: Optional[float] = None


@router.post("", response_model=List[ActivityRead], status_code=status.HTTP_201_CREATED)
def create_activities(
    # o body pode ser uma única atividade ou uma lista delas
    activities: Union[ActivityCreate, List[ActivityCreate]] = Body(...),
    store: ActivityStore = Depends(get_activity_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Se receber um objeto único, cria um único registro.
    Se receber uma lista, cria um registro para cada item, tudo ou nada.
    """
    activity_list = activities if isinstance(activities, list) else [activities]

    for data in activity_list:
        require_baby_owner(data.baby_id, db, current_user)

    return store.add_activities(activity_list, created_by=current_user.id)


@router.get("", response_model=List[ActivityRead])
def list_activities(
    baby_id: str = Query(...),
    store: ActivityStore = Depends(get_activity_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_baby_owner(baby_id, db, current_user)
    return store.load_activities(baby_id)


@router.get("/today", response_model=List[ActivityRead])
def list_today_activities(
    baby_id: str = Query(...),
    day: Optional[date] = None,
    store: ActivityStore = Depends(get_activity_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_baby_owner(baby_id, db, current_user)
    return store.load_today_activities(baby_id, day)


@router.get("/search", response_model=List[ActivityRead])
def search_activities(
    baby_id: str = Query(...),
    q: str = "",
    type: Optional[ActivityType] = None,
    store: ActivityStore = Depends(get_activity_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_baby_owner(baby_id, db, current_user)
    return store.search_activities(baby_id, q, type)


@router.get("/summary", response_model=Dict[str, int])
def activity_summary(
    baby_id: str = Query(...),
    day: Optional[date] = None,
    store: ActivityStore = Depends(get_activity_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_baby_owner(baby_id, db, current_user)
    return store.activity_summary(baby_id, day)


@router.get("/last", response_model=LastActivityResponse)
def last_activity(
    baby_id: str = Query(...),
    type: ActivityType = Query(...),
    store: ActivityStore = Depends(get_activity_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_baby_owner(baby_id, db, current_user)
    last = store.get_last_activity(baby_id, type)
    if last is None:
        return LastActivityResponse()
    return LastActivityResponse(
        activity=ActivityRead.model_validate(last),
        seconds_since=store.time_since_last_activity(baby_id, type),
    )


@router.get("/export")
def export_activities(
    baby_id: str = Query(...),
    store: ActivityStore = Depends(get_activity_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_baby_owner(baby_id, db, current_user)
    return Response(content=store.export_activities(baby_id), media_type="application/json")


@router.get("/{activity_id}", response_model=ActivityRead)
def get_activity(
    activity_id: str,
    store: ActivityStore = Depends(get_activity_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    activity = store.get_activity(activity_id)
    require_baby_owner(activity.baby_id, db, current_user)
    return activity


@router.put("/{activity_id}", response_model=ActivityRead)
def update_activity(
    activity_id: str,
    changes: ActivityUpdate,
    store: ActivityStore = Depends(get_activity_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_baby_owner(store.get_activity(activity_id).baby_id, db, current_user)
    return store.update_activity(activity_id, changes)


@router.delete("/{activity_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_activity(
    activity_id: str,
    store: ActivityStore = Depends(get_activity_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_baby_owner(store.get_activity(activity_id).baby_id, db, current_user)
    store.delete_activity(activity_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
