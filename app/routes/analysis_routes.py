from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.models.auth_models import User
from app.schemas.analysis_schema import AnalysisRequest, QuotaStatus
from app.schemas.media_schema import AnalysisResultRead
from app.dependencies.auth import get_current_user, require_baby_owner
from app.dependencies.services import get_analysis_service, get_media_store, get_settings_store
from app.services.analysis_service import AnalysisService
from app.stores.media_store import MediaStore
from app.stores.settings_store import SettingsStore
from config.database import get_db

router = APIRouter(prefix="/analysis", tags=["analysis"])


@router.post("", response_model=AnalysisResultRead)
async def request_analysis(
    payload: AnalysisRequest,
    service: AnalysisService = Depends(get_analysis_service),
    media_store: MediaStore = Depends(get_media_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Envia a mídia para análise em nuvem.
    Erros de opt-in, limite e cota voltam como 403/429 com o campo `code`.
    """
    item = media_store.get_media(payload.media_id)
    require_baby_owner(item.baby_id, db, current_user)
    return await service.request_analysis(payload.media_id, payload.analysis_type, payload.device_id)


@router.get("/quota", response_model=QuotaStatus)
def get_quota(
    service: AnalysisService = Depends(get_analysis_service),
    settings_store: SettingsStore = Depends(get_settings_store),
    current_user: User = Depends(get_current_user),
):
    status = service.quota_status()
    status.available_analyses = settings_store.available_analysis_count()
    return status


@router.get("/results/{media_id}", response_model=List[AnalysisResultRead])
def get_results(
    media_id: str,
    service: AnalysisService = Depends(get_analysis_service),
    media_store: MediaStore = Depends(get_media_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    item = media_store.get_media(media_id)
    require_baby_owner(item.baby_id, db, current_user)
    return service.results_for(media_id)
