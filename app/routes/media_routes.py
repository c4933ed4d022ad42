from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from sqlalchemy.orm import Session

from app.models.auth_models import User
from app.models.baby_model import Baby
from app.schemas.media_schema import AnalysisResultRead, MediaItemRead, MediaStatistics, TagRequest
from app.dependencies.auth import get_current_user, require_baby_owner
from app.dependencies.services import get_media_store
from app.stores.media_store import MediaStore
from config.database import get_db

router = APIRouter(prefix="/media", tags=["media"])

MediaType = Literal["photo", "video"]


def _owned_item(media_id: str, store: MediaStore, db: Session, user: User):
    item = store.get_media(media_id)
    require_baby_owner(item.baby_id, db, user)
    return item


@router.post("/photos", response_model=MediaItemRead, status_code=status.HTTP_201_CREATED)
async def upload_photo(
    baby_id: str = Form(...),
    description: Optional[str] = Form(None),
    file: UploadFile = File(...),
    store: MediaStore = Depends(get_media_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_baby_owner(baby_id, db, current_user)
    data = await file.read()
    return store.save_photo(baby_id, data, description)


@router.post("/videos", response_model=MediaItemRead, status_code=status.HTTP_201_CREATED)
async def upload_video(
    baby_id: str = Form(...),
    description: Optional[str] = Form(None),
    duration: Optional[float] = Form(None),
    file: UploadFile = File(...),
    store: MediaStore = Depends(get_media_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_baby_owner(baby_id, db, current_user)
    data = await file.read()
    return store.save_video(baby_id, data, description, duration)


# cadastra arquivos que já estão na pasta de mídia
@router.post("/scan", response_model=List[MediaItemRead])
def scan_media(
    store: MediaStore = Depends(get_media_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    registered = store.scan_media_directory()
    own = {baby_id for (baby_id,) in db.query(Baby.id).filter(Baby.user_id == current_user.id).all()}
    return [item for item in registered if item.baby_id in own]


@router.get("", response_model=List[MediaItemRead])
def list_media(
    baby_id: str = Query(...),
    type: Optional[MediaType] = None,
    store: MediaStore = Depends(get_media_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_baby_owner(baby_id, db, current_user)
    return store.list_media(baby_id, type)


@router.get("/favorites", response_model=List[MediaItemRead])
def list_favorites(
    baby_id: str = Query(...),
    store: MediaStore = Depends(get_media_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_baby_owner(baby_id, db, current_user)
    return store.favorites(baby_id)


@router.get("/search", response_model=List[MediaItemRead])
def search_media(
    baby_id: str = Query(...),
    q: str = "",
    type: Optional[MediaType] = None,
    store: MediaStore = Depends(get_media_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_baby_owner(baby_id, db, current_user)
    return store.search_media(q, baby_id, type)


@router.get("/statistics", response_model=MediaStatistics)
def media_statistics(
    baby_id: str = Query(...),
    store: MediaStore = Depends(get_media_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_baby_owner(baby_id, db, current_user)
    return store.statistics(baby_id)


@router.get("/{media_id}", response_model=MediaItemRead)
def get_media(
    media_id: str,
    store: MediaStore = Depends(get_media_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _owned_item(media_id, store, db, current_user)


@router.delete("/{media_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_media(
    media_id: str,
    store: MediaStore = Depends(get_media_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _owned_item(media_id, store, db, current_user)
    store.delete_media(media_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{media_id}/tags", response_model=MediaItemRead)
def add_tag(
    media_id: str,
    payload: TagRequest,
    store: MediaStore = Depends(get_media_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _owned_item(media_id, store, db, current_user)
    return store.add_tag(media_id, payload.tag)


@router.delete("/{media_id}/tags/{tag}", response_model=MediaItemRead)
def remove_tag(
    media_id: str,
    tag: str,
    store: MediaStore = Depends(get_media_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _owned_item(media_id, store, db, current_user)
    return store.remove_tag(media_id, tag)


@router.post("/{media_id}/favorite", response_model=MediaItemRead)
def toggle_favorite(
    media_id: str,
    store: MediaStore = Depends(get_media_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _owned_item(media_id, store, db, current_user)
    return store.toggle_favorite(media_id)


@router.get("/{media_id}/analyses", response_model=List[AnalysisResultRead])
def list_analyses(
    media_id: str,
    store: MediaStore = Depends(get_media_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _owned_item(media_id, store, db, current_user)
    return store.analysis_results(media_id)
