from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.models.auth_models import User
from app.schemas.social_schema import PostCreate, SocialPostRead, SocialUserRead
from app.dependencies.auth import get_current_user, require_baby_owner
from app.dependencies.services import get_media_store, get_social_service
from app.services.social_service import SocialService
from app.stores.media_store import MediaStore
from config.database import get_db

router = APIRouter(prefix="/social", tags=["social"])


@router.post("/connect", response_model=SocialUserRead)
async def connect(
    social: SocialService = Depends(get_social_service),
    current_user: User = Depends(get_current_user),
):
    return await social.connect(owner=current_user.id)


@router.post("/disconnect")
def disconnect(
    social: SocialService = Depends(get_social_service),
    current_user: User = Depends(get_current_user),
):
    social.disconnect(owner=current_user.id)
    return {"connected": False}


@router.post("/posts", response_model=SocialPostRead)
async def publish_post(
    payload: PostCreate,
    social: SocialService = Depends(get_social_service),
    media_store: MediaStore = Depends(get_media_store),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Publica um texto, com fotos/vídeos opcionais do próprio usuário."""
    if not payload.media_ids:
        return await social.publish_post(payload.content, payload.privacy, owner=current_user.id)

    items = [media_store.get_media(media_id) for media_id in payload.media_ids]
    for item in items:
        require_baby_owner(item.baby_id, db, current_user)
    return await social.publish_post_with_media(payload.content, items, payload.privacy, owner=current_user.id)


@router.get("/posts", response_model=List[SocialPostRead])
def list_posts(
    social: SocialService = Depends(get_social_service),
    current_user: User = Depends(get_current_user),
):
    return social.posts(owner=current_user.id)
