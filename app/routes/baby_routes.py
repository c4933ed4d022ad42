from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status

from app.models.auth_models import User
from app.schemas.baby_schema import BabyAgeInfo, BabyCreate, BabyImportRequest, BabyResponse, BabyUpdate
from app.dependencies.auth import get_current_user
from app.dependencies.services import get_baby_store, get_media_store
from app.stores.baby_store import BabyStore, age_info
from app.stores.media_store import MediaStore

router = APIRouter(prefix="/babies", tags=["babies"])


# POST: cria novo bebê
@router.post("", response_model=BabyResponse, status_code=status.HTTP_201_CREATED)
def create_baby(
    baby: BabyCreate,
    store: BabyStore = Depends(get_baby_store),
    current_user: User = Depends(get_current_user)
):
    return store.add_baby(baby, current_user.id)


# GET: busca os bebês do usuário logado (mais novos primeiro)
@router.get("/me", response_model=List[BabyResponse])
def get_my_babies(
    store: BabyStore = Depends(get_baby_store),
    current_user: User = Depends(get_current_user)
):
    return store.load_babies(current_user.id)


@router.get("/search", response_model=List[BabyResponse])
def search_babies(
    q: str = "",
    store: BabyStore = Depends(get_baby_store),
    current_user: User = Depends(get_current_user)
):
    return store.search_babies(current_user.id, q)


@router.get("/selected", response_model=Optional[BabyResponse])
def get_selected_baby(
    store: BabyStore = Depends(get_baby_store),
    current_user: User = Depends(get_current_user)
):
    return store.get_selected_baby(current_user.id)


# importa um bebê exportado anteriormente
@router.post("/import", response_model=BabyResponse, status_code=status.HTTP_201_CREATED)
def import_baby(
    payload: BabyImportRequest,
    store: BabyStore = Depends(get_baby_store),
    current_user: User = Depends(get_current_user)
):
    return store.import_baby(payload.data, current_user.id)


@router.get("/{baby_id}", response_model=BabyResponse)
def get_baby(
    baby_id: str,
    store: BabyStore = Depends(get_baby_store),
    current_user: User = Depends(get_current_user)
):
    return store.get_baby(baby_id, current_user.id)


# PUT: atualiza um bebê específico (se for do usuário)
@router.put("/{baby_id}", response_model=BabyResponse)
def update_baby(
    baby_id: str,
    baby_data: BabyUpdate,
    store: BabyStore = Depends(get_baby_store),
    current_user: User = Depends(get_current_user)
):
    return store.update_baby(baby_id, baby_data, current_user.id)


# DELETE: remove o bebê, suas mídias e registros
@router.delete("/{baby_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_baby(
    baby_id: str,
    store: BabyStore = Depends(get_baby_store),
    media_store: MediaStore = Depends(get_media_store),
    current_user: User = Depends(get_current_user)
):
    store.get_baby(baby_id, current_user.id)
    media_store.delete_media_for_baby(baby_id)
    store.delete_baby(baby_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{baby_id}/select", response_model=BabyResponse)
def select_baby(
    baby_id: str,
    store: BabyStore = Depends(get_baby_store),
    current_user: User = Depends(get_current_user)
):
    return store.select_baby(baby_id, current_user.id)


@router.get("/{baby_id}/age", response_model=BabyAgeInfo)
def get_baby_age(
    baby_id: str,
    today: Optional[date] = None,
    store: BabyStore = Depends(get_baby_store),
    current_user: User = Depends(get_current_user)
):
    baby = store.get_baby(baby_id, current_user.id)
    return age_info(baby.birth_date, today)


@router.get("/{baby_id}/export")
def export_baby(
    baby_id: str,
    store: BabyStore = Depends(get_baby_store),
    current_user: User = Depends(get_current_user)
):
    return Response(content=store.export_baby(baby_id, current_user.id), media_type="application/json")
