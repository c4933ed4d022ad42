from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Response

from app.errors import ValidationFailed
from app.models.auth_models import User
from app.schemas.settings_schema import (
    AppSettings,
    FormatRequest,
    SettingsImportRequest,
    SettingsValidationResponse,
)
from app.dependencies.auth import get_current_user
from app.dependencies.services import get_settings_store
from app.stores.settings_store import SettingsStore
from app.utils import unit_formatter

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=AppSettings)
def get_settings(
    store: SettingsStore = Depends(get_settings_store),
    current_user: User = Depends(get_current_user),
):
    return store.load()


@router.put("", response_model=AppSettings)
def save_settings(
    settings: AppSettings,
    store: SettingsStore = Depends(get_settings_store),
    current_user: User = Depends(get_current_user),
):
    return store.save(settings)


@router.post("/reset", response_model=AppSettings)
def reset_settings(
    store: SettingsStore = Depends(get_settings_store),
    current_user: User = Depends(get_current_user),
):
    return store.reset_to_defaults()


@router.get("/export")
def export_settings(
    store: SettingsStore = Depends(get_settings_store),
    current_user: User = Depends(get_current_user),
):
    return Response(content=store.export_settings(), media_type="application/json")


@router.post("/import", response_model=AppSettings)
def import_settings(
    payload: SettingsImportRequest,
    store: SettingsStore = Depends(get_settings_store),
    current_user: User = Depends(get_current_user),
):
    if not store.import_settings(payload.data):
        raise ValidationFailed([store.error_message])
    return store.load()


@router.get("/validate", response_model=SettingsValidationResponse)
def validate_settings(
    store: SettingsStore = Depends(get_settings_store),
    current_user: User = Depends(get_current_user),
):
    warnings = store.validate_settings()
    return {"valid": not warnings, "warnings": warnings}


@router.post("/quota-check")
def check_quota_reset(
    store: SettingsStore = Depends(get_settings_store),
    current_user: User = Depends(get_current_user),
):
    """Zera a cota usada se o dia mudou desde o último reset."""
    was_reset = store.check_quota_reset()
    return {"reset": was_reset, "available": store.available_analysis_count()}


@router.post("/format")
def format_values(
    payload: FormatRequest,
    store: SettingsStore = Depends(get_settings_store),
    current_user: User = Depends(get_current_user),
):
    display = store.load().display
    formatted: Dict[str, str] = {}
    if payload.weight is not None:
        formatted["weight"] = unit_formatter.format_weight(payload.weight, display)
    if payload.height is not None:
        formatted["height"] = unit_formatter.format_height(payload.height, display)
    if payload.temperature is not None:
        formatted["temperature"] = unit_formatter.format_temperature(payload.temperature, display)
    if payload.volume is not None:
        formatted["volume"] = unit_formatter.format_volume(payload.volume, display)
    if payload.moment is not None:
        formatted["date"] = unit_formatter.format_date(payload.moment, display)
        formatted["time"] = unit_formatter.format_time(payload.moment, display)
    return formatted


@router.patch("/{section}", response_model=AppSettings)
def update_section(
    section: str,
    data: Dict[str, Any] = Body(...),
    store: SettingsStore = Depends(get_settings_store),
    current_user: User = Depends(get_current_user),
):
    return store.update_section(section, data)


@router.post("/{section}/reset", response_model=AppSettings)
def reset_section(
    section: str,
    store: SettingsStore = Depends(get_settings_store),
    current_user: User = Depends(get_current_user),
):
    return store.reset_section(section)
