# app/schemas/settings_schema.py

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class QuietHours(BaseModel):
    start: datetime
    end: datetime


class NotificationSettings(BaseModel):
    enabled: bool = True
    feeding_reminders: bool = True
    sleep_reminders: bool = True
    medicine_reminders: bool = True
    milestone_alerts: bool = True
    quiet_hours: Optional[QuietHours] = None


class PrivacySettings(BaseModel):
    app_lock_enabled: bool = False
    biometric_enabled: bool = False
    auto_lock_timeout: float = 300  # segundos
    share_analytics: bool = False
    share_with_family: bool = True


class SyncSettings(BaseModel):
    cloud_enabled: bool = True
    dropbox_enabled: bool = False
    auto_sync: bool = True
    sync_on_wifi_only: bool = True
    last_sync_date: Optional[datetime] = None


class UnitSettings(BaseModel):
    weight: Literal["kg", "lb"] = "kg"
    height: Literal["cm", "inch"] = "cm"
    temperature: Literal["celsius", "fahrenheit"] = "celsius"
    volume: Literal["ml", "oz"] = "ml"


class DisplaySettings(BaseModel):
    theme: Literal["light", "dark", "system"] = "system"
    language: str = "pt-BR"
    date_format: str = "%d/%m/%Y"
    time_format: str = "%H:%M"
    units: UnitSettings = Field(default_factory=UnitSettings)


class AISettings(BaseModel):
    analysis_enabled: bool = True
    auto_analysis: bool = False
    analysis_quota: int = 30
    used_quota: int = 0
    quota_reset_date: datetime = Field(default_factory=datetime.now)


class AppSettings(BaseModel):
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    privacy: PrivacySettings = Field(default_factory=PrivacySettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    display: DisplaySettings = Field(default_factory=DisplaySettings)
    ai: AISettings = Field(default_factory=AISettings)


SECTION_MODELS = {
    "notifications": NotificationSettings,
    "privacy": PrivacySettings,
    "sync": SyncSettings,
    "display": DisplaySettings,
    "ai": AISettings,
}


class SettingsValidationResponse(BaseModel):
    valid: bool
    warnings: List[str]


class FormatRequest(BaseModel):
    weight: Optional[float] = None
    height: Optional[float] = None
    temperature: Optional[float] = None
    volume: Optional[float] = None
    moment: Optional[datetime] = None


class SettingsImportRequest(BaseModel):
    data: str  # JSON gerado por /settings/export
