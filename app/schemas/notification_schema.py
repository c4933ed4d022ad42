# app/schemas/notification_schema.py

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class AuthorizationRequest(BaseModel):
    granted: bool


class IntervalReminderRequest(BaseModel):
    baby_id: str
    interval_seconds: float = Field(gt=0)


class CalendarReminderRequest(BaseModel):
    baby_id: str
    hour: int = Field(ge=0, le=23)
    minute: int = Field(ge=0, le=59)


class MedicineReminderRequest(CalendarReminderRequest):
    medicine_name: str = Field(min_length=1)
    repeat_weekdays: List[int] = []  # 1 = domingo ... 7 = sábado


class MilestoneCheckRequest(BaseModel):
    baby_id: str
    age_in_months: int = Field(ge=0)


class SmartSuggestionRequest(BaseModel):
    title: str
    body: str
    delay_seconds: float = Field(default=3600, gt=0)


class NotificationActionRequest(BaseModel):
    action_identifier: str
    baby_id: Optional[str] = None
    medicine_name: Optional[str] = None


class NotificationRequestRead(BaseModel):
    identifier: str
    category: str
    title: str
    body: str
    trigger: Dict[str, Any]
    user_info: Dict[str, Any] = {}
    created_at: datetime
