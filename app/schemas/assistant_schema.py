# app/schemas/assistant_schema.py

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class ScheduleSuggestion(BaseModel):
    type: str
    suggested_time: datetime
    confidence: float
    reason: str


class PredictedEvent(BaseModel):
    type: str
    predicted_time: datetime
    confidence: float


class AdviceRequest(BaseModel):
    query: str
    baby_id: Optional[str] = None


class AdviceResponse(BaseModel):
    question: str
    answer: str
    category: str
    confidence: float
    sources: List[str]


class ParentingTip(BaseModel):
    title: str
    content: str
    category: str


class AppContext(str, Enum):
    home_screen = "home_screen"
    feeding_log = "feeding_log"
    sleep_log = "sleep_log"


class StressLevel(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


class UserInteractionType(str, Enum):
    normal_logging = "normal_logging"
    frequent_logging = "frequent_logging"
    late_night_activity = "late_night_activity"
    multiple_retries = "multiple_retries"


class UserInteraction(BaseModel):
    type: UserInteractionType
    context: Optional[str] = None
    timestamp: Optional[datetime] = None


class SupportMessage(BaseModel):
    text: str
    level: StressLevel
    timestamp: datetime
    type: str = "encouragement"


class RelaxationTechnique(BaseModel):
    name: str
    description: str
    duration: float  # segundos
    category: str
