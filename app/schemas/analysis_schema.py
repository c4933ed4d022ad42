# app/schemas/analysis_schema.py

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class GAIAnalysisType(str, Enum):
    emotion = "emotion"
    development = "development"
    milestone = "milestone"


class AnalysisRequest(BaseModel):
    media_id: str
    analysis_type: GAIAnalysisType
    device_id: str = "unknown"


class QuotaStatus(BaseModel):
    hourly_remaining: int
    daily_remaining: int
    available_analyses: Optional[int] = None  # contador diário das configurações
