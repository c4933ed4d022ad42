# app/schemas/media_schema.py

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel


class AnalysisResultRead(BaseModel):
    id: str
    media_id: str
    analysis_type: str
    result: str
    confidence: float
    recommendations: List[str] = []
    development_scores: Dict[str, float] = {}
    emotion_tags: List[str] = []
    analyzed_at: datetime

    class Config:
        from_attributes = True


class MediaItemRead(BaseModel):
    id: str
    baby_id: str
    type: Literal["photo", "video"]
    file_name: str
    file_path: str
    thumbnail_path: Optional[str] = None
    file_size: int
    duration: Optional[float] = None
    tags: List[str] = []
    description: Optional[str] = None
    is_favorite: bool
    is_analyzed: bool
    created_at: datetime

    class Config:
        from_attributes = True


class TagRequest(BaseModel):
    tag: str


class MediaStatistics(BaseModel):
    photo_count: int
    video_count: int
    total_size: int
