# app/models/media_model.py
import uuid
from datetime import datetime

from sqlalchemy import Column, String, Integer, Float, Boolean, Text, JSON, ForeignKey, DateTime
from config.database import Base


class MediaItem(Base):
    __tablename__ = "media_items"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    baby_id = Column(String(36), ForeignKey("babies.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(10), nullable=False)  # photo | video
    file_name = Column(String, nullable=False, unique=True)
    file_path = Column(String, nullable=False)
    thumbnail_path = Column(String, nullable=True)
    file_size = Column(Integer, nullable=False, default=0)
    duration = Column(Float, nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    description = Column(Text, nullable=True)
    is_favorite = Column(Boolean, nullable=False, default=False)
    is_analyzed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)


class AnalysisResult(Base):
    __tablename__ = "analysis_results"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    media_id = Column(String(36), ForeignKey("media_items.id", ondelete="CASCADE"), nullable=False, index=True)
    analysis_type = Column(String(20), nullable=False)
    result = Column(Text, nullable=False)
    confidence = Column(Float, nullable=False)
    recommendations = Column(JSON, nullable=False, default=list)
    development_scores = Column(JSON, nullable=False, default=dict)
    emotion_tags = Column(JSON, nullable=False, default=list)
    analyzed_at = Column(DateTime, default=datetime.now, nullable=False)
