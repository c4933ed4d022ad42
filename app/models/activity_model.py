# app/models/activity_model.py
import uuid
from datetime import datetime

from sqlalchemy import Column, String, Float, Text, JSON, ForeignKey, DateTime
from config.database import Base


class ActivityRecord(Base):
    __tablename__ = "activities"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # só o id do bebê, sem back-reference para o objeto pai
    baby_id = Column(String(36), ForeignKey("babies.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(20), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=True)
    duration = Column(Float, nullable=True)  # segundos
    details = Column(JSON, nullable=False, default=dict)
    notes = Column(Text, nullable=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)

    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)
