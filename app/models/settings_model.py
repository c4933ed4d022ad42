# app/models/settings_model.py
from datetime import datetime

from sqlalchemy import Column, String, Text, DateTime
from config.database import Base


class SettingsEntry(Base):
    """Armazenamento chave/valor; o valor é JSON serializado."""

    __tablename__ = "settings"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)
