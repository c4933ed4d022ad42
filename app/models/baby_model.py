import uuid
from datetime import datetime

from sqlalchemy import Column, String, Date, DateTime, Float, ForeignKey
from config.database import Base


class Baby(Base):
    __tablename__ = "babies"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), index=True)  # FK para o pai/mãe
    name = Column(String, nullable=False)
    birth_date = Column(Date, nullable=False)
    gender = Column(String(6), nullable=False)
    profile_image_path = Column(String, nullable=True)
    weight = Column(Float, nullable=True)  # kg
    height = Column(Float, nullable=True)  # cm

    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)
