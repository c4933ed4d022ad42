import uuid

from sqlalchemy import Column, String, DateTime, func
from config.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    password_hash = Column(String)

    role = Column(String, default="parent", nullable=False)
    created_at = Column(DateTime, server_default=func.now())
