from pydantic import BaseModel
from datetime import date, datetime
from typing import Literal, Optional

Gender = Literal["male", "female", "other"]


class BabyCreate(BaseModel):
    name: str
    birth_date: date
    gender: Gender = "other"
    profile_image_path: Optional[str] = None
    weight: Optional[float] = None
    height: Optional[float] = None

class BabyUpdate(BaseModel):
    name: Optional[str] = None
    birth_date: Optional[date] = None
    gender: Optional[Gender] = None
    profile_image_path: Optional[str] = None
    weight: Optional[float] = None
    height: Optional[float] = None

class BabyResponse(BaseModel):
    id: str
    name: str
    birth_date: date
    gender: str
    profile_image_path: Optional[str] = None
    weight: Optional[float] = None
    height: Optional[float] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BabyAgeInfo(BaseModel):
    months: int
    days: int
    age_string: str


class BabyImportRequest(BaseModel):
    data: str  # JSON gerado por /babies/{id}/export
