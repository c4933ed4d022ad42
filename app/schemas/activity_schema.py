# app/schemas/activity_schema.py

from datetime import datetime
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator


class ActivityType(str, Enum):
    feeding = "feeding"
    diaper = "diaper"
    sleep = "sleep"
    bath = "bath"
    medicine = "medicine"
    measurement = "measurement"
    milestone = "milestone"
    custom = "custom"


ACTIVITY_DISPLAY_NAMES = {
    ActivityType.feeding: "Mamada",
    ActivityType.diaper: "Troca de fralda",
    ActivityType.sleep: "Sono",
    ActivityType.bath: "Banho",
    ActivityType.medicine: "Remédio",
    ActivityType.measurement: "Medição",
    ActivityType.milestone: "Marco",
    ActivityType.custom: "Personalizado",
}


# ------------------ detalhes por tipo ------------------

class FeedingDetails(BaseModel):
    kind: Literal["feeding"] = "feeding"
    feeding_type: Literal["breast", "bottle", "solid"] = "bottle"
    amount: Optional[float] = Field(default=None, ge=0)
    unit: str = "ml"
    side: Optional[Literal["left", "right", "both"]] = None
    duration: Optional[float] = Field(default=None, ge=0)


class DiaperDetails(BaseModel):
    kind: Literal["diaper"] = "diaper"
    diaper_type: Literal["wet", "dirty", "both"] = "wet"
    condition: Optional[Literal["normal", "loose", "hard", "unusual"]] = None


class SleepDetails(BaseModel):
    kind: Literal["sleep"] = "sleep"
    quality: Optional[Literal["excellent", "good", "fair", "poor"]] = None
    location: Optional[str] = None


class BathDetails(BaseModel):
    kind: Literal["bath"] = "bath"
    temperature: Optional[float] = None
    duration: Optional[float] = Field(default=None, ge=0)
    products: Optional[List[str]] = None


class MedicineDetails(BaseModel):
    kind: Literal["medicine"] = "medicine"
    name: str = Field(min_length=1)
    dosage: Optional[str] = None
    unit: Optional[str] = None
    reason: Optional[str] = None


class MeasurementDetails(BaseModel):
    kind: Literal["measurement"] = "measurement"
    metric: Optional[Literal["weight", "height", "temperature", "head_circumference"]] = None
    value: float
    unit: str
    percentile: Optional[float] = Field(default=None, ge=0, le=100)


class MilestoneDetails(BaseModel):
    kind: Literal["milestone"] = "milestone"
    title: str = Field(min_length=1)
    description: Optional[str] = None
    category: Literal["physical", "cognitive", "social", "language", "emotional"] = "physical"
    age_in_months: Optional[int] = Field(default=None, ge=0)


class CustomDetails(BaseModel):
    kind: Literal["custom"] = "custom"
    title: str = Field(min_length=1)
    description: Optional[str] = None
    value: Optional[str] = None


ActivityDetails = Annotated[
    Union[
        FeedingDetails,
        DiaperDetails,
        SleepDetails,
        BathDetails,
        MedicineDetails,
        MeasurementDetails,
        MilestoneDetails,
        CustomDetails,
    ],
    Field(discriminator="kind"),
]


def _check_details_match(activity_type, details):
    if details is not None and activity_type is not None and details.kind != ActivityType(activity_type).value:
        raise ValueError(
            f"details.kind '{details.kind}' não corresponde ao tipo '{ActivityType(activity_type).value}'"
        )


def _check_time_range(start_time, end_time):
    if start_time is not None and end_time is not None and end_time < start_time:
        raise ValueError("end_time não pode ser anterior a start_time")


def to_local_naive(value: Optional[datetime]) -> Optional[datetime]:
    # horários são gravados sem fuso, no relógio local
    if value is not None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


# ------------------ payloads ------------------

class ActivityCreate(BaseModel):
    baby_id: str
    type: ActivityType
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: Optional[float] = Field(default=None, ge=0)
    details: ActivityDetails
    notes: Optional[str] = None

    local_times = field_validator("start_time", "end_time")(to_local_naive)

    @model_validator(mode="after")
    def validate_details(self):
        _check_details_match(self.type, self.details)
        _check_time_range(self.start_time, self.end_time)
        if self.duration is None and self.end_time is not None:
            self.duration = (self.end_time - self.start_time).total_seconds()
        return self


class ActivityUpdate(BaseModel):
    type: Optional[ActivityType] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration: Optional[float] = Field(default=None, ge=0)
    details: Optional[ActivityDetails] = None
    notes: Optional[str] = None

    local_times = field_validator("start_time", "end_time")(to_local_naive)

    @model_validator(mode="after")
    def validate_details(self):
        if self.type is not None and self.details is None:
            raise ValueError("alterar o tipo exige novos details")
        _check_details_match(self.type, self.details)
        _check_time_range(self.start_time, self.end_time)
        return self


class ActivityRead(BaseModel):
    id: str
    baby_id: str
    type: ActivityType
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: Optional[float] = None
    details: ActivityDetails
    notes: Optional[str] = None
    created_by: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
