# app/schemas/report_schema.py

from datetime import date
from typing import Dict, Optional

from pydantic import BaseModel

class DailyReportResponse(BaseModel):
    total_sleep_minutes: int
    total_feeds: int
    longest_nap_minutes: int
    activity_counts: Dict[str, int] = {}

    class Config:
        from_attributes = True


class DailyReportOut(BaseModel):
    date: str
    total_sleep_minutes: int
    longest_nap_minutes: int


class TrendData(BaseModel):
    direction: str  # up | down | stable
    percentage: float
    description: Optional[str] = None


class StatisticsResponse(BaseModel):
    period: str
    start_date: date
    activity_counts: Dict[str, int]
    total_duration: Dict[str, float]
    averages: Dict[str, float]
    trends: Dict[str, TrendData]
