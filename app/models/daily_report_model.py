from sqlalchemy import Column, Integer, String, Date, ForeignKey, Text, JSON, DateTime, func
from config.database import Base

class DailyReport(Base):
    __tablename__ = "daily_reports"

    id = Column(Integer, primary_key=True)
    baby_id = Column(String(36), ForeignKey("babies.id", ondelete="CASCADE"), index=True)
    date = Column(Date, nullable=False)
    total_sleep_minutes = Column(Integer, nullable=False, default=0)
    longest_nap_minutes = Column(Integer, nullable=False, default=0)
    total_feeds = Column(Integer, nullable=False, default=0)
    activity_counts = Column(JSON, nullable=False, default=dict)
    notes = Column(Text)
    created_at = Column(DateTime, server_default=func.now())
