"""SQLAlchemy models for persistent generation history."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class Job(Base):
    __tablename__ = "generation_jobs"

    id = Column(String(36), primary_key=True)
    session_id = Column(String(128), nullable=False, index=True)
    user_request = Column(Text, nullable=False)
    brand_name = Column(String(256), nullable=False, default="")
    strategy = Column(String(32), nullable=False)
    quality = Column(String(16), nullable=False)
    status = Column(String(20), nullable=False, default="running")  # running | completed | failed | cancelled
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    completed_at = Column(DateTime, nullable=True)
    repair_attempts = Column(Integer, nullable=False, default=0)
    fallback_path = Column(String(32), nullable=True)
    parse_stage = Column(String(32), nullable=True)
    file_count = Column(Integer, nullable=False, default=0)
    duration_ms = Column(Integer, nullable=True)
    error = Column(Text, nullable=True)

    def __repr__(self):
        return f"<Job {self.id} {self.strategy} status={self.status} files={self.file_count}>"
