"""PostgreSQL/SQLite generation history CRUD operations."""

import logging
import os
from datetime import datetime, timezone

from sqlalchemy import create_engine, desc
from sqlalchemy.orm import sessionmaker

from contracts import BuildRequest, GenerationResult
from persistence.models import Base, Job

logger = logging.getLogger(__name__)

_engine = None
_Session = None


def _get_database_url() -> str:
    """Return DATABASE_URL or fall back to local SQLite."""
    return os.getenv("DATABASE_URL", "sqlite:///jobs.db")


def init_db(url: str | None = None) -> None:
    """Create tables if they don't exist and initialize the session factory."""
    global _engine, _Session
    url = url or _get_database_url()
    _engine = create_engine(url, echo=False)
    Base.metadata.create_all(_engine)
    _Session = sessionmaker(bind=_engine, expire_on_commit=False)
    logger.info(f"[job_store] Database initialized ({url.split('@')[-1] if '@' in url else url})")


def _session():
    """Return a new database session, initializing if needed."""
    if _Session is None:
        init_db()
    return _Session()


def create_job(job_id: str, request: BuildRequest, session_id: str = "anonymous") -> Job:
    """Insert a running job for *request*. Returns the Job."""
    job = Job(
        id=job_id,
        session_id=session_id,
        user_request=request.message,
        brand_name=request.brand_context.name,
        strategy=request.strategy.value,
        quality=request.quality.value,
        status="running",
    )
    session = _session()
    try:
        session.add(job)
        session.commit()
        return job
    finally:
        session.close()


def update_job(
    job_id: str,
    result: GenerationResult | None = None,
    *,
    status: str | None = None,
    error: str | None = None,
) -> None:
    """Record the outcome of a job. A result without an explicit status means completed."""
    session = _session()
    try:
        job = session.get(Job, job_id)
        if not job:
            logger.warning(f"[job_store] no job {job_id} to update")
            return

        job.status = status or ("failed" if error else "completed")
        job.completed_at = datetime.now(timezone.utc)
        job.error = error
        if result is not None:
            job.repair_attempts = result.artifacts.repair_attempts
            job.fallback_path = result.fallback_path.value
            job.parse_stage = result.parse_stage.value
            job.file_count = len(result.files)
            job.duration_ms = result.generation_duration_ms

        session.commit()
    finally:
        session.close()


def get_job(job_id: str) -> Job | None:
    """Fetch a single job by ID."""
    session = _session()
    try:
        return session.get(Job, job_id)
    finally:
        session.close()


def list_jobs(session_id: str | None = None, limit: int = 20) -> list[Job]:
    """List recent jobs, optionally filtered by session."""
    session = _session()
    try:
        query = session.query(Job)
        if session_id:
            query = query.filter_by(session_id=session_id)
        return query.order_by(desc(Job.created_at)).limit(limit).all()
    finally:
        session.close()
