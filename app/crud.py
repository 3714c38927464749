from __future__ import annotations
import logging
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import extract, func, select
from sqlalchemy.orm import Session

from . import models, security
from .models import Job, JobStatus

logger = logging.getLogger(__name__)

# (parameter, "all" disables it, predicate factory)
_JOB_FILTERS = (
    ("search", False, lambda v: Job.position.icontains(v, autoescape=True)),
    ("status", True, lambda v: Job.status == v),
    ("job_type", True, lambda v: Job.job_type == v),
)

# row id breaks ties in the same direction, so a-z and z-a mirror each other
_SORT_ORDERS = {
    "latest": (Job.created_at.desc(), Job.id.desc()),
    "oldest": (Job.created_at.asc(), Job.id.asc()),
    "a-z": (Job.position.asc(), Job.id.asc()),
    "z-a": (Job.position.desc(), Job.id.desc()),
}

STATS_MONTHS = 6

# largest id a 64-bit INTEGER column can hold
MAX_ROW_ID = 2**63 - 1

def get_user_by_email(db: Session, email: str) -> models.User | None:
    return db.query(models.User).filter(models.User.email == email).first()

def create_user(
    db: Session, name: str, email: str, password: str, is_test_user: bool = False
) -> models.User:
    hashed_pw = security.hash_password(password)
    user = models.User(name=name, email=email, hashed_password=hashed_pw, is_test_user=is_test_user)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user

def ensure_test_user(db: Session, name: str, email: str, password: str) -> models.User:
    """Create the read-only demo account, or flag an existing user with that email."""
    user = get_user_by_email(db, email)
    if user is None:
        logger.info("Creating read-only demo user %s", email)
        return create_user(db, name, email, password, is_test_user=True)
    if not user.is_test_user:
        user.is_test_user = True
        db.commit()
    return user

# Jobs API helpers
def build_job_filters(user_id: int, **params: Any) -> list:
    """
    Owner constraint first, then one predicate per supplied parameter.

    Recognised parameters are ``search``, ``status`` and ``job_type``; a missing
    or empty value adds nothing, and so does ``"all"`` for status and job type.
    """
    clauses = [Job.created_by == user_id]
    for name, all_means_any, predicate in _JOB_FILTERS:
        value = params.get(name)
        if not value or (all_means_any and value == "all"):
            continue
        clauses.append(predicate(value))
    return clauses

def list_jobs(
    db: Session,
    user_id: int,
    *,
    search: str | None = None,
    status: str | None = None,
    job_type: str | None = None,
    sort: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[Job], int]:
    """Return one page of the caller's matching jobs and the total match count."""
    filters = build_job_filters(user_id, search=search, status=status, job_type=job_type)

    q = select(Job).where(*filters)
    order = _SORT_ORDERS.get(sort or "")
    if order:
        q = q.order_by(*order)
    q = q.offset((page - 1) * limit).limit(limit)

    jobs = list(db.execute(q).scalars().all())
    total = db.scalar(select(func.count()).select_from(Job).where(*filters)) or 0
    return jobs, total

def get_job(db: Session, job_id: int, user_id: int) -> Job | None:
    if not 0 < job_id <= MAX_ROW_ID:
        return None
    return db.execute(
        select(Job).where(Job.id == job_id, Job.created_by == user_id)
    ).scalar_one_or_none()

def create_job(db: Session, user_id: int, fields: dict[str, Any]) -> Job:
    # owner always comes from the caller
    job = Job(**{**fields, "created_by": user_id})
    db.add(job)
    db.commit()
    db.refresh(job)
    logger.info("User %s created job %s", user_id, job.id)
    return job

def update_job(db: Session, job_id: int, user_id: int, changes: dict[str, Any]) -> Job | None:
    job = get_job(db, job_id, user_id)
    if not job:
        return None
    for field, value in changes.items():
        setattr(job, field, value)
    # bumped even when nothing else changed
    job.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(job)
    return job

def delete_job(db: Session, job_id: int, user_id: int) -> bool:
    job = get_job(db, job_id, user_id)
    if not job:
        return False
    db.delete(job)
    db.commit()
    logger.info("User %s deleted job %s", user_id, job_id)
    return True

# Stats
def job_status_counts(db: Session, user_id: int) -> dict[str, int]:
    """Count the user's jobs per status; every known status is present, unknown ones are dropped."""
    counts = {s.value: 0 for s in JobStatus}
    rows = db.execute(
        select(Job.status, func.count(Job.id))
        .where(Job.created_by == user_id)
        .group_by(Job.status)
    ).all()
    counts.update((status, count) for status, count in rows if status in counts)
    return counts

def monthly_applications(db: Session, user_id: int, months: int = STATS_MONTHS) -> list[dict[str, Any]]:
    """
    Applications per calendar month for the most recent ``months`` months that
    have any, oldest first, labelled like ``"Jun 2023"``.
    """
    year = extract("year", Job.created_at)
    month = extract("month", Job.created_at)
    rows = db.execute(
        select(year, month, func.count(Job.id))
        .where(Job.created_by == user_id)
        .group_by(year, month)
        .order_by(year.desc(), month.desc())
        .limit(months)
    ).all()
    return [
        {"date": date(int(y), int(m), 1).strftime("%b %Y"), "count": count}
        for y, m, count in reversed(rows)
    ]
