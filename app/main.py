# app/main.py
import logging
import math
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy import text
from sqlalchemy.orm import Session

from . import crud, models
from .auth import authenticate_user, get_current_user, get_writable_user
from .config import settings
from .database import Base, SessionLocal, engine, get_db
from .errors import APIError, BadRequestError, NotFoundError
from .schemas import (
    JobCreate,
    JobEnvelope,
    JobListOut,
    JobOut,
    JobUpdate,
    StatsOut,
    Token,
    UserCreate,
    UserOut,
)
from .security import create_access_token

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# keeps (page - 1) * limit well inside a 64-bit OFFSET
MAX_PAGE = 1_000_000


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create tables if they don't exist
    Base.metadata.create_all(bind=engine)
    if settings.TEST_USER_EMAIL and settings.TEST_USER_PASSWORD:
        db = SessionLocal()
        try:
            crud.ensure_test_user(
                db, settings.TEST_USER_NAME, settings.TEST_USER_EMAIL, settings.TEST_USER_PASSWORD
            )
        finally:
            db.close()
    yield


app = FastAPI(title="Job Tracker API", debug=settings.DEBUG, lifespan=lifespan)


@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError):
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def _job_envelope(job: models.Job) -> JobEnvelope:
    return JobEnvelope(job=JobOut.model_validate(job))


@app.get("/health", tags=["monitoring"])
def health_check(db: Session = Depends(get_db)):
    """
    Checks if the application is healthy, including the database connection.
    """
    try:
        db.execute(text("SELECT 1"))
        return {"status": "ok", "database": "ok"}
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Database connection error"
        )

@app.post("/api/register", response_model=UserOut, status_code=status.HTTP_201_CREATED, tags=["auth"])
def register_api(payload: UserCreate, db: Session = Depends(get_db)):
    if crud.get_user_by_email(db, payload.email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
    user = crud.create_user(db, payload.name, payload.email, payload.password)
    return user

@app.post("/api/login", response_model=Token, tags=["auth"])
def login_api(form: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    user = authenticate_user(db, form.username, form.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    token = create_access_token(subject=user.email)
    return {"access_token": token, "token_type": "bearer"}

@app.get("/api/me", response_model=UserOut, tags=["auth"])
def me(current_user: models.User = Depends(get_current_user)):
    return current_user

# Jobs endpoints
@app.get("/api/jobs", response_model=JobListOut, tags=["jobs"])
def list_jobs(
    search: str | None = Query(None, description="Case-insensitive match against position"),
    job_status: str | None = Query(None, alias="status", description="Job status or 'all'"),
    job_type: str | None = Query(None, alias="jobType", description="Job type or 'all'"),
    sort: str | None = Query(None, description="latest | oldest | a-z | z-a"),
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    jobs, total = crud.list_jobs(
        db,
        current_user.id,
        search=search,
        status=job_status,
        job_type=job_type,
        sort=sort,
        page=page,
        limit=limit,
    )
    return JobListOut(
        jobs=[JobOut.model_validate(job) for job in jobs],
        total_jobs=total,
        num_of_pages=math.ceil(total / limit),
    )

@app.get("/api/jobs/stats", response_model=StatsOut, tags=["jobs"])
def show_stats(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    """Per-status counts plus application counts for the last six active months."""
    return StatsOut(
        default_stats=crud.job_status_counts(db, current_user.id),
        monthly_applications=crud.monthly_applications(db, current_user.id),
    )

@app.get("/api/jobs/{job_id}", response_model=JobEnvelope, tags=["jobs"])
def get_job(job_id: int, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    job = crud.get_job(db, job_id, current_user.id)
    if not job:
        raise NotFoundError(f"No job with id {job_id}")
    return _job_envelope(job)

@app.post("/api/jobs", response_model=JobEnvelope, status_code=status.HTTP_201_CREATED, tags=["jobs"])
def create_job(
    payload: JobCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_writable_user),
):
    job = crud.create_job(db, current_user.id, payload.model_dump())
    return _job_envelope(job)

@app.patch("/api/jobs/{job_id}", response_model=JobEnvelope, tags=["jobs"])
def update_job(
    job_id: int,
    payload: JobUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_writable_user),
):
    if payload.company == "" or payload.position == "":
        raise BadRequestError("Company or Position fields cannot be empty")
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    job = crud.update_job(db, job_id, current_user.id, changes)
    if not job:
        raise NotFoundError(f"No job with id {job_id}")
    return _job_envelope(job)

@app.delete("/api/jobs/{job_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["jobs"])
def delete_job(job_id: int, db: Session = Depends(get_db), current_user: models.User = Depends(get_writable_user)):
    if not crud.delete_job(db, job_id, current_user.id):
        raise NotFoundError(f"No job with id {job_id}")
    return None
