from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_serializer
from pydantic.alias_generators import to_camel

from .models import JobStatus, JobType

class UserCreate(BaseModel):
    name: str = Field(min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(min_length=8)

class UserOut(BaseModel):
    id: int
    name: str
    email: EmailStr
    is_test_user: bool
    created_at: datetime

    model_config = {"from_attributes": True}

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

# Jobs: camelCase on the wire, snake_case accepted on input
class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )

class JobCreate(CamelModel):
    company: str = Field(min_length=1, max_length=50)
    position: str = Field(min_length=1, max_length=100)
    status: JobStatus = JobStatus.PENDING.value
    job_type: JobType = JobType.FULL_TIME.value

class JobUpdate(CamelModel):
    # empty strings are let through so the handler can answer 400
    company: str | None = Field(None, max_length=50)
    position: str | None = Field(None, max_length=100)
    status: JobStatus | None = None
    job_type: JobType | None = None

class JobOut(CamelModel):
    id: int
    company: str
    position: str
    status: str
    job_type: str
    created_by: int
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    def serialize_timestamp(self, value: datetime) -> str:
        # SQLite hands back naive values; they are stored in UTC
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()

class JobEnvelope(CamelModel):
    job: JobOut

class JobListOut(CamelModel):
    jobs: list[JobOut]
    total_jobs: int
    num_of_pages: int

class MonthlyApplication(CamelModel):
    date: str
    count: int

class StatsOut(CamelModel):
    default_stats: dict[str, int]
    monthly_applications: list[MonthlyApplication]
