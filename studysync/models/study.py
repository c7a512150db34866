from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime, date
from enum import Enum
from uuid import UUID

class TopicStatus(str, Enum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    LEARNED = "learned"

class SubjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=500)
    color: str = Field(..., pattern=r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")

    @field_validator("name", "description", mode="before")
    @classmethod
    def strip(cls, value):
        return value.strip() if isinstance(value, str) else value

class SubjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    color: Optional[str] = Field(None, pattern=r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")

    @field_validator("name", "description", mode="before")
    @classmethod
    def strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    # Omit a field to keep it; null is not a valid value for a required column
    @field_validator("name", "color")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value

class SubjectResponse(BaseModel):
    id: str
    user_id: str
    name: str
    description: Optional[str] = ""
    color: str
    created_at: Optional[datetime] = None

class TopicCreate(BaseModel):
    subject_id: UUID
    name: str = Field(..., min_length=1, max_length=200)

    @field_validator("name", mode="before")
    @classmethod
    def strip(cls, value):
        return value.strip() if isinstance(value, str) else value

class TopicUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    status: Optional[TopicStatus] = None
    order_index: Optional[int] = Field(None, ge=0)

    @field_validator("name", mode="before")
    @classmethod
    def strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("name", "status", "order_index")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value

class TopicResponse(BaseModel):
    id: str
    user_id: str
    subject_id: str
    name: str
    status: TopicStatus = TopicStatus.NOT_STARTED
    order_index: int = 0

class SessionCreate(BaseModel):
    subject_id: UUID
    topic_ids: List[UUID] = []
    notes: str = Field("", max_length=5000)
    session_date: date
    duration: Optional[int] = Field(None, ge=0)  # minutes

    @field_validator("notes", mode="before")
    @classmethod
    def strip(cls, value):
        return value.strip() if isinstance(value, str) else value

class SessionResponse(BaseModel):
    id: str
    user_id: str
    subject_id: str
    topic_ids: List[str] = []
    notes: Optional[str] = ""
    session_date: date
    duration: Optional[int] = None
    created_at: Optional[datetime] = None

class WeeklyStats(BaseModel):
    total_sessions: int
    total_duration: int
    topics_completed: int
    most_studied_subject: Optional[str] = None
    consistency_score: float
    previous_week_sessions: int

class DailyActivity(BaseModel):
    date: date
    sessions: int
    subjects: List[str]
