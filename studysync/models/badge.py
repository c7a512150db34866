from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum

class BadgeMetric(str, Enum):
    SESSION_COUNT = "session_count"
    TOPICS_LEARNED_COUNT = "topics_learned_count"
    SUBJECT_COUNT = "subject_count"
    CURRENT_STREAK = "current_streak"

class BadgeCategory(str, Enum):
    LEARNING = "learning"
    STREAK = "streak"

class BadgeRule(BaseModel):
    id: str
    name: str
    description: str
    category: BadgeCategory
    threshold_metric: BadgeMetric
    threshold_value: float = Field(..., gt=0)

    model_config = {"frozen": True}

class StudyMetrics(BaseModel):
    session_count: int = 0
    topics_learned_count: int = 0
    subject_count: int = 0
    current_streak: int = 0

    def value_for(self, metric: BadgeMetric) -> int:
        return getattr(self, metric.value)

class UserBadgeProgress(BaseModel):
    badge_id: str
    progress: int = Field(0, ge=0, le=100)
    earned_at: Optional[datetime] = None

    @property
    def earned(self) -> bool:
        return self.earned_at is not None

class BadgeUnlocked(BaseModel):
    badge_id: str
    badge_name: str

class BadgeStatus(BaseModel):
    id: str
    name: str
    description: str
    category: BadgeCategory
    requirement: float
    progress: int = 0
    earned_at: Optional[datetime] = None

class BadgeEvaluationResult(BaseModel):
    progress: List[UserBadgeProgress]
    unlocked: List[BadgeUnlocked]
