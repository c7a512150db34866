from pydantic import BaseModel, Field, model_validator
from typing import Optional
from datetime import datetime

class StreakRecord(BaseModel):
    current_streak: int = Field(0, ge=0)
    longest_streak: int = Field(0, ge=0)
    last_activity_date: Optional[datetime] = None

    @model_validator(mode="after")
    def check_longest(self):
        if self.longest_streak < self.current_streak:
            raise ValueError("longest_streak must be >= current_streak")
        return self

class StreakOutcome(BaseModel):
    increased: bool = False
    broken: bool = False

class StreakResponse(BaseModel):
    streak: StreakRecord
    outcome: Optional[StreakOutcome] = None
