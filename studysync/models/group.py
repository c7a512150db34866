from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional
from datetime import datetime
from enum import Enum

class GroupRole(str, Enum):
    ADMIN = "admin"
    MEMBER = "member"

class GroupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=500)

    @field_validator("name", "description", mode="before")
    @classmethod
    def strip(cls, value):
        return value.strip() if isinstance(value, str) else value

class JoinGroupRequest(BaseModel):
    invite_code: str = Field(..., min_length=1, max_length=50, pattern=r"^[a-z0-9]+$")

    # Invite codes are case-insensitive
    @field_validator("invite_code", mode="before")
    @classmethod
    def normalize(cls, value):
        return value.strip().lower() if isinstance(value, str) else value

class GroupResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = ""
    invite_code: str
    created_by: str
    created_at: Optional[datetime] = None
    role: Optional[GroupRole] = None

class JoinGroupResponse(BaseModel):
    success: bool = True
    group_id: str
    group_name: str
    message: str

class MessageAttachment(BaseModel):
    url: str = Field(..., min_length=1, max_length=2000)
    name: str = Field(..., min_length=1, max_length=255)
    type: str = Field(..., min_length=1, max_length=100)

    @field_validator("url", "name", "type", mode="before")
    @classmethod
    def strip(cls, value):
        return value.strip() if isinstance(value, str) else value

class MessageCreate(BaseModel):
    content: str = Field("", max_length=2000)
    attachment: Optional[MessageAttachment] = None

    @field_validator("content", mode="before")
    @classmethod
    def strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    # Empty text is fine when a file is being shared
    @model_validator(mode="after")
    def content_or_attachment(self):
        if not self.content and self.attachment is None:
            raise ValueError("Message cannot be empty")
        return self

class ReactionCreate(BaseModel):
    emoji: str = Field(..., min_length=1, max_length=32)

    @field_validator("emoji", mode="before")
    @classmethod
    def strip(cls, value):
        return value.strip() if isinstance(value, str) else value

class ReactionSummary(BaseModel):
    emoji: str
    count: int
    has_reacted: bool

class MessageResponse(BaseModel):
    id: str
    group_id: str
    user_id: str
    content: str
    attachment_url: Optional[str] = None
    attachment_name: Optional[str] = None
    attachment_type: Optional[str] = None
    reactions: List[ReactionSummary] = []
    created_at: Optional[datetime] = None
