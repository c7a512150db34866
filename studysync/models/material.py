from pydantic import AnyUrl, BaseModel, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError
from typing import Optional
from datetime import datetime
from enum import Enum
from uuid import UUID

_url_adapter = TypeAdapter(AnyUrl)

class MaterialType(str, Enum):
    PDF = "pdf"
    LINK = "link"

class MaterialCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=1000)
    type: MaterialType
    url: str = Field(..., min_length=1, max_length=2000)
    subject_id: Optional[UUID] = None
    group_id: Optional[UUID] = None

    @field_validator("title", "description", "url", mode="before")
    @classmethod
    def strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    # Stored as submitted; only checked for being an absolute URL
    @field_validator("url")
    @classmethod
    def absolute_url(cls, value):
        try:
            _url_adapter.validate_python(value)
        except PydanticValidationError:
            raise ValueError("Invalid URL format")
        return value

class ShareMaterialRequest(BaseModel):
    group_id: UUID

class MaterialResponse(BaseModel):
    id: str
    user_id: str
    title: str
    description: Optional[str] = ""
    type: MaterialType
    url: str
    subject_id: Optional[str] = None
    group_id: Optional[str] = None
    useful_count: int = 0
    created_at: Optional[datetime] = None
