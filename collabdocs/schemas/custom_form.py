"""Custom form schemas."""

from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import datetime
from typing import List, Optional


class CustomFormCreate(BaseModel):
    """Schema for defining a custom form."""
    slug: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    fields: List[str] = Field(..., min_length=1)
    allow_comments: List[str] = []

    @field_validator('slug')
    @classmethod
    def normalize_slug(cls, v: str) -> str:
        v = v.strip().lower()
        if '/' in v or ' ' in v:
            raise ValueError("Slug cannot contain '/' or spaces")
        return v

    @model_validator(mode='after')
    def commentable_fields_exist(self):
        unknown = [f for f in self.allow_comments if f not in self.fields]
        if unknown:
            raise ValueError(f"allow_comments names fields the form does not define: {unknown}")
        return self


class CustomFormResponse(BaseModel):
    id: str
    slug: str
    name: str
    description: Optional[str] = None
    fields: List[str]
    allow_comments: List[str]
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
