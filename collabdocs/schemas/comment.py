"""Comment and like schemas."""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Optional


class CommentCreate(BaseModel):
    """Schema for commenting on a field of a document."""
    field: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    decoration: Optional[Any] = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "field": "brief",
                    "content": "Nullam sit amet ipsum id metus porta rutrum in vel nibh.",
                }
            ]
        }
    }


class CommentReply(BaseModel):
    """The document author's answer to a comment."""
    reply: str = Field(..., min_length=1)


class CommentResponse(BaseModel):
    """Schema for comment response."""
    id: str
    user_id: str
    document_id: str
    version_id: str
    field: str
    content: str
    decoration: Optional[Any] = None
    resolved: bool = False
    reply: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class LikeResponse(BaseModel):
    id: str
    user_id: str
    comment_id: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class LikeToggleResponse(BaseModel):
    """Result of a like toggle: the created like, or null when it was removed."""
    liked: bool
    like: Optional[LikeResponse] = None
