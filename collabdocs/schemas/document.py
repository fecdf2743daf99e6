"""Document schemas."""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..core.content_utils import CLOSING_DATE_KEY, parse_datetime
from .version import VersionResponse


def _check_closing_date(content: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if content is None:
        return content
    raw = content.get(CLOSING_DATE_KEY)
    if raw not in (None, "") and parse_datetime(raw) is None:
        raise ValueError(f"{CLOSING_DATE_KEY} must be an ISO-8601 date or datetime")
    return content


class DocumentCreate(BaseModel):
    """Schema for creating a document. The author is the caller."""
    custom_form: str = Field(..., min_length=1, description="Custom form id or slug")
    content: Dict[str, Any]
    published: bool = False

    @field_validator('content')
    @classmethod
    def validate_closing_date(cls, v):
        return _check_closing_date(v)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "custom_form": "default",
                    "content": {
                        "title": "Open data law",
                        "brief": "A proposal to publish procurement data.",
                        "fundation": "...",
                        "closingDate": "2026-12-31T23:59:00Z",
                    },
                    "published": True,
                }
            ]
        }
    }


class DecorationUpdate(BaseModel):
    """New anchor for one comment of the current version."""
    comment: str
    decoration: Optional[Any] = None


class DocumentUpdate(BaseModel):
    """Schema for updating a document. Send only what changes."""
    published: Optional[bool] = None
    closed: Optional[bool] = None
    decorations: Optional[List[DecorationUpdate]] = None
    content: Optional[Dict[str, Any]] = None
    contributions: Optional[List[str]] = None  # comment ids merged into a new version

    @field_validator('content')
    @classmethod
    def validate_closing_date(cls, v):
        return _check_closing_date(v)


class DocumentResponse(BaseModel):
    """Schema for document response."""
    id: str
    author_id: str
    custom_form_id: str
    published: bool
    closed: bool  # effective state: manual close or closingDate reached
    closing_date: Optional[datetime] = None
    comments_count: int = 0
    current_version: VersionResponse
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DocumentDetailResponse(DocumentResponse):
    """Single-document view. Aggregates are only filled in once the document is closed."""
    is_author: bool = False
    contributions_count: Optional[int] = None
    contributors_count: Optional[int] = None
    contextual_comments_count: Optional[int] = None


class Pagination(BaseModel):
    count: int
    page: int
    limit: int


class DocumentListResponse(BaseModel):
    """One page of documents."""
    results: List[DocumentResponse]
    pagination: Pagination
