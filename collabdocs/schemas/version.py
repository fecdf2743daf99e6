"""Document version schemas."""

from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import Any, Dict, List, Optional


class VersionResponse(BaseModel):
    """Schema for version response."""
    id: str
    document_id: str
    version: int
    content: Dict[str, Any]
    contributions: List[str] = []  # comment ids merged into this version
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @field_validator('contributions', mode='before')
    @classmethod
    def comment_ids(cls, v):
        if not v:
            return []
        return [getattr(c, "id", c) for c in v]

