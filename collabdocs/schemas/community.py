"""Community schemas."""

from pydantic import BaseModel, Field
from typing import Any, Dict, Optional


class CommunityResponse(BaseModel):
    name: str
    permissions: Dict[str, Any]

    model_config = {"from_attributes": True}


class CommunityUpdate(BaseModel):
    """Admin update of community policy."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    document_creation_limit: Optional[int] = Field(None, ge=0)
