"""Pydantic schemas for API validation."""

from .document import (
    DocumentCreate,
    DocumentUpdate,
    DecorationUpdate,
    DocumentResponse,
    DocumentDetailResponse,
    DocumentListResponse,
    Pagination,
)
from .version import VersionResponse
from .comment import (
    CommentCreate,
    CommentReply,
    CommentResponse,
    LikeResponse,
    LikeToggleResponse,
)
from .custom_form import CustomFormCreate, CustomFormResponse
from .community import CommunityResponse, CommunityUpdate
from .notification import NotificationEventResponse

__all__ = [
    "DocumentCreate",
    "DocumentUpdate",
    "DecorationUpdate",
    "DocumentResponse",
    "DocumentDetailResponse",
    "DocumentListResponse",
    "Pagination",
    "VersionResponse",
    "CommentCreate",
    "CommentReply",
    "CommentResponse",
    "LikeResponse",
    "LikeToggleResponse",
    "CustomFormCreate",
    "CustomFormResponse",
    "CommunityResponse",
    "CommunityUpdate",
    "NotificationEventResponse",
]
