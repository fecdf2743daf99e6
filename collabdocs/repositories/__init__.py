"""Data access repositories."""

from .base import BaseRepository
from .document_repository import DocumentRepository
from .version_repository import VersionRepository
from .comment_repository import CommentRepository
from .like_repository import LikeRepository
from .custom_form_repository import CustomFormRepository
from .community_repository import CommunityRepository

__all__ = [
    "BaseRepository",
    "DocumentRepository",
    "VersionRepository",
    "CommentRepository",
    "LikeRepository",
    "CustomFormRepository",
    "CommunityRepository",
]
