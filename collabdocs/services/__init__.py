"""Business logic services."""

from .document_service import DocumentService
from .comment_service import CommentService
from .form_service import FormService
from .community_service import CommunityService
from .notification_service import NotificationService

__all__ = [
    "DocumentService",
    "CommentService",
    "FormService",
    "CommunityService",
    "NotificationService",
]
