"""Database models."""

from .user import User
from .custom_form import CustomForm
from .community import Community
from .document import Document
from .version import DocumentVersion, version_contributions
from .comment import Comment
from .like import Like
from .notification_event import NotificationEvent

__all__ = [
    "User", "CustomForm", "Community",
    "Document", "DocumentVersion", "version_contributions",
    "Comment", "Like", "NotificationEvent",
]
