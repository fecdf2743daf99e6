"""API routes."""

from .documents import router as documents_router
from .versions import router as versions_router
from .comments import router as comments_router
from .custom_forms import router as custom_forms_router
from .community import router as community_router
from .notifications import router as notifications_router

__all__ = [
    "documents_router",
    "versions_router",
    "comments_router",
    "custom_forms_router",
    "community_router",
    "notifications_router",
]
