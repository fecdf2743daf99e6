"""Document API endpoints.

Endpoints stay thin; DocumentService owns the document lifecycle
(creation limit, first version, contributed versions, closing).
"""

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, optional_auth, require_accountable
from ..core.config import settings
from ..database import get_db
from ..schemas.document import (
    DocumentCreate,
    DocumentDetailResponse,
    DocumentListResponse,
    DocumentResponse,
    DocumentUpdate,
)
from ..services import DocumentService
from ..services.document_service import document_to_response
from ..services.notifier import Notifier, drain_outbox

router = APIRouter(prefix="/api/documents", tags=["documents"])


def _page_limit(limit: Optional[int]) -> int:
    """Default when absent, capped at the configured maximum."""
    if limit is None:
        return settings.default_page_limit
    return min(limit, settings.max_page_limit)


def schedule_outbox_drain(background_tasks: BackgroundTasks) -> None:
    """Deliver freshly queued notifications after the response is sent."""
    if Notifier.is_configured():
        background_tasks.add_task(drain_outbox)


@router.get("", response_model=DocumentListResponse)
def list_documents(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
):
    """Published documents, newest first."""
    return DocumentService(db).list_published(page=page, limit=_page_limit(limit))


@router.get("/my-documents", response_model=DocumentListResponse)
def list_my_documents(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_accountable),
):
    """The caller's own documents, drafts included."""
    return DocumentService(db).list_authored(auth.user_id, page=page, limit=_page_limit(limit))


@router.post("", response_model=DocumentResponse, status_code=201)
def create_document(
    document: DocumentCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_accountable),
):
    """Create a document with its first version."""
    doc = DocumentService(db).create_document(auth.user_id, document)
    schedule_outbox_drain(background_tasks)
    return document_to_response(doc)


@router.get("/{doc_id}", response_model=DocumentDetailResponse)
def get_document(
    doc_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(optional_auth),
):
    """Single document. Drafts are visible to their author only."""
    return DocumentService(db).get_document(doc_id, auth)


@router.put("/{doc_id}", response_model=DocumentResponse)
def update_document(
    doc_id: str,
    update: DocumentUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_accountable),
):
    """Update flags, decorations and content; contributions create a new version."""
    doc = DocumentService(db).update_document(doc_id, update, auth)
    schedule_outbox_drain(background_tasks)
    return document_to_response(doc)
