"""Comment and like API endpoints."""

from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, optional_auth, require_accountable, require_auth
from ..database import get_db
from ..schemas.comment import CommentCreate, CommentReply, CommentResponse, LikeToggleResponse
from ..services import CommentService
from .documents import schedule_outbox_drain

router = APIRouter(prefix="/api/documents/{doc_id}/comments", tags=["comments"])


def _split_ids(ids: Optional[str]) -> Optional[List[str]]:
    """``ids`` arrives as a comma-separated list."""
    if not ids:
        return None
    return [part.strip() for part in ids.split(",") if part.strip()] or None


@router.get("", response_model=List[CommentResponse])
def list_comments(
    doc_id: str,
    ids: Optional[str] = Query(None, description="Comma-separated comment ids"),
    field: Optional[str] = Query(None, description="Unresolved comments of this field"),
    with_replies: bool = Query(True),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(optional_auth),
):
    """Comments selected by id and/or field. One of the two is required."""
    return CommentService(db).list_comments(
        doc_id, auth, ids=_split_ids(ids), field=field, with_replies=with_replies
    )


@router.post("", response_model=CommentResponse, status_code=201)
def create_comment(
    doc_id: str,
    comment: CommentCreate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Comment on a commentable field of an open document."""
    return CommentService(db).create_comment(doc_id, comment, auth)


@router.post("/{comment_id}/resolve", response_model=CommentResponse)
def resolve_comment(
    doc_id: str,
    comment_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_accountable),
):
    comment = CommentService(db).resolve_comment(doc_id, comment_id, auth)
    schedule_outbox_drain(background_tasks)
    return comment


@router.post("/{comment_id}/reply", response_model=CommentResponse)
def reply_to_comment(
    doc_id: str,
    comment_id: str,
    body: CommentReply,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_accountable),
):
    return CommentService(db).reply_to_comment(doc_id, comment_id, body.reply, auth)


@router.post("/{comment_id}/like", response_model=LikeToggleResponse)
def toggle_like(
    doc_id: str,
    comment_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Like the comment, or remove the caller's like if present."""
    result = CommentService(db).toggle_like(doc_id, comment_id, auth)
    schedule_outbox_drain(background_tasks)
    return result
