"""Comment service: field-level comments, author moderation, and likes."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.auth import AuthContext
from ..exceptions import (
    DocumentClosedError,
    ForbiddenError,
    InvalidParamError,
    MissingQueryError,
)
from ..models import Comment
from ..repositories import CommentRepository, DocumentRepository, LikeRepository
from ..schemas.comment import CommentCreate, CommentResponse, LikeResponse, LikeToggleResponse
from .document_service import DocumentService
from .form_service import FormService
from .notification_service import COMMENT_LIKED, COMMENT_RESOLVED, NotificationService

logger = logging.getLogger(__name__)

COMMENT_QUERY_PARAMS = ["ids", "field"]


class CommentService:
    """Comments on commentable fields of open documents.

    Readers comment and like; only the document author resolves and
    replies. Notification events are queued in the same transaction as
    the change that triggers them.
    """

    def __init__(self, db: Session):
        self.db = db
        self.documents = DocumentService(db)
        self.doc_repo = DocumentRepository(db)
        self.comment_repo = CommentRepository(db)
        self.like_repo = LikeRepository(db)
        self.forms = FormService(db)
        self.notifications = NotificationService(db)

    def list_comments(
        self,
        doc_id: str,
        auth: AuthContext,
        ids: Optional[List[str]] = None,
        field: Optional[str] = None,
        with_replies: bool = True,
    ) -> List[CommentResponse]:
        """Comments of a document by id set and/or by field.

        Filtering by field returns unresolved comments only. At least one
        filter is required (MissingQueryError).
        """
        if not ids and not field:
            raise MissingQueryError(COMMENT_QUERY_PARAMS)

        self.documents.get_visible_document(doc_id, auth)
        comments = self.comment_repo.get_all(
            document_id=doc_id,
            ids=ids or None,
            field=field or None,
            unresolved_only=bool(field),
        )
        responses = [CommentResponse.model_validate(c) for c in comments]
        if not with_replies:
            responses = [r.model_copy(update={"reply": None}) for r in responses]
        return responses

    def create_comment(self, doc_id: str, data: CommentCreate, auth: AuthContext) -> Comment:
        """Comment on a field of the document's current version.

        Raises InvalidParamError when the form does not allow comments on
        the field, whoever asks, and DocumentClosedError once the document is
        closed. Publication state does not gate commenting.
        """
        doc = self.doc_repo.get_by_id(doc_id)
        form = self.forms.resolve(doc.custom_form_id)
        if not form.is_commentable(data.field):
            raise InvalidParamError(f"The field {data.field} is not commentable", param="field")

        if doc.is_closed:
            raise DocumentClosedError(doc_id)

        try:
            comment = self.comment_repo.create(
                user_id=auth.user_id,
                document_id=doc.id,
                version_id=doc.current_version_id,
                field=data.field,
                content=data.content,
                decoration=data.decoration,
            )
            self.doc_repo.add_comment(doc.id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(comment)
        logger.info(
            "Comment created",
            extra={"doc_id": doc_id, "comment_id": comment.id, "field": data.field},
        )
        return comment

    def resolve_comment(self, doc_id: str, comment_id: str, auth: AuthContext) -> Comment:
        """Mark a comment resolved. Author only; resolving twice is fine.

        The comment-resolved event is queued on the first resolution only.
        """
        doc, comment = self._load_for_author(doc_id, comment_id, auth)

        if not comment.resolved:
            self.comment_repo.resolve(comment)
            self.notifications.enqueue_comment_event(COMMENT_RESOLVED, comment.id)
            self.db.commit()
            logger.info("Comment resolved", extra={"doc_id": doc.id, "comment_id": comment.id})

        self.db.refresh(comment)
        return comment

    def reply_to_comment(self, doc_id: str, comment_id: str, reply: str, auth: AuthContext) -> Comment:
        """Set (or overwrite) the author's reply to a comment."""
        doc, comment = self._load_for_author(doc_id, comment_id, auth)
        self.comment_repo.set_reply(comment, reply)
        self.db.commit()
        self.db.refresh(comment)
        logger.info("Comment replied", extra={"doc_id": doc.id, "comment_id": comment.id})
        return comment

    def toggle_like(self, doc_id: str, comment_id: str, auth: AuthContext) -> LikeToggleResponse:
        """Like the comment if the caller has not yet, unlike it otherwise.

        A comment-liked event is queued when the document author likes
        someone else's comment.
        """
        doc = self.documents.get_visible_document(doc_id, auth)
        comment = self.comment_repo.get_for_document(doc.id, comment_id)

        existing = self.like_repo.get(auth.user_id, comment.id)
        if existing is not None:
            self.like_repo.remove(existing.id)
            self.db.commit()
            logger.debug("Like removed", extra={"comment_id": comment.id, "user_id": auth.user_id})
            return LikeToggleResponse(liked=False, like=None)

        like = self.like_repo.create(auth.user_id, comment.id)
        if auth.user_id == doc.author_id and auth.user_id != comment.user_id:
            self.notifications.enqueue_comment_event(COMMENT_LIKED, comment.id)
        self.db.commit()
        self.db.refresh(like)
        logger.debug("Like created", extra={"comment_id": comment.id, "user_id": auth.user_id})
        return LikeToggleResponse(liked=True, like=LikeResponse.model_validate(like))

    def _load_for_author(self, doc_id: str, comment_id: str, auth: AuthContext):
        doc = self.doc_repo.get_by_id(doc_id)
        comment = self.comment_repo.get_for_document(doc.id, comment_id)
        if auth.user_id != doc.author_id:
            raise ForbiddenError("Only the document author can do this")
        return doc, comment
