"""Document service: deep module for the document lifecycle.

Owns document creation, reading, listing and updating, including the rule
that decides between amending the current version in place and creating a
new version when comments are merged in as contributions. Callers get one
method per operation; policy lookups, version bookkeeping and notification
events are coordinated internally inside a single transaction.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.auth import AuthContext
from ..core.content_utils import closing_date_of
from ..exceptions import (
    BadRequestError,
    ForbiddenError,
    FormNotFoundError,
    InvalidParamError,
    PolicyViolationError,
    VersionNotFoundError,
)
from ..models import Document, DocumentVersion
from ..repositories import CommentRepository, DocumentRepository, VersionRepository
from ..repositories.base import new_id
from ..schemas.document import (
    DocumentCreate,
    DocumentDetailResponse,
    DocumentListResponse,
    DocumentResponse,
    DocumentUpdate,
    Pagination,
)
from ..schemas.version import VersionResponse
from .community_service import CommunityService
from .form_service import FormService
from .notification_service import COMMENT_CONTRIBUTION, NotificationService

logger = logging.getLogger(__name__)


def document_to_response(doc: Document) -> DocumentResponse:
    """Project a document and its current version into the API shape."""
    return DocumentResponse(
        id=doc.id,
        author_id=doc.author_id,
        custom_form_id=doc.custom_form_id,
        published=doc.published,
        closed=doc.is_closed,
        closing_date=doc.closing_date,
        comments_count=doc.comments_count or 0,
        current_version=VersionResponse.model_validate(doc.current_version),
        created_at=doc.created_at,
        updated_at=doc.updated_at,
    )


class DocumentService:
    """Deep module for document operations.

    Every public mutating method either commits the whole operation or
    rolls it back; a document is never visible without its first version,
    and a new version is never visible without the document pointing at it.
    """

    def __init__(self, db: Session):
        self.db = db
        self.doc_repo = DocumentRepository(db)
        self.version_repo = VersionRepository(db)
        self.comment_repo = CommentRepository(db)
        self.forms = FormService(db)
        self.community = CommunityService(db)
        self.notifications = NotificationService(db)

    # ----- reads -----------------------------------------------------------

    def get_visible_document(self, doc_id: str, auth: AuthContext) -> Document:
        """Load a document the caller may see.

        Drafts are visible to their author only. Raises DocumentNotFoundError
        or ForbiddenError.
        """
        doc = self.doc_repo.get_by_id(doc_id)
        if not doc.published and auth.user_id != doc.author_id:
            raise ForbiddenError("This document is a draft")
        return doc

    def get_document(self, doc_id: str, auth: AuthContext) -> DocumentDetailResponse:
        """Single document with the derived closed flag.

        Once closed, the response also carries contribution, contributor and
        contextual-comment counts.
        """
        doc = self.get_visible_document(doc_id, auth)
        base = document_to_response(doc)
        detail = DocumentDetailResponse(
            **base.model_dump(),
            is_author=auth.user_id == doc.author_id,
        )
        if detail.closed:
            stats = self.version_repo.count_contributions(doc.id)
            detail.contributions_count = stats["contributions_count"]
            detail.contributors_count = stats["contributors_count"]
            detail.contextual_comments_count = self.comment_repo.count(doc.id, contextual_only=True)
        return detail

    def list_published(self, page: int = 1, limit: int = 10) -> DocumentListResponse:
        """Public listing: published documents only."""
        return self._list(page, limit, published_only=True)

    def list_authored(self, author_id: str, page: int = 1, limit: int = 10) -> DocumentListResponse:
        """The author's own documents, drafts included."""
        return self._list(page, limit, author_id=author_id)

    def _list(self, page: int, limit: int, published_only: bool = False, author_id: Optional[str] = None) -> DocumentListResponse:
        docs, total = self.doc_repo.list(
            published_only=published_only,
            author_id=author_id,
            skip=(page - 1) * limit,
            limit=limit,
        )
        return DocumentListResponse(
            results=[document_to_response(doc) for doc in docs],
            pagination=Pagination(count=total, page=page, limit=limit),
        )

    def count_by_author(self, author_id: str) -> int:
        return self.doc_repo.count_by_author(author_id)

    def get_versions(self, doc_id: str, auth: AuthContext, skip: int = 0, limit: int = 50) -> List[DocumentVersion]:
        """Version history, newest first."""
        self.get_visible_document(doc_id, auth)
        return self.version_repo.get_by_document(doc_id, skip, limit)

    def get_version(self, doc_id: str, version: int, auth: AuthContext) -> DocumentVersion:
        self.get_visible_document(doc_id, auth)
        db_version = self.version_repo.get_by_number(doc_id, version)
        if db_version is None:
            raise VersionNotFoundError(f"{doc_id}@{version}")
        return db_version

    # ----- writes ----------------------------------------------------------

    def create_document(self, author_id: str, data: DocumentCreate) -> Document:
        """Create a document and its version 1.

        Raises PolicyViolationError when the author already reached the
        community's creation limit, BadRequestError when the form reference
        does not resolve.
        """
        limit = self.community.document_creation_limit()
        authored = self.doc_repo.count_by_author(author_id)
        if authored >= limit:
            raise PolicyViolationError(
                f"Cannot create more documents (creation limit reached: {limit})",
                limit=limit,
            )

        try:
            form = self.forms.resolve(data.custom_form)
        except FormNotFoundError as e:
            raise BadRequestError(
                f"Custom form not found: {data.custom_form}",
                {"custom_form": data.custom_form},
            ) from e

        doc_id = new_id()
        try:
            self.doc_repo.create(doc_id, author_id, form.id, published=data.published)
            version = self.version_repo.create(doc_id, 1, data.content)
            self.doc_repo.set_current_version(doc_id, version.id)
            self._schedule_closing(doc_id, data.content)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "Document created",
            extra={"doc_id": doc_id, "author_id": author_id, "form": form.slug},
        )
        return self.doc_repo.reload(doc_id)

    def update_document(self, doc_id: str, data: DocumentUpdate, auth: AuthContext) -> Document:
        """Apply an author's update.

        Decorations are rewritten on the current version's comments first.
        Then, with contributions, a new version (number + 1) is created and
        becomes current; without them, supplied content amends the current
        version in place. Raises DocumentNotFoundError, ForbiddenError,
        InvalidParamError (unknown contribution) or ConflictError (lost race).
        """
        doc = self.doc_repo.get_by_id(doc_id)
        if auth.user_id != doc.author_id:
            raise ForbiddenError("Only the author can update this document")

        current = doc.current_version
        created_version: Optional[DocumentVersion] = None
        resulting_content: Optional[dict] = None
        try:
            if data.decorations:
                self.comment_repo.update_decorations(current.id, data.decorations)

            if data.contributions:
                created_version = self._create_contributed_version(doc, current, data)
                resulting_content = created_version.content
            elif data.content is not None:
                self.version_repo.update(current.id, data.content)
                resulting_content = data.content

            self.doc_repo.update_flags(doc, published=data.published, closed=data.closed)

            if resulting_content is not None:
                self._schedule_closing(doc.id, resulting_content)

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        if created_version is not None:
            logger.info(
                "Document version created",
                extra={
                    "doc_id": doc_id,
                    "version": created_version.version,
                    "contributions": len(data.contributions),
                },
            )
        else:
            logger.info("Document updated", extra={"doc_id": doc_id})
        return self.doc_repo.reload(doc_id)

    def _create_contributed_version(self, doc: Document, current: DocumentVersion, data: DocumentUpdate) -> DocumentVersion:
        comment_ids = list(dict.fromkeys(data.contributions))
        comments = self.comment_repo.get_all(document_id=doc.id, ids=comment_ids)
        if len(comments) != len(comment_ids):
            found = {c.id for c in comments}
            missing = [cid for cid in comment_ids if cid not in found]
            raise InvalidParamError(
                f"Contributions must be comments of this document: {', '.join(missing)}",
                param="contributions",
            )

        content = data.content if data.content is not None else dict(current.content or {})
        new_version = self.version_repo.create(doc.id, current.version + 1, content, comments)
        self.doc_repo.advance_current_version(doc.id, current.id, new_version.id)

        for comment in comments:
            self.notifications.enqueue_comment_event(COMMENT_CONTRIBUTION, comment.id)
        return new_version

    def _schedule_closing(self, doc_id: str, content: Optional[dict]) -> None:
        """Queue the closes event for *content*, or drop the queued one when it has no closing date."""
        closing = closing_date_of(content)
        if closing is not None:
            self.notifications.schedule_document_closes(doc_id, closing)
        else:
            self.notifications.cancel_document_closes(doc_id)
