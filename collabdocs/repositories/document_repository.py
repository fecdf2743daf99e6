"""Document repository for database operations."""

from typing import List, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.orm import Query, joinedload

from ..models import Document
from ..exceptions import DocumentNotFoundError, ConflictError
from .base import BaseRepository


class DocumentRepository(BaseRepository[Document]):
    """Repository for document identity and lifecycle state.

    Reads eager-load the current version since nearly every caller needs
    its content (closing date, response payload).
    """

    model_class = Document
    not_found_error = DocumentNotFoundError

    def _base_query(self) -> Query:
        return self.db.query(Document).options(joinedload(Document.current_version))

    def create(self, doc_id: str, author_id: str, custom_form_id: str, published: bool = False) -> Document:
        """Insert a document row. The caller attaches the first version before committing."""
        db_document = Document(
            id=doc_id,
            author_id=author_id,
            custom_form_id=custom_form_id,
            published=published,
            closed=False,
            comments_count=0,
        )
        self.db.add(db_document)
        self.db.flush()
        return db_document

    def list(
        self,
        published_only: bool = False,
        author_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> Tuple[List[Document], int]:
        """Return one page of documents (newest first) and the total match count."""
        filters = []
        if published_only:
            filters.append(Document.published.is_(True))
        if author_id is not None:
            filters.append(Document.author_id == author_id)

        total = self.db.query(Document).filter(*filters).count()
        docs = self._base_query().filter(*filters).order_by(Document.created_at.desc(), Document.id).offset(skip).limit(limit).all()
        return docs, total

    def count_by_author(self, author_id: str) -> int:
        """Count every document of the author, draft or published."""
        return self.db.query(Document).filter(Document.author_id == author_id).count()

    def add_comment(self, doc_id: str) -> None:
        """Increment comments_count in a single UPDATE so concurrent comments are not lost."""
        result = self.db.execute(
            update(Document)
            .where(Document.id == doc_id)
            .values(comments_count=Document.comments_count + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise DocumentNotFoundError(doc_id)

    def advance_current_version(self, doc_id: str, expected_version_id: Optional[str], new_version_id: str) -> None:
        """Point the document at a new version.

        The UPDATE only matches while the document still points at
        *expected_version_id*; if another writer advanced it first, zero rows
        match and ConflictError is raised.
        """
        result = self.db.execute(
            update(Document)
            .where(Document.id == doc_id, Document.current_version_id == expected_version_id)
            .values(current_version_id=new_version_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            if self.get_by_id_optional(doc_id) is None:
                raise DocumentNotFoundError(doc_id)
            raise ConflictError(doc_id)

    def set_current_version(self, doc_id: str, version_id: str) -> None:
        """Attach the first version to a freshly created document."""
        self.advance_current_version(doc_id, None, version_id)

    def update_flags(self, document: Document, published: Optional[bool] = None, closed: Optional[bool] = None) -> Document:
        """Apply the lifecycle flags that were supplied; None leaves a flag alone."""
        if published is not None:
            document.published = published
        if closed is not None:
            document.closed = closed
        self.db.flush()
        return document

    def reload(self, doc_id: str) -> Document:
        """Drop cached state and read the document again."""
        self.db.expire_all()
        return self.get_by_id(doc_id)
