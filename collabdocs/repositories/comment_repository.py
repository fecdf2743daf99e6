"""Comment repository for database operations."""

from typing import Any, Iterable, List, Optional

from sqlalchemy.orm.attributes import flag_modified

from ..models import Comment
from ..exceptions import CommentNotFoundError
from .base import BaseRepository, new_id


class CommentRepository(BaseRepository[Comment]):
    """Repository for comment lifecycle: create, resolve, reply, decorations."""

    model_class = Comment
    not_found_error = CommentNotFoundError

    def create(
        self,
        user_id: str,
        document_id: str,
        version_id: str,
        field: str,
        content: str,
        decoration: Optional[Any] = None,
    ) -> Comment:
        db_comment = Comment(
            id=new_id(),
            user_id=user_id,
            document_id=document_id,
            version_id=version_id,
            field=field,
            content=content,
            decoration=decoration,
            resolved=False,
        )
        self.db.add(db_comment)
        self.db.flush()
        return db_comment

    def get_for_document(self, document_id: str, comment_id: str) -> Comment:
        """Get a comment that must belong to *document_id*. Raises CommentNotFoundError otherwise."""
        comment = (
            self.db.query(Comment)
            .filter(Comment.id == comment_id, Comment.document_id == document_id)
            .first()
        )
        if not comment:
            raise CommentNotFoundError(comment_id)
        return comment

    def get_all(
        self,
        document_id: Optional[str] = None,
        ids: Optional[Iterable[str]] = None,
        field: Optional[str] = None,
        unresolved_only: bool = False,
    ) -> List[Comment]:
        """Comments matching every filter given, oldest first."""
        query = self.db.query(Comment)
        if document_id is not None:
            query = query.filter(Comment.document_id == document_id)
        if ids is not None:
            query = query.filter(Comment.id.in_(list(ids)))
        if field is not None:
            query = query.filter(Comment.field == field)
        if unresolved_only:
            query = query.filter(Comment.resolved.is_(False))
        return query.order_by(Comment.created_at.asc(), Comment.id).all()

    def resolve(self, comment: Comment) -> Comment:
        """Mark resolved. Resolving an already resolved comment is a no-op."""
        if not comment.resolved:
            comment.resolved = True
            self.db.flush()
        return comment

    def set_reply(self, comment: Comment, reply: str) -> Comment:
        """Store the author's reply, replacing any earlier one."""
        comment.reply = reply
        self.db.flush()
        return comment

    def update_decorations(self, version_id: str, decorations: Iterable[Any]) -> int:
        """Rewrite the decoration of the named comments of a version.

        *decorations* items expose ``comment`` (id) and ``decoration``.
        Comments of other versions, and comments not named, are untouched.
        Returns the number of comments rewritten.
        """
        by_id = {item.comment: item.decoration for item in decorations}
        if not by_id:
            return 0

        comments = (
            self.db.query(Comment)
            .filter(Comment.version_id == version_id, Comment.id.in_(list(by_id)))
            .all()
        )
        for comment in comments:
            comment.decoration = by_id[comment.id]
            flag_modified(comment, "decoration")
        self.db.flush()
        return len(comments)

    def count(self, document_id: str, contextual_only: bool = False) -> int:
        """Count comments of a document; contextual ones are anchored by a decoration."""
        query = self.db.query(Comment).filter(Comment.document_id == document_id)
        if contextual_only:
            query = query.filter(Comment.decoration.isnot(None))
        return query.count()
