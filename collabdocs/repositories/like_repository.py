"""Like repository for database operations."""

from typing import Optional

import sqlalchemy.exc
from sqlalchemy.orm import Session

from ..models import Like
from .base import new_id


class LikeRepository:
    """At most one like per (user, comment); the row existing is the liked state."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str, comment_id: str) -> Optional[Like]:
        return (
            self.db.query(Like)
            .filter(Like.user_id == user_id, Like.comment_id == comment_id)
            .first()
        )

    def create(self, user_id: str, comment_id: str) -> Like:
        """Create the like, or return the existing one for this pair."""
        existing = self.get(user_id, comment_id)
        if existing:
            return existing

        like = Like(id=new_id(), user_id=user_id, comment_id=comment_id)
        try:
            # Savepoint: losing the unique index race undoes only this insert.
            with self.db.begin_nested():
                self.db.add(like)
        except sqlalchemy.exc.IntegrityError:
            return self.get(user_id, comment_id)
        return like

    def remove(self, like_id: str) -> bool:
        """Delete a like. Returns False if it was already gone."""
        count = self.db.query(Like).filter(Like.id == like_id).delete(synchronize_session=False)
        return count > 0
