"""Like model."""

from sqlalchemy import Column, ForeignKey, Index, String, DateTime
from sqlalchemy.sql import func
from ..database import Base


class Like(Base):
    """A user's like on a comment. The row existing is the liked state."""

    __tablename__ = "likes"
    __table_args__ = (
        Index("ix_likes_user_comment", "user_id", "comment_id", unique=True),
        Index("ix_likes_comment_id", "comment_id"),
    )

    id = Column(String(50), primary_key=True)
    user_id = Column(String(50), ForeignKey("users.user_id"), nullable=False)
    comment_id = Column(String(50), ForeignKey("comments.id", ondelete="CASCADE"), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
