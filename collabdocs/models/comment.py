"""Comment model."""

from sqlalchemy import Boolean, Column, ForeignKey, Index, String, Text, DateTime, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class Comment(Base):
    """A reader's comment on one field of a document version.

    Keeps both the document and the exact version it was written against;
    the version is not assumed to be the document's latest.
    """

    __tablename__ = "comments"
    __table_args__ = (
        Index("ix_comments_document_id", "document_id"),
        Index("ix_comments_version_id", "version_id"),
        Index("ix_comments_document_field", "document_id", "field"),
    )

    id = Column(String(50), primary_key=True)
    user_id = Column(String(50), ForeignKey("users.user_id"), nullable=False)
    document_id = Column(String(50), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False)
    version_id = Column(String(50), ForeignKey("document_versions.id"), nullable=False)

    field = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    # Anchor inside rich-text field content (editor-specific range data)
    decoration = Column(JSON(none_as_null=True), nullable=True)  # NULL, not JSON null, when absent

    resolved = Column(Boolean, nullable=False, default=False)
    # Response from the document author
    reply = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User")
