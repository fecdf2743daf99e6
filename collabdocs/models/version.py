"""Document version model."""

from sqlalchemy import Column, ForeignKey, Index, Integer, String, DateTime, JSON, Table
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


# Comments merged into a version.
version_contributions = Table(
    "version_contributions",
    Base.metadata,
    Column("version_id", String(50), ForeignKey("document_versions.id", ondelete="CASCADE"), primary_key=True),
    Column("comment_id", String(50), ForeignKey("comments.id", ondelete="CASCADE"), primary_key=True),
)


class DocumentVersion(Base):
    """Immutable content snapshot of a document.

    Only ``content`` may change after creation, and only while the version
    is amended in place without new contributions.
    """

    __tablename__ = "document_versions"
    __table_args__ = (
        Index("ix_document_versions_document_id", "document_id"),
        # Two writers racing for the same next number: one of them loses here.
        Index("ix_document_versions_number", "document_id", "version", unique=True),
    )

    id = Column(String(50), primary_key=True)
    document_id = Column(String(50), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False)
    version = Column(Integer, nullable=False)

    # Form-shaped: title, brief, custom fields, optional closingDate
    content = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    document = relationship("Document", foreign_keys=[document_id], back_populates="versions")
    contributions = relationship("Comment", secondary=version_contributions)
