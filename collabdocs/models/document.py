"""Document model."""

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base
from ..core.content_utils import closing_date_of, is_past


class Document(Base):
    """A document's identity, authorship and lifecycle state.

    Content lives in DocumentVersion rows; ``current_version`` points at
    the one readers see.
    """

    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_author_id", "author_id"),
        Index("ix_documents_published", "published"),
    )

    id = Column(String(50), primary_key=True)

    # Immutable after creation
    author_id = Column(String(50), ForeignKey("users.user_id"), nullable=False)
    custom_form_id = Column(String(50), ForeignKey("custom_forms.id"), nullable=False)

    published = Column(Boolean, nullable=False, default=False)
    # Manual early close by the author. The effective state also honours
    # the current version's closingDate, see is_closed.
    closed = Column(Boolean, nullable=False, default=False)

    # use_alter: documents and document_versions reference each other.
    current_version_id = Column(
        String(50),
        ForeignKey("document_versions.id", use_alter=True, name="fk_documents_current_version"),
        nullable=True,
    )

    comments_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    author = relationship("User", foreign_keys=[author_id])
    custom_form = relationship("CustomForm")
    current_version = relationship(
        "DocumentVersion",
        foreign_keys=[current_version_id],
        post_update=True,
    )
    versions = relationship(
        "DocumentVersion",
        foreign_keys="DocumentVersion.document_id",
        back_populates="document",
        cascade="all, delete-orphan",
        order_by="DocumentVersion.version",
    )

    @property
    def closing_date(self):
        """closingDate of the current version, as an aware datetime, or None."""
        if self.current_version is None:
            return None
        return closing_date_of(self.current_version.content)

    @property
    def is_closed(self) -> bool:
        if self.closed:
            return True
        closing = self.closing_date
        return closing is not None and is_past(closing)
