"""Custom form model."""

from sqlalchemy import Column, String, Text, DateTime, JSON
from sqlalchemy.sql import func
from ..database import Base


class CustomForm(Base):
    """Admin-defined schema a document's content follows.

    ``fields`` lists every content field; ``allow_comments`` is the subset
    readers may comment on.
    """

    __tablename__ = "custom_forms"

    id = Column(String(50), primary_key=True)
    slug = Column(String(100), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    fields = Column(JSON, nullable=False, default=list)
    allow_comments = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
