"""Community model: a single row holding community-wide policy."""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from ..database import Base


class Community(Base):
    """Community settings.

    ``permissions`` has the shape
    ``{"accountable": {"documentCreationLimit": <int>}}``.
    """

    __tablename__ = "community"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, default="Community")
    permissions = Column(JSON, nullable=False, default=dict)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def document_creation_limit(self) -> int:
        accountable = (self.permissions or {}).get("accountable") or {}
        return int(accountable.get("documentCreationLimit", 0))
