"""Document version repository for database operations."""

from typing import Iterable, List, Optional

import sqlalchemy.exc
from sqlalchemy import func, distinct
from sqlalchemy.orm.attributes import flag_modified

from ..models import Comment, DocumentVersion, version_contributions
from ..exceptions import ConflictError, VersionNotFoundError
from .base import BaseRepository, new_id


class VersionRepository(BaseRepository[DocumentVersion]):
    """Repository for immutable document versions."""

    model_class = DocumentVersion
    not_found_error = VersionNotFoundError

    def create(
        self,
        document_id: str,
        version: int,
        content: dict,
        contributions: Iterable[Comment] = (),
    ) -> DocumentVersion:
        """Create a version. *version* must be exactly one past the latest.

        Raises ConflictError when it is not, or when a concurrent writer
        claimed the same number first (unique index on document_id, version).
        """
        latest = self.get_latest_number(document_id)
        if version != latest + 1:
            raise ConflictError(
                document_id,
                f"Expected version {latest + 1}, got {version}",
            )

        db_version = DocumentVersion(
            id=new_id(),
            document_id=document_id,
            version=version,
            content=dict(content or {}),
        )
        db_version.contributions = list(contributions)
        self.db.add(db_version)
        try:
            self.db.flush()
        except sqlalchemy.exc.IntegrityError as e:
            raise ConflictError(document_id, f"Version {version} already exists") from e
        return db_version

    def update(self, version_id: str, content: dict) -> DocumentVersion:
        """Replace the content of a version in place. Number and contributions stay as they are."""
        db_version = self.get_by_id(version_id)
        db_version.content = dict(content or {})
        flag_modified(db_version, "content")
        self.db.flush()
        return db_version

    def get_latest_number(self, document_id: str) -> int:
        """Highest version number of the document, 0 when it has none yet."""
        latest = (
            self.db.query(func.max(DocumentVersion.version))
            .filter(DocumentVersion.document_id == document_id)
            .scalar()
        )
        return latest or 0

    def get_by_document(self, document_id: str, skip: int = 0, limit: int = 50) -> List[DocumentVersion]:
        """Get all versions of a document, newest first."""
        return (
            self.db.query(DocumentVersion)
            .filter(DocumentVersion.document_id == document_id)
            .order_by(DocumentVersion.version.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_by_number(self, document_id: str, version: int) -> Optional[DocumentVersion]:
        return (
            self.db.query(DocumentVersion)
            .filter(DocumentVersion.document_id == document_id, DocumentVersion.version == version)
            .first()
        )

    def count_contributions(self, document_id: str) -> dict:
        """Merged contributions and distinct contributing users across every version of a document."""
        row = (
            self.db.query(
                func.count(version_contributions.c.comment_id),
                func.count(distinct(Comment.user_id)),
            )
            .select_from(version_contributions)
            .join(DocumentVersion, DocumentVersion.id == version_contributions.c.version_id)
            .join(Comment, Comment.id == version_contributions.c.comment_id)
            .filter(DocumentVersion.document_id == document_id)
            .one()
        )
        return {
            "contributions_count": row[0] or 0,
            "contributors_count": row[1] or 0,
        }
