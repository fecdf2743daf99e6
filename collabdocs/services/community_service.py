"""Community policy provider."""

import logging

from sqlalchemy.orm import Session

from ..core.config import settings
from ..models import Community
from ..repositories import CommunityRepository
from ..schemas.community import CommunityUpdate

logger = logging.getLogger(__name__)

DEFAULT_COMMUNITY_NAME = "Community"


class CommunityService:
    """Reads and updates the single community policy row."""

    def __init__(self, db: Session):
        self.db = db
        self.community_repo = CommunityRepository(db)

    def get(self) -> Community:
        """Return the community, creating it from settings on first use."""
        community = self.community_repo.get_optional()
        if community is None:
            community = self.community_repo.create(
                DEFAULT_COMMUNITY_NAME,
                settings.default_document_creation_limit,
            )
            self.db.flush()
        return community

    def document_creation_limit(self) -> int:
        return self.get().document_creation_limit

    def update(self, data: CommunityUpdate) -> Community:
        community = self.community_repo.update(
            self.get(),
            name=data.name,
            document_creation_limit=data.document_creation_limit,
        )
        self.db.commit()
        self.db.refresh(community)
        logger.info(
            "Community policy updated",
            extra={"document_creation_limit": community.document_creation_limit},
        )
        return community
