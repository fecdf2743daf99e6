"""Community repository: the single community row."""

from typing import Optional

from sqlalchemy.orm.attributes import flag_modified

from ..models import Community


class CommunityRepository:
    """Reads and writes the community policy row."""

    def __init__(self, db):
        self.db = db

    def get_optional(self) -> Optional[Community]:
        return self.db.query(Community).order_by(Community.id).first()

    def create(self, name: str, document_creation_limit: int) -> Community:
        community = Community(
            name=name,
            permissions={"accountable": {"documentCreationLimit": document_creation_limit}},
        )
        self.db.add(community)
        self.db.flush()
        return community

    def update(self, community: Community, name: Optional[str] = None, document_creation_limit: Optional[int] = None) -> Community:
        if name is not None:
            community.name = name
        if document_creation_limit is not None:
            permissions = dict(community.permissions or {})
            accountable = dict(permissions.get("accountable") or {})
            accountable["documentCreationLimit"] = document_creation_limit
            permissions["accountable"] = accountable
            community.permissions = permissions
            flag_modified(community, "permissions")
        self.db.flush()
        return community
