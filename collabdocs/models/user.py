"""User model.

Identities live in the external identity provider. A row is provisioned the
first time a valid token names a user, so documents, comments and likes
have something to point at.
"""

from sqlalchemy import Column, String, DateTime, Boolean
from sqlalchemy.sql import func
from ..database import Base


class User(Base):
    """Community member.

    Roles:
        admin      : manages custom forms and community policy
        accountable: may author documents and moderate their comments
        user       : may comment on and like comments of published documents
    """

    __tablename__ = "users"

    user_id = Column(String(50), primary_key=True)
    display_name = Column(String(255), nullable=False, default="Anonymous")
    email = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default="user")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
