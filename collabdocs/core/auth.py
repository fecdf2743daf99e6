"""Authentication module: deep module exposing FastAPI dependencies.

Public interface:
    ``optional_auth``: always returns AuthContext, never raises. Anonymous
        when no valid token is present.
    ``require_auth``: returns AuthContext or raises 401.
    ``require_accountable``: authenticated and allowed to author documents, else 403.
    ``require_admin``: authenticated admin, else 403.

Identity comes from bearer tokens issued by the identity provider. The
first time a token names an unknown user, a User row is provisioned from
its claims; afterwards the token's role stays authoritative.

When ``settings.auth_enabled`` is False every request acts as the
development user (an admin) so the development workflow is unbroken.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import settings
from .token_factory import TokenPayload, decode_token
from ..database import get_db
from ..exceptions import AuthenticationError, ForbiddenError

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)

ROLE_ADMIN = "admin"
ROLE_ACCOUNTABLE = "accountable"
ROLE_USER = "user"
VALID_ROLES = frozenset({ROLE_ADMIN, ROLE_ACCOUNTABLE, ROLE_USER})


@dataclass(frozen=True)
class AuthContext:
    """Resolved identity available to every endpoint.

    ``user_id`` is None for anonymous callers.
    """

    user_id: Optional[str]
    role: str = ROLE_USER

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and self.role == ROLE_ADMIN

    @property
    def is_accountable(self) -> bool:
        """Admins can do anything accountable users can."""
        return self.is_authenticated and self.role in (ROLE_ACCOUNTABLE, ROLE_ADMIN)


ANONYMOUS = AuthContext(user_id=None, role=ROLE_USER)


def optional_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    db: Session = Depends(get_db),
) -> AuthContext:
    """Resolve the caller if a valid token is present, anonymous otherwise.

    Never raises for missing or invalid tokens (unlike require_auth).
    """
    if not settings.auth_enabled:
        return _dev_context(db)

    if credentials is None:
        return ANONYMOUS

    payload = decode_token(
        credentials.credentials, settings.jwt_secret_key, settings.jwt_algorithm
    )
    if payload is None:
        return ANONYMOUS

    return _load_auth_context(payload, db)


def require_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    db: Session = Depends(get_db),
) -> AuthContext:
    """Require a valid token and return the caller's AuthContext."""
    if not settings.auth_enabled:
        return _dev_context(db)

    if credentials is None:
        raise AuthenticationError("Missing authentication token")

    payload = decode_token(
        credentials.credentials, settings.jwt_secret_key, settings.jwt_algorithm
    )
    if payload is None:
        raise AuthenticationError("Invalid or expired token")

    return _load_auth_context(payload, db)


def require_accountable(auth: AuthContext = Depends(require_auth)) -> AuthContext:
    """Require a caller allowed to author documents. Raises 403 otherwise."""
    if not auth.is_accountable:
        raise ForbiddenError("Accountable role required")
    return auth


def require_admin(auth: AuthContext = Depends(require_auth)) -> AuthContext:
    """Require the authenticated user to be an admin. Raises 403 otherwise."""
    if not auth.is_admin:
        raise ForbiddenError("Admin access required")
    return auth


def _dev_context(db: Session) -> AuthContext:
    """Auth disabled: act as the configured development admin."""
    payload = TokenPayload(sub=settings.dev_user_id, role=ROLE_ADMIN, exp=None, name="Developer")
    return _load_auth_context(payload, db)


def _load_auth_context(payload: TokenPayload, db: Session) -> AuthContext:
    """Load (or provision) the user named by a decoded token."""
    from ..models.user import User

    role = payload.role if payload.role in VALID_ROLES else ROLE_USER

    user = db.query(User).filter(User.user_id == payload.sub).first()
    if user is None:
        user = User(
            user_id=payload.sub,
            display_name=payload.name or payload.sub,
            email=payload.email,
            role=role,
            is_active=True,
        )
        db.add(user)
        db.commit()
        logger.info("Provisioned user from token", extra={"user_id": payload.sub, "role": role})
    elif not user.is_active:
        raise AuthenticationError("Account is deactivated")
    elif user.role != role:
        user.role = role
        db.commit()

    return AuthContext(user_id=user.user_id, role=role)
