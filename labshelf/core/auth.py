"""Current-user resolution exposed as FastAPI dependencies.

Public interface:
    ``require_auth``  -- returns AuthContext or raises 401.
    ``optional_auth`` -- returns AuthContext, anonymous when no valid token.

When ``settings.auth_enabled`` is False every request runs as the anonymous
user so local development works without an identity provider.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .token_factory import decode_token
from ..exceptions import AuthenticationError

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)

ANONYMOUS_USER_ID = "anonymous"


@dataclass(frozen=True)
class AuthContext:
    """Identity of the caller. ``user_id`` is recorded as creator/uploader."""

    user_id: str
    role: str

    @property
    def is_anonymous(self) -> bool:
        return self.user_id == ANONYMOUS_USER_ID


_ANONYMOUS = AuthContext(user_id=ANONYMOUS_USER_ID, role="researcher")


def _context_from_credentials(
    credentials: Optional[HTTPAuthorizationCredentials],
) -> Optional[AuthContext]:
    if credentials is None:
        return None
    payload = decode_token(
        credentials.credentials, settings.jwt_secret_key, settings.jwt_algorithm
    )
    if payload is None or not payload.sub:
        return None
    return AuthContext(user_id=payload.sub, role=payload.role or "researcher")


def require_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> AuthContext:
    """Require a valid bearer token. Anonymous context when auth is disabled."""
    if not settings.auth_enabled:
        return _ANONYMOUS

    if credentials is None:
        raise AuthenticationError("Missing authentication token")

    auth = _context_from_credentials(credentials)
    if auth is None:
        logger.info("Rejected invalid or expired token")
        raise AuthenticationError("Invalid or expired token")
    return auth


def optional_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> AuthContext:
    """Like ``require_auth`` but never raises; falls back to anonymous."""
    if not settings.auth_enabled:
        return _ANONYMOUS
    return _context_from_credentials(credentials) or _ANONYMOUS
