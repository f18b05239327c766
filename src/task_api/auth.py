from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Optional, Tuple

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .exceptions import AuthorizationError
from .settings import get_settings

logger = logging.getLogger(__name__)

_security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Caller:
    """Identity of an authenticated caller."""

    user_id: str
    is_admin: bool = False


# PUBLIC_INTERFACE
class TokenAuthGate:
    """
    Resolves bearer tokens to callers from a fixed token table.

    Token issuance and password checks belong to the authentication service;
    this gate only maps an already-issued credential to an identity.
    """

    def __init__(self, tokens: Dict[str, Tuple[str, bool]]) -> None:
        self._tokens = dict(tokens)

    def authenticate(self, token: str) -> Optional[Caller]:
        identity = self._tokens.get(token)
        if identity is None:
            return None
        user_id, is_admin = identity
        return Caller(user_id=user_id, is_admin=is_admin)


@lru_cache(maxsize=1)
def get_auth_gate() -> TokenAuthGate:
    """Return the process-wide gate built from AUTH_TOKENS."""
    return TokenAuthGate(get_settings().auth_tokens)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# PUBLIC_INTERFACE
def get_current_caller(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(_security),
    gate: TokenAuthGate = Depends(get_auth_gate),
) -> Caller:
    """
    FastAPI dependency returning the authenticated caller.

    Raises:
        HTTPException(401) if the bearer credential is missing or unknown.
    """
    if creds is None or not creds.credentials:
        raise _unauthorized("Not authenticated")
    caller = gate.authenticate(creds.credentials)
    if caller is None:
        logger.warning("Rejected unknown bearer credential")
        raise _unauthorized("Invalid authentication credentials")
    return caller


# PUBLIC_INTERFACE
def require_admin(caller: Caller = Depends(get_current_caller)) -> Caller:
    """FastAPI dependency that only lets admins through."""
    if not caller.is_admin:
        raise AuthorizationError("Admin access required")
    return caller
