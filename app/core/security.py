"""
Security Module - Bearer Authentication & Route Authorization
"""
import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from healthmonitor.auth import JWTHandler, PasswordHandler, TokenIdentity, get_rbac_authorizer
from healthmonitor.errors import Unauthenticated

from app.config import Settings
from app.core.utils import run_with_timeout
from app.services.database import get_jwt_handler

logger = logging.getLogger(__name__)

# auto_error=False so a missing or non-Bearer header maps to our own 401
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    jwt_handler: JWTHandler = Depends(get_jwt_handler),
) -> TokenIdentity:
    """
    Verify the bearer token and return the caller's identity.

    Raises:
        Unauthenticated: no `Authorization: Bearer <token>` header (401)
        InvalidToken: signature, structure or expiry check failed (403)
    """
    if credentials is None or not credentials.credentials:
        raise Unauthenticated()
    return jwt_handler.verify_token(credentials.credentials)


def require_admin(current_user: TokenIdentity = Depends(get_current_user)) -> TokenIdentity:
    """Dependency for admin-only routes."""
    return get_rbac_authorizer().enforce_admin(current_user)


def require_self_or_admin(
    user_id: str,
    current_user: TokenIdentity = Depends(get_current_user),
) -> TokenIdentity:
    """Dependency for routes addressed to `{user_id}`: owner or admin only."""
    return get_rbac_authorizer().enforce_self_or_admin(current_user, user_id)


async def hash_password(handler: PasswordHandler, password: str, settings: Settings) -> str:
    return await run_with_timeout(
        handler.hash_password, password,
        timeout=settings.PASSWORD_HASH_TIMEOUT_SECONDS,
        description="Password hashing",
    )


async def verify_password(handler: PasswordHandler, password: str, hashed: str, settings: Settings) -> bool:
    return await run_with_timeout(
        handler.verify_password, password, hashed,
        timeout=settings.PASSWORD_HASH_TIMEOUT_SECONDS,
        description="Password verification",
    )
