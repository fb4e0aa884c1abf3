"""
HEALTH MONITOR - JWT Token Handler
==================================
Signed session tokens asserting `{userId, role}`.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from healthmonitor.errors import InvalidToken
from .models import Role, TokenIdentity

logger = logging.getLogger(__name__)

# Used only when no deployment secret is configured outside production.
INSECURE_DEFAULT_SECRET = "your-secret-key-change-in-production"


class JWTHandler:
    """
    JWT token handler for session authentication.

    Tokens are HS256-signed and expire `expiry` after issuance
    (7 days by default).
    """

    def __init__(self, secret_key: Optional[str] = None, algorithm: str = "HS256",
                 expiry: timedelta = timedelta(days=7)):
        if not secret_key:
            logger.warning("SESSION_SECRET not set. Signing tokens with the insecure default key!")
            secret_key = INSECURE_DEFAULT_SECRET
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expiry = expiry

    @property
    def uses_insecure_default(self) -> bool:
        return self.secret_key == INSECURE_DEFAULT_SECRET

    def issue_token(self, user_id: str, role: Role, now: Optional[datetime] = None) -> str:
        """
        Create a session token for a user.

        Args:
            user_id: User's unique ID
            role: User's role
            now: Issue time (defaults to the current UTC time)

        Returns:
            Encoded JWT token string
        """
        now = now or datetime.now(timezone.utc)
        identity = TokenIdentity(user_id=str(user_id), role=Role(role))
        payload: Dict[str, Any] = {**identity.to_claims(), "iat": now, "exp": now + self.expiry}
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> TokenIdentity:
        """
        Verify a token and return the identity it asserts.

        Raises:
            InvalidToken: bad signature, malformed token, expired token,
                or missing/unknown claims.
        """
        if not token:
            raise InvalidToken()

        try:
            claims = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            logger.debug("Token expired")
            raise InvalidToken()
        except JWTError as e:
            logger.warning(f"Invalid token: {e}")
            raise InvalidToken()

        user_id = claims.get("userId")
        role = claims.get("role")
        if not user_id or role not in Role.values():
            logger.warning("Token is missing userId/role claims")
            raise InvalidToken()

        return TokenIdentity(user_id=str(user_id), role=Role(role))
