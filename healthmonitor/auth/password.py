"""
HEALTH MONITOR - Password Handler
=================================
Salted bcrypt hashing and the registration password policy.
"""

import re
import logging
import secrets
from typing import Optional, Tuple, List

import bcrypt

logger = logging.getLogger(__name__)


class PasswordPolicy:
    """
    Password strength policy.

    Requirements:
    - Minimum 8 characters
    - At least 1 uppercase letter
    - At least 1 lowercase letter
    - At least 1 digit
    - At least 1 special (non-alphanumeric) character
    - At most 72 bytes once UTF-8 encoded (bcrypt input limit)
    """

    MIN_LENGTH = 8
    MAX_BYTES = 72

    @classmethod
    def validate(cls, password: str) -> Tuple[bool, List[str]]:
        """
        Validate password against policy.

        Returns:
            Tuple of (is_valid, list_of_violations)
        """
        violations = []

        if len(password) < cls.MIN_LENGTH:
            violations.append(f"Password must be at least {cls.MIN_LENGTH} characters")

        if len(password.encode("utf-8")) > cls.MAX_BYTES:
            violations.append(f"Password cannot exceed {cls.MAX_BYTES} bytes")

        if not re.search(r"[A-Z]", password):
            violations.append("Password must contain at least one uppercase letter")

        if not re.search(r"[a-z]", password):
            violations.append("Password must contain at least one lowercase letter")

        if not re.search(r"[0-9]", password):
            violations.append("Password must contain at least one number")

        if not re.search(r"[^A-Za-z0-9]", password):
            violations.append("Password must contain at least one special character")

        return len(violations) == 0, violations


class PasswordHandler:
    """Secure password hashing and verification."""

    MIN_ROUNDS = 10

    def __init__(self, rounds: int = 10):
        # bcrypt work factor
        self.rounds = max(rounds, self.MIN_ROUNDS)
        self._dummy_hash: Optional[str] = None

    def hash_password(self, password: str) -> str:
        """
        Hash a password with a freshly generated salt.

        Returns:
            Hashed password string
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
        return hashed.decode("utf-8")

    def verify_password(self, password: str, hashed: str) -> bool:
        """
        Verify a password against its hash.

        Returns:
            True if password matches. Malformed hashes verify as False.
        """
        try:
            return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Password verification error: {e}")
            return False

    def dummy_verify(self, password: str) -> bool:
        """
        Spend one verification against a throwaway hash.

        Used when the account does not exist so login timing does not
        reveal whether an email is registered. Always False.
        """
        if self._dummy_hash is None:
            self._dummy_hash = self.hash_password(secrets.token_urlsafe(16))
        self.verify_password(password, self._dummy_hash)
        return False
