"""
HEALTH MONITOR - Role-Based Authorization
=========================================
Per-request access decisions. Nothing here keeps state between requests.
"""

import logging
from typing import Optional

from healthmonitor.errors import Forbidden
from .models import Role, TokenIdentity

logger = logging.getLogger(__name__)


class RBACAuthorizer:
    """
    Role-based access control for patient data.

    Rules:
    - self-or-admin: the caller owns the target user id, or is an admin
    - admin-only: the caller is an admin
    """

    def check_admin(self, identity: Optional[TokenIdentity]) -> bool:
        if identity is None:
            return False
        return identity.role == Role.ADMIN

    def check_self_or_admin(self, identity: Optional[TokenIdentity], target_user_id: str) -> bool:
        """
        Check whether the caller may act on `target_user_id`.

        Returns:
            True if the caller is the target user or an admin
        """
        if identity is None:
            return False
        return identity.user_id == target_user_id or self.check_admin(identity)

    def enforce_admin(self, identity: TokenIdentity) -> TokenIdentity:
        if not self.check_admin(identity):
            logger.warning(f"Admin access denied for user {identity.user_id if identity else None}")
            raise Forbidden("Admin access required")
        return identity

    def enforce_self_or_admin(self, identity: TokenIdentity, target_user_id: str) -> TokenIdentity:
        if not self.check_self_or_admin(identity, target_user_id):
            logger.warning(
                f"Access denied: user {identity.user_id if identity else None} -> {target_user_id}"
            )
            raise Forbidden("Access denied")
        return identity


# Singleton instance
_rbac: Optional[RBACAuthorizer] = None


def get_rbac_authorizer() -> RBACAuthorizer:
    """Get singleton RBAC authorizer."""
    global _rbac
    if _rbac is None:
        _rbac = RBACAuthorizer()
    return _rbac
