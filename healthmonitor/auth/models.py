"""
HEALTH MONITOR - Identity Models
================================
Roles and the verified identity carried through a request.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any


class Role(str, Enum):
    """User roles. A role is fixed at registration."""
    PATIENT = "patient"
    ADMIN = "admin"

    @classmethod
    def values(cls):
        return [r.value for r in cls]


@dataclass(frozen=True)
class TokenIdentity:
    """Verified `{userId, role}` asserted by a session token."""
    user_id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def to_claims(self) -> Dict[str, Any]:
        return {"userId": self.user_id, "role": self.role.value}
