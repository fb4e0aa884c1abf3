"""
HEALTH MONITOR - Authentication Module
======================================
Password hashing, session tokens and role-based access decisions.
"""

from .jwt_handler import JWTHandler, INSECURE_DEFAULT_SECRET
from .models import Role, TokenIdentity
from .password import PasswordHandler, PasswordPolicy
from .authorization import RBACAuthorizer, get_rbac_authorizer

__all__ = [
    'JWTHandler',
    'INSECURE_DEFAULT_SECRET',
    'Role',
    'TokenIdentity',
    'PasswordHandler',
    'PasswordPolicy',
    'RBACAuthorizer',
    'get_rbac_authorizer',
]
