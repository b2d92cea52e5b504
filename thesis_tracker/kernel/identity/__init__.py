"""
Identity Core - token verification and password confirmation.
"""

from thesis_tracker.kernel.identity.password import PasswordHasher, verify_password, hash_password
from thesis_tracker.kernel.identity.jwt import (
    JWTManager,
    AccessTokenPayload,
    create_access_token,
    verify_access_token,
)

__all__ = [
    "PasswordHasher",
    "verify_password",
    "hash_password",
    "JWTManager",
    "AccessTokenPayload",
    "create_access_token",
    "verify_access_token",
]
