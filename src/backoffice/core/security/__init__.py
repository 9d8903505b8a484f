"""Security utilities - tokens and token hashing.

Re-exports all security-related functions for convenience.
"""

from src.backoffice.core.security.tokens import (
    TokenClaims,
    TokenType,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_token,
    verify_access_token,
    verify_refresh_token,
)

__all__ = [
    "TokenClaims",
    "TokenType",
    "create_access_token",
    "create_refresh_token",
    "decode_token",
    "hash_token",
    "verify_access_token",
    "verify_refresh_token",
]
