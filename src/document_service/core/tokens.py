"""
Guest Token Codec

Generates opaque guest access tokens and their one-way hashes. Only the hash
is ever persisted; the plaintext token is handed out once and cannot be
recovered from stored data.
"""

import hashlib
import re
import secrets

TOKEN_BYTES = 32  # 256 bits
TOKEN_LENGTH = TOKEN_BYTES * 2

_TOKEN_PATTERN = re.compile(r"^[0-9a-f]{64}$", re.IGNORECASE)


def generate_token() -> str:
    """Generate a random guest token.

    Returns:
        64 lowercase hexadecimal characters from the OS CSPRNG
    """
    return secrets.token_hex(TOKEN_BYTES)


def hash_token(token: str) -> str:
    """Hash a plaintext token for storage and lookup.

    Args:
        token: Plaintext token

    Returns:
        SHA-256 hex digest of the token
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def is_valid_token_format(token: str) -> bool:
    """Check the token is 64 hex characters (case-insensitive)"""
    return bool(_TOKEN_PATTERN.match(token))
