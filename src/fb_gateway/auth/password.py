"""Password hashing with the ``bcrypt`` library.

bcrypt only looks at the first 72 bytes of its input and recent releases
refuse longer input outright, so the encoded password is cut at 72 bytes
before hashing and before checking. The cost factor comes from
``settings.BCRYPT_ROUNDS``.
"""

import logging

import bcrypt

from config.settings import settings

logger = logging.getLogger(__name__)

_BCRYPT_MAX_BYTES = 72


def _encode(plain: str) -> bytes:
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(plain: str, rounds: int | None = None) -> str:
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_encode(plain), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """False on mismatch, and also when the stored hash is not a bcrypt hash."""
    try:
        return bcrypt.checkpw(_encode(plain), hashed.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False
