"""Password hashing and verification using bcrypt directly.

The ``*_async`` variants run bcrypt in the threadpool so request handlers
never block the event loop for the duration of a hash.
"""

import bcrypt
from starlette.concurrency import run_in_threadpool

BCRYPT_ROUNDS = 10

# bcrypt only consumes the first 72 bytes; newer releases reject longer input
BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash a plain-text password using bcrypt.

    Args:
        password: The plain-text password to hash.

    Returns:
        The bcrypt hash string.
    """
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(_encode(password), salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain-text password against a bcrypt hash.

    Returns:
        True if the password matches the hash, False otherwise (including
        when the stored hash is not a valid bcrypt string).
    """
    try:
        return bcrypt.checkpw(
            _encode(plain_password),
            hashed_password.encode("utf-8"),
        )
    except ValueError:
        return False


async def hash_password_async(password: str) -> str:
    return await run_in_threadpool(hash_password, password)


async def verify_password_async(plain_password: str, hashed_password: str) -> bool:
    return await run_in_threadpool(verify_password, plain_password, hashed_password)
