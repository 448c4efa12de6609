import os
import hmac
import time
import hashlib
import bcrypt


# Crockford base32, as used by ULIDs
_CROCKFORD_ALPHABET = "0123456789abcdefghjkmnpqrstvwxyz"
SECRET_ID_LENGTH = 26


def new_secret_id() -> str:
    """
    Generate a new public secret code.

    The code is a lowercase ULID: a 48-bit millisecond timestamp followed by
    80 random bits, so codes sort by creation time and never collide in
    practice.
    """
    timestamp_ms = int(time.time() * 1000) & ((1 << 48) - 1)
    value = (timestamp_ms << 80) | int.from_bytes(os.urandom(10), "big")

    chars = []
    for _ in range(SECRET_ID_LENGTH):
        chars.append(_CROCKFORD_ALPHABET[value & 0x1F])
        value >>= 5
    return "".join(reversed(chars))


def _prepare_key_for_bcrypt(key: str) -> bytes:
    """
    Prepare a password for bcrypt hashing.
    Bcrypt has a 72 byte limit, so we hash longer values with SHA256 first.
    """
    key_bytes = key.encode('utf-8')
    if len(key_bytes) > 72:
        return hashlib.sha256(key_bytes).hexdigest().encode('utf-8')
    return key_bytes


def hash_password(password: str) -> str:
    """
    Hash the admin password using bcrypt.

    Operators use this to produce PRIV8_ADMIN_PASSWORD_HASH.

    Args:
        password: The plain text password to hash

    Returns:
        The bcrypt hash as a string
    """
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(_prepare_key_for_bcrypt(password), salt)
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its bcrypt hash.

    Args:
        plain_password: The plain text password to verify
        hashed_password: The bcrypt hash to compare against

    Returns:
        True if the password matches, False otherwise (including a malformed hash)
    """
    try:
        key_bytes = _prepare_key_for_bcrypt(plain_password)
        return bcrypt.checkpw(key_bytes, hashed_password.encode('utf-8'))
    except (ValueError, TypeError):
        return False


def constant_time_compare(a: str, b: str) -> bool:
    """
    Perform a constant-time string comparison to prevent timing attacks.
    """
    return hmac.compare_digest(a.encode('utf-8'), b.encode('utf-8'))
