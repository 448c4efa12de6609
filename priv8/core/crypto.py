"""
Secret crypto core: passphrase key derivation and self-expiring tokens.

Tokens are Fernet tokens:
    version (1B) | timestamp (8B BE) | IV (16B) | AES-128-CBC ciphertext | HMAC-SHA256 (32B)

The 32-byte derived key is split into a 16-byte signing half and a 16-byte
encryption half. The HMAC is checked in constant time before anything is
decrypted, so a wrong passphrase never yields decrypted bytes.

The TTL is not part of the token. It is supplied at verification time from
the stored record, while the token supplies the signed creation timestamp.

Security Note:
    Never log plaintext, passphrases or tokens.
"""
import base64
import time
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from priv8.core.errors import CipherConfigurationError
from priv8.core.logger import get_logger

logger = get_logger(__name__)

KEY_LENGTH = 32
KDF_ITERATIONS = 4096


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def derive_key(passphrase: str, salt: str) -> bytes:
    """Derive a 32-byte symmetric key from a passphrase using PBKDF2-HMAC-SHA256.

    An empty passphrase is allowed and derives the default key for the salt.

    Args:
        passphrase: User supplied passphrase, possibly empty.
        salt: Service-wide salt.

    Returns:
        32-byte derived key.
    """
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt.encode("utf-8"),
        iterations=KDF_ITERATIONS,
    )
    return kdf.derive(passphrase.encode("utf-8"))


def fernet_key(key: bytes) -> bytes:
    """Render a raw 32-byte key in the urlsafe base64 form Fernet expects."""
    if len(key) != KEY_LENGTH:
        raise CipherConfigurationError(
            f"key must be {KEY_LENGTH} bytes, got {len(key)}"
        )
    return base64.urlsafe_b64encode(key)


# ---------------------------------------------------------------------------
# Token encryption
# ---------------------------------------------------------------------------

class SecretCipher:
    """Authenticated, self-expiring encryption of opaque byte payloads."""

    @staticmethod
    def _fernet(key: bytes) -> Fernet:
        try:
            return Fernet(fernet_key(key))
        except ValueError as exc:
            raise CipherConfigurationError(str(exc)) from exc

    def encrypt(self, plaintext: bytes, key: bytes, now: Optional[float] = None) -> bytes:
        """Encrypt and sign plaintext, stamping the token with `now`.

        Args:
            plaintext: Payload to protect.
            key: 32-byte derived key.
            now: Unix time to embed; defaults to the current time.

        Returns:
            Fernet token bytes.

        Raises:
            CipherConfigurationError: If the key is not usable.
        """
        current_time = int(time.time() if now is None else now)
        return self._fernet(key).encrypt_at_time(plaintext, current_time)

    def verify_and_decrypt(
        self,
        token: bytes,
        ttl: int,
        key: bytes,
        now: Optional[float] = None,
    ) -> Optional[bytes]:
        """Verify a token and return its plaintext, or None.

        None covers a bad signature (tampering or wrong key), a timestamp more
        than `ttl` seconds in the past, a timestamp too far in the future, and
        a malformed token. The caller cannot tell these apart.

        Args:
            token: Fernet token bytes.
            ttl: Validity window in seconds, measured from the token timestamp.
            key: 32-byte derived key.
            now: Unix time to verify against; defaults to the current time.
        """
        current_time = int(time.time() if now is None else now)
        try:
            return self._fernet(key).decrypt_at_time(token, ttl, current_time)
        except InvalidToken:
            return None
        except (TypeError, ValueError):
            logger.debug("Rejected token with unreadable framing")
            return None
