"""
Secret lifecycle: create, inspect, read-and-burn and delete.

A secret moves from created to exactly one of burned (read once with the right
passphrase) or deleted (explicit admin removal). Expired records stay stored,
undecryptable, until somebody deletes them.
"""
import enum
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from priv8.core.crypto import SecretCipher, derive_key
from priv8.core.errors import SecretNotFoundError, SecretValidationError, StorageError
from priv8.core.logger import get_logger
from priv8.core.security import new_secret_id
from priv8.core.store import SecretRecord, SecretStore

logger = get_logger(__name__)

# Validation bounds
MAX_SECRET_LENGTH = 128
MIN_TTL_SECONDS = 5 * 60
MAX_TTL_SECONDS = 365 * 24 * 60 * 60

# The one message every failed read gets, whatever the cause
NOT_FOUND_MESSAGE = "Secret doesn't exist or was already read"


def validate_create(content: str, ttl: int) -> None:
    """
    Check create input against the size and lifetime bounds.

    Raises:
        SecretValidationError: naming every offending field
    """
    errors = {}
    if not content:
        errors["secret"] = "cannot be blank"
    elif len(content) > MAX_SECRET_LENGTH:
        errors["secret"] = f"the length must be no more than {MAX_SECRET_LENGTH}"

    if ttl < MIN_TTL_SECONDS:
        errors["ttl"] = "TTL must be greater than 5 minutes"
    elif ttl > MAX_TTL_SECONDS:
        errors["ttl"] = f"TTL must be no more than {MAX_TTL_SECONDS} seconds (365 days)"

    if errors:
        raise SecretValidationError(errors)


class BurnFailure(enum.Enum):
    """Why a read-and-burn did not return plaintext. Internal only."""
    NOT_FOUND = "not_found"
    INVALID_TOKEN = "invalid_token"
    ALREADY_BURNED = "already_burned"


@dataclass(frozen=True)
class BurnResult:
    """Outcome of a read-and-burn: plaintext on success, a reason otherwise."""
    message: Optional[str] = None
    failure: Optional[BurnFailure] = None

    @classmethod
    def ok(cls, message: str) -> "BurnResult":
        return cls(message=message)

    @classmethod
    def failed(cls, failure: BurnFailure) -> "BurnResult":
        return cls(failure=failure)

    @property
    def succeeded(self) -> bool:
        return self.failure is None


@dataclass(frozen=True)
class CreatedSecret:
    code: str
    secret: str
    expires_at: datetime


class SecretLifecycleService:
    """
    Orchestrates validation, encryption and the read-and-burn protocol.

    Args:
        store: Record storage
        salt: Service-wide key derivation salt
        cipher: Token cipher (default: SecretCipher())
        clock: Returns the current Unix time (default: time.time)
    """

    def __init__(
        self,
        store: SecretStore,
        salt: str,
        cipher: Optional[SecretCipher] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.salt = salt
        self.cipher = cipher or SecretCipher()
        self.clock = clock

    def create(self, content: str, passphrase: str, ttl: int) -> CreatedSecret:
        """
        Encrypt and store a new secret.

        The plaintext is echoed back from the request, never re-read from
        storage.
        """
        validate_create(content, ttl)

        secret_id = new_secret_id()
        now = self.clock()
        created_at = datetime.fromtimestamp(now, tz=timezone.utc)
        # Computed before put so nothing is stored if the expiry is unrepresentable
        try:
            expires_at = created_at + timedelta(seconds=ttl)
        except OverflowError:
            raise SecretValidationError({"ttl": "TTL is out of range"})

        key = derive_key(passphrase, self.salt)
        token = self.cipher.encrypt(content.encode("utf-8"), key, now=now)

        self.store.put(
            SecretRecord(
                id=secret_id,
                ciphertext=token.decode("ascii"),
                ttl_seconds=ttl,
                created_at=created_at,
                updated_at=created_at,
            )
        )
        logger.info(f"Secret created: {secret_id} (ttl={ttl}s)")

        return CreatedSecret(
            code=secret_id,
            secret=content,
            expires_at=expires_at,
        )

    def get(self, secret_id: str) -> SecretRecord:
        """Return record metadata. Never decrypts, never burns."""
        return self.store.get(secret_id)

    def read_and_burn(self, secret_id: str, passphrase: str) -> BurnResult:
        """
        Decrypt a secret and delete it, at most once.

        Failed verification leaves the record in place so a mistyped
        passphrase can be retried until the token ages past its TTL.

        Raises:
            StorageError: the secret was decrypted but could not be deleted
        """
        try:
            record = self.store.get(secret_id)
        except SecretNotFoundError:
            logger.debug(f"Read attempt on missing secret: {secret_id}")
            return BurnResult.failed(BurnFailure.NOT_FOUND)

        key = derive_key(passphrase, self.salt)
        plaintext = self.cipher.verify_and_decrypt(
            record.ciphertext.encode("utf-8"),
            record.ttl_seconds,
            key,
            now=self.clock(),
        )
        if plaintext is None:
            logger.debug(f"Invalid passphrase or expired token for secret: {secret_id}")
            return BurnResult.failed(BurnFailure.INVALID_TOKEN)

        try:
            self.store.delete(secret_id)
        except SecretNotFoundError:
            # A concurrent reader burned it between our get and delete
            logger.info(f"Secret burned by a concurrent reader: {secret_id}")
            return BurnResult.failed(BurnFailure.ALREADY_BURNED)
        except StorageError:
            logger.error(
                f"Secret {secret_id} was decrypted but could not be burned; "
                "manual reconciliation required"
            )
            raise

        logger.info(f"Secret read and burned: {secret_id}")
        return BurnResult.ok(plaintext.decode("utf-8"))

    def delete(self, secret_id: str) -> SecretRecord:
        """Remove a secret unconditionally and return its metadata snapshot."""
        record = self.store.delete(secret_id)
        logger.info(f"Secret deleted: {secret_id}")
        return record

    def count(self) -> int:
        return self.store.count()
