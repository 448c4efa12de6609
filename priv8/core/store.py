"""
Secret record storage.

The lifecycle service only depends on the SecretStore contract. Every method
signals a missing record with SecretNotFoundError and any other failure with
StorageError.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from priv8.core.db.tables.secret import Secret
from priv8.core.errors import SecretNotFoundError, StorageError
from priv8.core.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SecretRecord:
    """The persisted unit. Immutable once written."""
    id: str
    ciphertext: str
    ttl_seconds: int
    created_at: datetime
    updated_at: datetime

    @property
    def expires_at(self) -> datetime:
        """Informational expiry; the token's signed timestamp is authoritative."""
        return self.created_at + timedelta(seconds=self.ttl_seconds)


class SecretStore(ABC):
    """Durable keyed storage of secret records."""

    @abstractmethod
    def get(self, secret_id: str) -> SecretRecord:
        """Return the record or raise SecretNotFoundError."""

    @abstractmethod
    def put(self, record: SecretRecord) -> None:
        """Persist a new record."""

    @abstractmethod
    def delete(self, secret_id: str) -> SecretRecord:
        """
        Remove a record and return its prior content.

        Must be atomic: when several callers race on one id, exactly one gets
        the record back and the rest get SecretNotFoundError.
        """

    @abstractmethod
    def count(self) -> int:
        """Return the number of stored records."""


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_record(row: Secret) -> SecretRecord:
    return SecretRecord(
        id=row.id,
        ciphertext=row.ciphertext,
        ttl_seconds=row.ttl_seconds,
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )


class SqlSecretStore(SecretStore):
    """SecretStore backed by the `secret` table through a SQLAlchemy session."""

    def __init__(self, session: Session):
        self.session = session

    def _fetch(self, secret_id: str) -> Secret:
        row = self.session.execute(
            select(Secret).where(Secret.id == secret_id)
        ).scalar()
        if not row:
            raise SecretNotFoundError(secret_id)
        return row

    def get(self, secret_id: str) -> SecretRecord:
        try:
            return _to_record(self._fetch(secret_id))
        except SQLAlchemyError as exc:
            logger.error(f"Database error reading secret {secret_id}: {exc}")
            raise StorageError(f"failed to read secret {secret_id}") from exc

    def put(self, record: SecretRecord) -> None:
        row = Secret(
            id=record.id,
            ciphertext=record.ciphertext,
            ttl_seconds=record.ttl_seconds,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
        try:
            self.session.add(row)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error(f"Database error storing secret {record.id}: {exc}")
            raise StorageError(f"failed to store secret {record.id}") from exc

    def delete(self, secret_id: str) -> SecretRecord:
        try:
            record = _to_record(self._fetch(secret_id))

            # The row-level delete decides races: only one caller sees rowcount 1
            result = self.session.execute(
                delete(Secret).where(Secret.id == secret_id)
            )
            if result.rowcount != 1:
                self.session.rollback()
                raise SecretNotFoundError(secret_id)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error(f"Database error deleting secret {secret_id}: {exc}")
            raise StorageError(f"failed to delete secret {secret_id}") from exc

        return record

    def count(self) -> int:
        try:
            return self.session.execute(
                select(func.count()).select_from(Secret)
            ).scalar_one()
        except SQLAlchemyError as exc:
            logger.error(f"Database error counting secrets: {exc}")
            raise StorageError("failed to count secrets") from exc
