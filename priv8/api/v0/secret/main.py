from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session
from fastapi import APIRouter, Depends, HTTPException, status

from priv8.core.auth import Identity, get_current_admin
from priv8.core.config import Settings, get_settings
from priv8.core.db.session import get_db
from priv8.core.errors import SecretNotFoundError
from priv8.core.logger import get_logger
from priv8.core.store import SecretRecord, SqlSecretStore
from priv8.services.secrets import NOT_FOUND_MESSAGE, SecretLifecycleService
from priv8.api.v0.secret.models import (
    CreateSecretRequest,
    CreateSecretResponse,
    DecodedSecret,
    ReadSecretRequest,
    SecretMetadata,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/secrets")


def get_secret_service(
    session: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> SecretLifecycleService:
    """Build a lifecycle service bound to the request's database session."""
    return SecretLifecycleService(SqlSecretStore(session), settings.salt)


def format_rfc3339(value: datetime) -> str:
    return value.isoformat(timespec="seconds")


def to_metadata(record: SecretRecord) -> SecretMetadata:
    return SecretMetadata(
        id=record.id,
        ttl=record.ttl_seconds,
        created_at=record.created_at,
        updated_at=record.updated_at,
        expires_at=record.expires_at,
    )


def not_found(secret_id: str) -> HTTPException:
    logger.info(f"Secret not found: {secret_id}")
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Secret not found",
    )


@router.post("", response_model=CreateSecretResponse, status_code=status.HTTP_201_CREATED)
def create_secret(
    create_request: CreateSecretRequest,
    service: SecretLifecycleService = Depends(get_secret_service),
):
    """
    Store a new secret.

    The returned code is the only handle to the secret; the plaintext is
    echoed back for confirmation.
    """
    created = service.create(
        create_request.secret,
        create_request.passphrase,
        create_request.ttl,
    )
    return CreateSecretResponse(
        code=created.code,
        secret=created.secret,
        expires_at=format_rfc3339(created.expires_at),
    )


@router.get("/{secret_id}", response_model=SecretMetadata)
def get_secret(
    secret_id: str,
    service: SecretLifecycleService = Depends(get_secret_service),
):
    """Public metadata lookup. Does not decrypt or burn."""
    try:
        record = service.get(secret_id)
    except SecretNotFoundError:
        raise not_found(secret_id)
    return to_metadata(record)


@router.post("/{secret_id}", response_model=DecodedSecret, response_model_exclude_none=True)
def read_secret(
    secret_id: str,
    read_request: Optional[ReadSecretRequest] = None,
    service: SecretLifecycleService = Depends(get_secret_service),
):
    """
    Read and burn a secret.

    Always answers 200. Missing, expired, already read and wrong passphrase
    all produce the same soft failure body.
    """
    passphrase = read_request.passphrase if read_request else ""
    result = service.read_and_burn(secret_id, passphrase)

    if not result.succeeded:
        return DecodedSecret(code=status.HTTP_404_NOT_FOUND, error=NOT_FOUND_MESSAGE)
    return DecodedSecret(message=result.message)


@router.delete("/{secret_id}", response_model=SecretMetadata)
def delete_secret(
    secret_id: str,
    admin: Identity = Depends(get_current_admin),
    service: SecretLifecycleService = Depends(get_secret_service),
):
    """Remove a secret without reading it. Requires an admin bearer token."""
    try:
        record = service.delete(secret_id)
    except SecretNotFoundError:
        raise not_found(secret_id)

    logger.info(f"Secret {secret_id} deleted by {admin.name}")
    return to_metadata(record)
