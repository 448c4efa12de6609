from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class CreateSecretRequest(BaseModel):
    secret: str
    passphrase: str = ""
    ttl: int = Field(..., description="Lifetime in seconds, at least 300")


class CreateSecretResponse(BaseModel):
    code: str
    secret: str
    expires_at: str


class ReadSecretRequest(BaseModel):
    passphrase: str = ""


class DecodedSecret(BaseModel):
    """Either `message` on success or `code`/`error` on a soft failure."""
    message: Optional[str] = None
    code: Optional[int] = None
    error: Optional[str] = None


class SecretMetadata(BaseModel):
    """Public view of a stored secret. Never carries plaintext or ciphertext."""
    id: str
    ttl: int
    created_at: datetime
    updated_at: datetime
    expires_at: datetime
