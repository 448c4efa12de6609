from sqlalchemy import String, Integer, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from priv8.core.db.tables.base import Base
from datetime import datetime, timezone


class Secret(Base):
    """
    Stores one encrypted, read-once secret.

    Security design:
    - id: Lowercase ULID handed to the creator as the public code
    - ciphertext: Fernet token; carries its own signed creation timestamp
    - ttl_seconds: Validity window, kept outside the token so queries can
      reason about expiry without decrypting
    - created_at/updated_at: Bookkeeping only, the token timestamp is authoritative

    Rows are never updated. They leave the table through a successful
    read-and-burn or an explicit delete.
    """
    __tablename__ = "secret"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    ciphertext: Mapped[str] = mapped_column(Text)
    ttl_seconds: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )
