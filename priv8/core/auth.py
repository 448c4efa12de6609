from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt
from pydantic import BaseModel

from priv8.core.config import Settings, get_settings
from priv8.core.logger import get_logger
from priv8.core.security import constant_time_compare, verify_password

logger = get_logger(__name__)

ALGORITHM = "HS256"


class Identity(BaseModel):
    """An authenticated admin."""
    id: str
    name: str


def authenticate_admin(settings: Settings, username: str, password: str) -> Optional[Identity]:
    """
    Check admin credentials.

    Login is disabled when no password hash is configured.
    """
    if not settings.admin_password_hash:
        logger.warning("Admin login attempted but PRIV8_ADMIN_PASSWORD_HASH is not set")
        return None

    # Evaluate both checks so the response time does not reveal which failed
    username_ok = constant_time_compare(username, settings.admin_username)
    password_ok = verify_password(password, settings.admin_password_hash)
    if not (username_ok and password_ok):
        logger.info(f"Authentication failed for user: {username}")
        return None

    logger.info(f"Authentication successful for user: {username}")
    return Identity(id=settings.admin_username, name=settings.admin_username)


def create_access_token(identity: Identity, settings: Settings) -> str:
    expire = datetime.now(timezone.utc) + timedelta(hours=settings.jwt_expiration_hours)
    claims = {"sub": identity.id, "name": identity.name, "exp": expire}
    return jwt.encode(claims, settings.jwt_signing_key, algorithm=ALGORITHM)


def decode_token(token: str, settings: Settings) -> Identity:
    payload = jwt.decode(token, settings.jwt_signing_key, algorithms=[ALGORITHM])
    subject = payload.get("sub")
    if subject is None:
        raise JWTError("Missing subject")
    return Identity(id=subject, name=payload.get("name", subject))


def get_current_admin(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> Identity:
    """Dependency to authenticate the admin via an `Authorization: Bearer` JWT"""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")

    if scheme.lower() != "bearer" or not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return decode_token(token.strip(), settings)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
