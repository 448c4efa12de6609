from fastapi import APIRouter, Depends, HTTPException, status

from priv8.core.auth import authenticate_admin, create_access_token
from priv8.core.config import Settings, get_settings
from priv8.core.logger import get_logger
from priv8.api.v0.auth.models import LoginRequest, Token

logger = get_logger(__name__)

router = APIRouter(prefix="/auth")


@router.post("/login", response_model=Token)
def login(
    credentials: LoginRequest,
    settings: Settings = Depends(get_settings),
):
    """
    Exchange admin credentials for a bearer token.

    The token is only needed for deleting secrets.
    """
    identity = authenticate_admin(settings, credentials.username, credentials.password)
    if not identity:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return Token(access_token=create_access_token(identity, settings))
