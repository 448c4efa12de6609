from fastapi import APIRouter

from priv8 import __version__

router = APIRouter()


@router.get("/healthcheck")
def healthcheck() -> str:
    """Liveness probe reporting the running version."""
    return f"OK {__version__}"
