from fastapi import APIRouter
from priv8.api.v0.auth.main import router as auth_router
from priv8.api.v0.secret.main import router as secret_router

router = APIRouter(prefix="/api")
router.include_router(auth_router)
router.include_router(secret_router)
