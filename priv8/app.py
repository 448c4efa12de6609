"""
priv8 - read-and-burn secret sharing
Main FastAPI application
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from priv8 import __version__
from priv8.api.router import router as api_router
from priv8.api.healthcheck import router as healthcheck_router
from priv8.core.config import get_settings
from priv8.core.db.engine import init_db
from priv8.core.errors import CipherConfigurationError, SecretValidationError, StorageError
from priv8.core.logger import configure_app_logging, get_logger
from priv8.core.middleware import SecurityHeadersMiddleware, RequestLoggingMiddleware

# Configure application logging
configure_app_logging()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="priv8", version=__version__, debug=get_settings().debug, lifespan=lifespan)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router)
app.include_router(healthcheck_router)

logger.info("priv8 application initialized")


@app.exception_handler(SecretValidationError)
async def secret_validation_error_handler(request: Request, exc: SecretValidationError):
    logger.info(f"Rejected secret input on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "errors": exc.errors},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are a 400, like every other input problem."""
    errors = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        field = "body" if error.get("type") == "json_invalid" or not loc else ".".join(loc)
        errors[field] = error.get("msg", "invalid value")

    detail = "; ".join(f"{field}: {message}" for field, message in errors.items())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": detail, "errors": errors},
    )


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


@app.exception_handler(CipherConfigurationError)
async def cipher_configuration_error_handler(request: Request, exc: CipherConfigurationError):
    logger.critical(f"Cipher misconfiguration: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
