"""
Domain exceptions raised by the secret lifecycle core.

Route handlers translate these into HTTP responses; the core never imports
FastAPI.
"""


class Priv8Error(Exception):
    """Base class for every priv8 domain error."""


class SecretValidationError(Priv8Error):
    """
    Input failed the create-time validation rules.

    Args:
        errors: Mapping of offending field name to a human readable message
    """

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        detail = "; ".join(f"{field}: {message}" for field, message in self.errors.items())
        super().__init__(detail)


class SecretNotFoundError(Priv8Error):
    """No record is stored under the requested id."""

    def __init__(self, secret_id: str):
        self.secret_id = secret_id
        super().__init__(f"Secret not found: {secret_id}")


class StorageError(Priv8Error):
    """The record store failed for a reason other than a missing record."""


class CipherConfigurationError(Priv8Error):
    """Key material is unusable; a deployment problem, not a user error."""


class ConfigurationError(Priv8Error):
    """Required runtime configuration is missing or unusable."""
