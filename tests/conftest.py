"""
Test configuration and fixtures for priv8 tests.
"""
import os

os.environ.setdefault("PRIV8_LOG_TO_FILE", "false")
os.environ.setdefault("PRIV8_SALT", "test-salt")
os.environ.setdefault("PRIV8_JWT_SIGNING_KEY", "test-signing-key")

import threading

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from priv8.core.auth import Identity, create_access_token
from priv8.core.config import Settings
from priv8.core.db.tables.base import Base
from priv8.core.errors import SecretNotFoundError
from priv8.core.security import hash_password
from priv8.core.store import SecretRecord, SecretStore
from priv8.services.secrets import SecretLifecycleService

ADMIN_PASSWORD = "correct horse battery staple"


class InMemorySecretStore(SecretStore):
    """Deterministic, thread-safe SecretStore for tests."""

    def __init__(self):
        self.records: dict[str, SecretRecord] = {}
        self.lock = threading.Lock()

    def get(self, secret_id: str) -> SecretRecord:
        with self.lock:
            if secret_id not in self.records:
                raise SecretNotFoundError(secret_id)
            return self.records[secret_id]

    def put(self, record: SecretRecord) -> None:
        with self.lock:
            self.records[record.id] = record

    def delete(self, secret_id: str) -> SecretRecord:
        with self.lock:
            if secret_id not in self.records:
                raise SecretNotFoundError(secret_id)
            return self.records.pop(secret_id)

    def count(self) -> int:
        with self.lock:
            return len(self.records)


@pytest.fixture
def memory_store():
    return InMemorySecretStore()


@pytest.fixture
def service(memory_store):
    return SecretLifecycleService(memory_store, salt="test-salt")


@pytest.fixture(scope="session")
def admin_password_hash():
    return hash_password(ADMIN_PASSWORD)


@pytest.fixture
def settings(admin_password_hash):
    return Settings(
        salt="test-salt",
        jwt_signing_key="test-signing-key",
        jwt_expiration_hours=1,
        admin_username="admin",
        admin_password_hash=admin_password_hash,
    )


@pytest.fixture
def admin_token(settings):
    return create_access_token(Identity(id="admin", name="admin"), settings)


@pytest.fixture(scope="function")
def db_session():
    """Create an isolated test database session for each test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    Session = sessionmaker(bind=engine)
    session = Session()

    yield session

    session.close()
    Base.metadata.drop_all(engine)


@pytest.fixture
def client_factory(settings):
    """Factory to create test clients with a specific db session."""

    def create_client(session, token=None):
        from priv8.app import app
        from priv8.core.config import get_settings
        from priv8.core.db.session import get_db

        def override_get_db():
            yield session

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_settings] = lambda: settings

        client = TestClient(app)
        if token:
            client.headers["Authorization"] = f"Bearer {token}"
        return client

    yield create_client

    # Cleanup
    from priv8.app import app

    app.dependency_overrides.clear()
