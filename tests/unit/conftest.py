"""
Unit test configuration.

Patches dotenv so pydantic-settings never reads the project's real .env file
during unit tests. Tests control config exclusively through monkeypatch.setenv().

Repository and service tests run against mongomock-motor, an in-memory
stand-in for the async MongoDB driver.
"""

from unittest.mock import AsyncMock

import pytest
from mongomock_motor import AsyncMongoMockClient

from config import StorageSettings
from infrastructure.storage.local_storage import LocalFileStorage
from repositories.account_repository import AgentRepository, UserRepository
from repositories.otp_repository import OneTimeCodeRepository

ADMIN_EMAIL = "admin@example.com"


@pytest.fixture(autouse=True)
def disable_dotenv_loading(monkeypatch):
    """Prevent pydantic-settings from loading .env files in all unit tests."""
    import pydantic_settings.sources.providers.dotenv as ps_dotenv

    monkeypatch.setattr(ps_dotenv, "dotenv_values", lambda *a, **kw: {})


@pytest.fixture
def db():
    return AsyncMongoMockClient()["agent-service-test"]


@pytest.fixture
def users(db):
    return UserRepository(db, reserved_email=ADMIN_EMAIL)


@pytest.fixture
def agents(db):
    return AgentRepository(db, reserved_email=ADMIN_EMAIL)


@pytest.fixture
def codes(db):
    return OneTimeCodeRepository(db)


@pytest.fixture
def email_provider():
    provider = AsyncMock()
    provider.send_verification_email = AsyncMock(return_value=None)
    return provider


@pytest.fixture
def storage(tmp_path):
    return LocalFileStorage(str(tmp_path / "uploads"))


@pytest.fixture
def storage_settings():
    return StorageSettings()
