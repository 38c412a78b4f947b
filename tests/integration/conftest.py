"""
Integration test fixtures.

Builds the real routers and services on top of mongomock-motor and a mocked
email provider, injected through a test lifespan the same way create_app()
wires app.state. No network connections are made.
"""

import os
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from config import AppSettings, DatabaseSettings, JWTSettings, StorageSettings, SuperAdminSettings
from errors import register_error_handlers
from infrastructure.storage.local_storage import LocalFileStorage
from repositories.account_repository import AgentRepository, UserRepository
from routes.agents_routes import router as agents_router
from routes.auth_routes import router as auth_router
from routes.dashboard_routes import router as dashboard_router
from routes.oauth_routes import router as oauth_router
from routes.users_routes import router as users_router
from services.account_service import AccountService
from services.token_service import TokenService

os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017/")

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "adminpass"


@pytest.fixture
def email_provider():
    provider = AsyncMock()
    provider.send_verification_email = AsyncMock(return_value=None)
    return provider


@pytest.fixture
def settings(tmp_path):
    return AppSettings(
        env="test",
        expose_dev_otp=False,
        db=DatabaseSettings(mongodb_uri="mongodb://localhost:27017/"),
        jwt=JWTSettings(jwt_secret="integration-secret-long-enough-for-hs256"),
        storage=StorageSettings(upload_dir=str(tmp_path / "uploads")),
        super_admin=SuperAdminSettings(
            super_admin_email=ADMIN_EMAIL, super_admin_password=ADMIN_PASSWORD
        ),
    )


@pytest.fixture
def client(settings, email_provider):
    db = AsyncMongoMockClient()["agent-service-it"]
    storage = LocalFileStorage(settings.storage.upload_dir)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.settings = settings
        app.state.db = db
        app.state.email_provider = email_provider
        app.state.file_storage = storage
        app.state.token_service = TokenService(settings.jwt)
        app.state.oauth = None
        await AccountService(
            UserRepository(db, reserved_email=ADMIN_EMAIL),
            AgentRepository(db, reserved_email=ADMIN_EMAIL),
            storage=storage,
            storage_settings=settings.storage,
            reserved_email=ADMIN_EMAIL,
        ).bootstrap_super_admin(settings.super_admin)
        yield

    app = FastAPI(lifespan=lifespan)
    register_error_handlers(app)
    for router in (auth_router, oauth_router, users_router, agents_router, dashboard_router):
        app.include_router(router)

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers(client):
    resp = client.post(
        "/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
    )
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}
