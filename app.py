"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

import asyncio
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pymongo.asynchronous.mongo_client import AsyncMongoClient
from starlette.middleware.sessions import SessionMiddleware

from config import AppSettings
from errors import register_error_handlers
from infrastructure.email.zeptomail import ZeptoMailProvider
from infrastructure.http_client import HttpClient
from infrastructure.oauth_clients import init_oauth
from infrastructure.storage.local_storage import URL_PREFIX, LocalFileStorage
from repositories.account_repository import AgentRepository, UserRepository
from repositories.indexes import ensure_indexes
from repositories.otp_repository import OneTimeCodeRepository
from routes.agents_routes import router as agents_router
from routes.auth_routes import router as auth_router
from routes.dashboard_routes import router as dashboard_router
from routes.health_routes import router as health_router
from routes.oauth_routes import router as oauth_router
from routes.users_routes import router as users_router
from services.account_service import AccountService
from services.token_service import TokenService
from shared.logging import get_logger, setup_logging
from workers.otp_sweeper import run_sweeper

log = get_logger(__name__)


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()
    # Refuse to start without a signing key
    token_service = TokenService(settings.jwt)

    setup_logging(
        log_level=settings.logging.log_level,
        log_format=settings.logging.log_format,
        env=settings.env,
    )

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
        )

    os.makedirs(settings.storage.upload_dir, exist_ok=True)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        mongo_client: AsyncMongoClient = AsyncMongoClient(settings.db.mongodb_uri)
        db = mongo_client[settings.db.db_name]
        app.state.mongo_client = mongo_client
        app.state.db = db
        app.state.settings = settings

        await ensure_indexes(db)

        reserved_email = settings.super_admin.super_admin_email
        file_storage = LocalFileStorage(settings.storage.upload_dir)
        await AccountService(
            UserRepository(db, reserved_email=reserved_email),
            AgentRepository(db, reserved_email=reserved_email),
            storage=file_storage,
            storage_settings=settings.storage,
            reserved_email=reserved_email,
        ).bootstrap_super_admin(settings.super_admin)

        http_client = HttpClient()
        app.state.http_client = http_client
        app.state.email_provider = ZeptoMailProvider(
            settings.email, http_client, app_name=settings.app_name
        )
        app.state.file_storage = file_storage
        app.state.token_service = token_service
        app.state.oauth = init_oauth(settings.oauth)

        sweeper: Optional[asyncio.Task] = None
        interval = settings.verification.otp_sweep_interval_seconds
        if interval > 0:
            sweeper = asyncio.create_task(
                run_sweeper(OneTimeCodeRepository(db), interval)
            )

        log.info("app_started", env=settings.env, db_name=settings.db.db_name)

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        if sweeper is not None:
            sweeper.cancel()
            try:
                await sweeper
            except asyncio.CancelledError:
                pass
            except Exception:
                log.exception("otp_sweeper_crashed")
        await http_client.aclose()
        await mongo_client.close()
        log.info("app_stopped")

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    # all origins allowed with credentials support.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Authlib keeps the OAuth state/nonce in the session between redirects
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.secret_key,
        https_only=settings.is_production,
    )

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(oauth_router)
    app.include_router(users_router)
    app.include_router(agents_router)
    app.include_router(dashboard_router)
    app.mount(
        URL_PREFIX,
        StaticFiles(directory=settings.storage.upload_dir),
        name="uploads",
    )

    return app
