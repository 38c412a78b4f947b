"""
FastAPI dependency providers.

Long-lived objects (db, email provider, file storage, token service) are
created in the app lifespan and stored on app.state; repositories and
services are cheap and built per request on top of them.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import AppSettings
from errors import AuthenticationError, ForbiddenError
from repositories.account_repository import AgentRepository, UserRepository
from repositories.otp_repository import OneTimeCodeRepository
from schemas.dto.responses.auth import AccountSession
from services.account_service import AccountService
from services.auth_service import AuthService
from services.oauth_service import OAuthService
from services.token_service import TokenService
from services.verification_service import VerificationService

_bearer = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


async def get_db(request: Request):
    """Return the async MongoDB database from app.state."""
    return request.app.state.db


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


async def get_user_repository(
    db=Depends(get_db), settings: AppSettings = Depends(get_settings)
) -> UserRepository:
    return UserRepository(db, reserved_email=settings.super_admin.super_admin_email)


async def get_agent_repository(
    db=Depends(get_db), settings: AppSettings = Depends(get_settings)
) -> AgentRepository:
    return AgentRepository(db, reserved_email=settings.super_admin.super_admin_email)


async def get_otp_repository(db=Depends(get_db)) -> OneTimeCodeRepository:
    return OneTimeCodeRepository(db)


async def get_account_service(
    request: Request,
    users: UserRepository = Depends(get_user_repository),
    agents: AgentRepository = Depends(get_agent_repository),
    settings: AppSettings = Depends(get_settings),
) -> AccountService:
    return AccountService(
        users,
        agents,
        storage=request.app.state.file_storage,
        storage_settings=settings.storage,
        reserved_email=settings.super_admin.super_admin_email,
    )


async def get_verification_service(
    request: Request,
    users: UserRepository = Depends(get_user_repository),
    agents: AgentRepository = Depends(get_agent_repository),
    codes: OneTimeCodeRepository = Depends(get_otp_repository),
    settings: AppSettings = Depends(get_settings),
) -> VerificationService:
    return VerificationService(
        users,
        agents,
        codes,
        email_provider=request.app.state.email_provider,
        reserved_email=settings.super_admin.super_admin_email,
        expose_dev_otp=settings.dev_otp_enabled,
    )


async def get_auth_service(
    users: UserRepository = Depends(get_user_repository),
    agents: AgentRepository = Depends(get_agent_repository),
    settings: AppSettings = Depends(get_settings),
) -> AuthService:
    return AuthService(
        users,
        agents,
        allow_passwordless_user_login=settings.allow_passwordless_user_login,
    )


async def get_oauth_service(
    users: UserRepository = Depends(get_user_repository),
    settings: AppSettings = Depends(get_settings),
) -> OAuthService:
    return OAuthService(users, reserved_email=settings.super_admin.super_admin_email)


async def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    tokens: TokenService = Depends(get_token_service),
) -> AccountSession:
    """Decode the caller's bearer token; 401 when missing or invalid."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")
    return tokens.decode(credentials.credentials)


async def require_superadmin(
    session: AccountSession = Depends(get_current_session),
) -> AccountSession:
    if not session.is_superadmin:
        raise ForbiddenError("Super admin access required")
    return session
