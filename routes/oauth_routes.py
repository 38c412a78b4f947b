"""
Google sign-in.

GET /oauth/google           — redirect to Google's consent screen
GET /oauth/google/callback  — exchange the code, merge the account, return a session
"""

from __future__ import annotations

from authlib.integrations.starlette_client import OAuthError
from fastapi import APIRouter, Depends, Request

from config import AppSettings
from dependencies import get_oauth_service, get_settings, get_token_service
from errors import AuthenticationError, NotFoundError
from infrastructure.oauth_clients import GOOGLE, fetch_google_user_info
from schemas.dto.responses.auth import LoginResponse
from services.auth_service import session_for_user
from services.oauth_service import OAuthService
from services.token_service import TokenService
from shared.logging import get_logger

log = get_logger(__name__)

router = APIRouter(prefix="/oauth", tags=["oauth"])


def _google_client(request: Request):
    oauth = getattr(request.app.state, "oauth", None)
    client = oauth.create_client(GOOGLE) if oauth is not None else None
    if client is None:
        raise NotFoundError("Google sign-in is not configured")
    return client


@router.get("/google")
async def google_login(
    request: Request, settings: AppSettings = Depends(get_settings)
):
    client = _google_client(request)
    redirect_uri = settings.oauth.google_oauth_redirect_uri or str(
        request.url_for("google_callback")
    )
    return await client.authorize_redirect(request, redirect_uri)


@router.get("/google/callback", name="google_callback", response_model=LoginResponse)
async def google_callback(
    request: Request,
    oauth_service: OAuthService = Depends(get_oauth_service),
    tokens: TokenService = Depends(get_token_service),
) -> LoginResponse:
    client = _google_client(request)
    try:
        token = await client.authorize_access_token(request)
    except OAuthError as e:
        log.warning("oauth_callback_failed", provider=GOOGLE, error=e.error)
        raise AuthenticationError("Google sign-in failed") from e

    info = await fetch_google_user_info(client, token)
    if not info["email_verified"]:
        raise AuthenticationError("Google account email is not verified")

    user = await oauth_service.sign_in(info)
    session = session_for_user(user)
    return LoginResponse(
        message="Login successful",
        access_token=tokens.issue(session, auth_method="oauth"),
        account=session,
    )
