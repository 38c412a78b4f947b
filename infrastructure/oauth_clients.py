"""Google sign-in via Authlib's Starlette integration.

init_oauth() registers the Google OpenID Connect client when credentials
are configured; the routes store the result on app.state. The account
merge itself lives in services/oauth_service.py and only ever sees the
normalised dict returned by extract_user_info_from_google().
"""

from typing import Any, Dict, Optional

from authlib.integrations.starlette_client import OAuth

from config import OAuthProviderSettings
from shared.logging import get_logger

log = get_logger(__name__)

GOOGLE = "google"
_GOOGLE_METADATA_URL = "https://accounts.google.com/.well-known/openid-configuration"


def init_oauth(settings: OAuthProviderSettings) -> Optional[OAuth]:
    """Register the Google client. Returns None when it is not configured."""
    if not settings.google_enabled:
        log.warning("oauth_no_providers_configured")
        return None

    oauth = OAuth()
    oauth.register(
        name=GOOGLE,
        client_id=settings.google_oauth_client_id,
        client_secret=settings.google_oauth_client_secret,
        server_metadata_url=_GOOGLE_METADATA_URL,
        client_kwargs={
            "scope": "openid email profile",
            "prompt": "select_account",
        },
    )
    log.info("oauth_provider_initialized", provider=GOOGLE)
    return oauth


async def fetch_google_user_info(client: Any, token: Dict[str, Any]) -> Dict[str, Any]:
    """Read the OIDC userinfo from *token*, falling back to the userinfo endpoint."""
    userinfo = token.get("userinfo")
    if userinfo is None:
        userinfo = await client.userinfo(token=token)
    return extract_user_info_from_google(dict(userinfo))


def extract_user_info_from_google(userinfo: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "provider_user_id": str(userinfo.get("sub", "")),
        "email": (userinfo.get("email") or "").lower().strip(),
        "email_verified": bool(userinfo.get("email_verified", False)),
        "name": userinfo.get("name") or "",
        "picture": userinfo.get("picture") or "",
    }
