"""
Google sign-in account merge.

The OAuth handshake itself is Authlib's job; this service only applies the
find-or-create-by-email contract to the normalised provider profile:

- unknown email → new pre-verified user carrying google_id and avatar
- known email   → backfill google_id / avatar_url only where missing
"""

from __future__ import annotations

from typing import Any

from errors import ForbiddenError, ValidationError
from repositories.account_repository import UserRepository
from schemas.models.account import UserDoc, UserRole
from shared.logging import get_logger
from shared.validators import normalize_email

log = get_logger(__name__)


class OAuthService:
    def __init__(self, users: UserRepository, reserved_email: str) -> None:
        self._users = users
        self._reserved_email = normalize_email(reserved_email)

    async def sign_in(self, provider_info: dict[str, Any]) -> UserDoc:
        email = normalize_email(provider_info.get("email", ""))
        if not email:
            raise ValidationError("OAuth provider did not return an email", field="email")

        google_id = provider_info.get("provider_user_id") or None
        picture = provider_info.get("picture") or None

        existing = await self._users.get_by_email(email)
        if existing is None:
            if email == self._reserved_email:
                log.warning("oauth_reserved_email_blocked")
                raise ForbiddenError("Admin cannot sign up via Google OAuth")
            user = await self._users.create(
                UserDoc(
                    name=provider_info.get("name") or "User",
                    email=email,
                    phone_number="",
                    address="",
                    role=UserRole.USER,
                    verified=True,
                    google_id=google_id,
                    avatar_url=picture,
                )
            )
            log.info("oauth_user_created", user_id=user.id_str, provider="google")
            return user

        updates: dict = {}
        if not existing.google_id and google_id:
            updates["google_id"] = google_id
        if not existing.avatar_url and picture:
            updates["avatar_url"] = picture
        if not updates:
            return existing

        log.info("oauth_user_backfilled", user_id=existing.id_str, fields=sorted(updates))
        return await self._users.update_by_email(email, updates)
