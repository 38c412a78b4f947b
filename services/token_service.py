"""
Session tokens.

Login never stores server-side session state: the issuer returns an
AccountSession descriptor and this service signs it into a short-lived JWT
that callers send back as ``Authorization: Bearer <token>``.
RS256 is used when a key pair is configured, HS256 with jwt_secret otherwise.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import jwt

from config import JWTSettings
from errors import AuthenticationError
from schemas.dto.responses.auth import AccountSession
from shared.datetime_utils import utcnow
from shared.logging import get_logger

log = get_logger(__name__)


class TokenService:
    def __init__(self, settings: JWTSettings) -> None:
        self._settings = settings
        if settings.use_rs256:
            # Support keys provided via env with literal \n sequences
            self._signing_key: Any = settings.jwt_private_key.replace("\\n", "\n")
            self._verify_key: Any = settings.jwt_public_key.replace("\\n", "\n")
            self._algorithm = "RS256"
        else:
            self._signing_key = self._verify_key = settings.jwt_secret
            self._algorithm = "HS256"
        if not self._signing_key:
            raise RuntimeError(
                "JWT_SECRET must be set when RS256 keys are not provided"
            )

    def issue(self, session: AccountSession, auth_method: str = "pwd") -> str:
        now = utcnow()
        claims = {
            "iss": self._settings.jwt_issuer,
            "aud": self._settings.jwt_audience,
            "sub": session.id,
            "name": session.name,
            "email": session.email,
            "role": session.role,
            "kind": session.kind,
            "iat": int(now.timestamp()),
            "exp": int(
                (now + timedelta(seconds=self._settings.access_token_ttl_seconds)).timestamp()
            ),
            "amr": [auth_method],
        }
        return jwt.encode(claims, self._signing_key, algorithm=self._algorithm)

    def decode(self, token: str) -> AccountSession:
        """Validate *token* and rebuild the session it carries."""
        try:
            claims = jwt.decode(
                token,
                self._verify_key,
                algorithms=[self._algorithm],
                audience=self._settings.jwt_audience,
                issuer=self._settings.jwt_issuer,
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationError("Session expired") from e
        except jwt.InvalidTokenError as e:
            log.info("session_token_rejected", reason=type(e).__name__)
            raise AuthenticationError("Invalid session token") from e

        return AccountSession(
            id=claims["sub"],
            name=claims.get("name", ""),
            email=claims.get("email", ""),
            role=claims.get("role", ""),
            kind=claims.get("kind", ""),
        )
