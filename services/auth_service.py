"""
Login paths and the agent approval gate.

User/admin login and agent login are deliberately separate:

- users gate on ``verified`` (role "user" only; the super-admin is exempt)
- agents gate on ``approved`` via can_authenticate(), checked before the
  password so a pending agent always learns it is pending

Both return an AccountSession; the route turns it into a bearer token.
"""

from __future__ import annotations

from errors import InvalidCredentialsError, NotVerifiedError, PendingApprovalError, ValidationError
from repositories.account_repository import AgentRepository, UserRepository
from schemas.dto.responses.auth import AccountSession
from schemas.models.account import AccountKind, AgentDoc, UserDoc, UserRole
from shared.crypto import verify_secret
from shared.logging import get_logger
from shared.validators import normalize_email

log = get_logger(__name__)

AGENT_ROLE = "agent"


def can_authenticate(agent: AgentDoc) -> bool:
    """Approval gate: only agents an admin has approved may log in."""
    return agent.approved is True


def session_for_user(user: UserDoc) -> AccountSession:
    return AccountSession(
        id=user.id_str,
        name=user.name,
        email=user.email,
        role=str(user.role),
        kind=AccountKind.USER.value,
    )


def session_for_agent(agent: AgentDoc) -> AccountSession:
    return AccountSession(
        id=agent.id_str,
        name=agent.name,
        email=agent.email,
        role=AGENT_ROLE,
        kind=AccountKind.AGENT.value,
    )


class AuthService:
    def __init__(
        self,
        users: UserRepository,
        agents: AgentRepository,
        allow_passwordless_user_login: bool = False,
    ) -> None:
        self._users = users
        self._agents = agents
        self._allow_passwordless = allow_passwordless_user_login

    @staticmethod
    def _require_credentials(email: str, password: str) -> str:
        email = normalize_email(email)
        if not email or not password:
            raise ValidationError("Email and password are required")
        return email

    async def login_user(self, email: str, password: str) -> AccountSession:
        email = self._require_credentials(email, password)
        user = await self._users.get_by_email(email)
        if user is None:
            log.info("user_login_failed", reason="unknown_email")
            raise InvalidCredentialsError()

        if user.password_hash:
            if not verify_secret(password, user.password_hash):
                log.info("user_login_failed", user_id=user.id_str, reason="bad_password")
                raise InvalidCredentialsError()
        elif not self._allow_passwordless:
            log.info("user_login_failed", user_id=user.id_str, reason="no_password_set")
            raise InvalidCredentialsError()

        if user.role == UserRole.USER and not user.verified:
            log.info("user_login_failed", user_id=user.id_str, reason="not_verified")
            raise NotVerifiedError()

        log.info("user_login", user_id=user.id_str, role=str(user.role))
        return session_for_user(user)

    async def login_agent(self, email: str, password: str) -> AccountSession:
        email = self._require_credentials(email, password)
        agent = await self._agents.get_by_email(email)
        if agent is None or not agent.password_hash:
            log.info("agent_login_failed", reason="unknown_or_no_password")
            raise InvalidCredentialsError()

        if not can_authenticate(agent):
            log.info("agent_login_failed", agent_id=agent.id_str, reason="pending_approval")
            raise PendingApprovalError()

        if not verify_secret(password, agent.password_hash):
            log.info("agent_login_failed", agent_id=agent.id_str, reason="bad_password")
            raise InvalidCredentialsError()

        log.info("agent_login", agent_id=agent.id_str)
        return session_for_agent(agent)
