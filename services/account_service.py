"""
Account administration: public sign-up, dashboard listing, approval and
deletion, plus the idempotent super-admin bootstrap run at startup.

The reserved super-admin email can only ever be created by
bootstrap_super_admin(); every public sign-up path rejects it.
"""

from __future__ import annotations

from typing import Optional, Union

from config import StorageSettings, SuperAdminSettings
from errors import DuplicateEmailError, ForbiddenError, NotFoundError, ValidationError
from infrastructure.storage.protocol import FileStorage
from repositories.account_repository import AgentRepository, UserRepository
from schemas.models.account import (
    EDITABLE_PROFILE_FIELDS,
    AccountKind,
    AgentDoc,
    UserDoc,
    UserRole,
)
from shared.crypto import hash_secret
from shared.logging import get_logger
from shared.validators import (
    normalize_email,
    require_fields,
    validate_email,
    validate_password,
    validate_photo,
)

log = get_logger(__name__)

AGENT_PHOTO_SUBDIR = "agents"

FILTER_ALL = "all"
FILTERS = (FILTER_ALL, AccountKind.USER.value, AccountKind.AGENT.value)


class AccountService:
    def __init__(
        self,
        users: UserRepository,
        agents: AgentRepository,
        storage: FileStorage,
        storage_settings: StorageSettings,
        reserved_email: str,
    ) -> None:
        self._users = users
        self._agents = agents
        self._storage = storage
        self._storage_settings = storage_settings
        self._reserved_email = normalize_email(reserved_email)

    def _reject_reserved(self, email: str, path: str) -> None:
        if email == self._reserved_email:
            log.warning("reserved_email_signup_blocked", path=path)
            if path == "agent":
                raise ForbiddenError("Admin account cannot be created through agent signup.")
            raise ForbiddenError(
                "Admin account cannot be created through signup. "
                "Please use the admin login."
            )

    # ── Sign-up ───────────────────────────────────────────────────────────────

    async def sign_up_user(
        self,
        name: str,
        email: str,
        phone_number: str,
        address: str,
        password: Optional[str] = None,
    ) -> UserDoc:
        require_fields(name=name, email=email, phone_number=phone_number, address=address)
        email = validate_email(email)
        self._reject_reserved(email, "user")

        password_hash = hash_secret(validate_password(password)) if password else None
        return await self._users.create(
            UserDoc(
                name=name.strip(),
                email=email,
                phone_number=phone_number.strip(),
                address=address.strip(),
                role=UserRole.USER,
                verified=False,
                password_hash=password_hash,
            )
        )

    async def sign_up_agent(
        self,
        name: str,
        email: str,
        phone_number: str,
        address: str,
        password: str,
        photo: bytes,
        photo_filename: Optional[str],
        photo_content_type: Optional[str],
    ) -> AgentDoc:
        require_fields(
            name=name,
            email=email,
            phone_number=phone_number,
            address=address,
            password=password,
        )
        validate_password(password)
        validate_photo(
            photo_content_type,
            len(photo or b""),
            allowed_types=self._storage_settings.allowed_photo_types,
            max_bytes=self._storage_settings.max_photo_bytes,
        )
        email = validate_email(email)
        self._reject_reserved(email, "agent")

        # Check before writing the photo so a duplicate never leaves a file behind
        if await self._agents.get_by_email(email) is not None:
            raise DuplicateEmailError()

        photo_url = await self._storage.save(AGENT_PHOTO_SUBDIR, photo_filename or "photo", photo)
        try:
            return await self._agents.create(
                AgentDoc(
                    name=name.strip(),
                    email=email,
                    phone_number=phone_number.strip(),
                    address=address.strip(),
                    password_hash=hash_secret(password),
                    photo_url=photo_url,
                    approved=False,
                )
            )
        except Exception:
            await self._storage.delete(photo_url)
            raise

    # ── Read ──────────────────────────────────────────────────────────────────

    async def list_users(self, search: Optional[str] = None) -> list[UserDoc]:
        return await self._users.list_all(search)

    async def list_agents(self, search: Optional[str] = None) -> list[AgentDoc]:
        return await self._agents.list_all(search)

    async def list_accounts(
        self, kind: str = FILTER_ALL, search: Optional[str] = None
    ) -> list[Union[UserDoc, AgentDoc]]:
        """Combined dashboard listing, newest first; the super-admin is hidden."""
        if kind not in FILTERS:
            raise ValidationError(
                f"type must be one of {', '.join(FILTERS)}", field="type"
            )

        items: list[Union[UserDoc, AgentDoc]] = []
        if kind in (FILTER_ALL, AccountKind.USER.value):
            items.extend(u for u in await self._users.list_all(search) if not u.is_superadmin)
        if kind in (FILTER_ALL, AccountKind.AGENT.value):
            items.extend(await self._agents.list_all(search))

        items.sort(key=lambda a: a.created_at.timestamp() if a.created_at else 0, reverse=True)
        return items

    async def get_user(self, user_id: str) -> UserDoc:
        user = await self._users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def get_agent(self, agent_id: str) -> AgentDoc:
        agent = await self._agents.get_by_id(agent_id)
        if agent is None:
            raise NotFoundError("Agent not found")
        return agent

    # ── Admin mutations ───────────────────────────────────────────────────────

    async def update_agent(
        self,
        agent_id: str,
        approved: Optional[bool] = None,
        **profile: Optional[str],
    ) -> AgentDoc:
        updates: dict = {
            k: v.strip()
            for k, v in profile.items()
            if k in EDITABLE_PROFILE_FIELDS and v is not None and v.strip()
        }
        if approved is not None:
            updates["approved"] = approved
        if not updates:
            raise ValidationError("No updatable fields supplied")

        agent = await self._agents.update_by_id(agent_id, updates)
        if agent is None:
            raise NotFoundError("Agent not found")
        if approved is not None:
            log.info("agent_approval_changed", agent_id=agent_id, approved=approved)
        return agent

    async def set_agent_approval(self, agent_id: str, approved: bool = True) -> AgentDoc:
        return await self.update_agent(agent_id, approved=approved)

    async def delete_user(self, user_id: str) -> None:
        if not await self._users.delete_by_id(user_id):
            raise NotFoundError("User not found")
        log.info("user_deleted", user_id=user_id)

    async def delete_agent(self, agent_id: str) -> None:
        agent = await self.get_agent(agent_id)
        if not await self._agents.delete_by_id(agent_id):
            raise NotFoundError("Agent not found")
        log.info("agent_deleted", agent_id=agent_id)
        if agent.photo_url:
            await self._storage.delete(agent.photo_url)

    # ── Bootstrap ─────────────────────────────────────────────────────────────

    async def bootstrap_super_admin(self, settings: SuperAdminSettings) -> UserDoc:
        """Create the reserved super-admin if missing; repair its role if not."""
        email = normalize_email(settings.super_admin_email)
        existing = await self._users.get_by_email(email)
        if existing is not None:
            updates: dict = {}
            if not existing.is_superadmin:
                updates["role"] = UserRole.SUPERADMIN.value
            if not existing.verified:
                updates["verified"] = True
            if settings.super_admin_password and not existing.password_hash:
                updates["password_hash"] = hash_secret(settings.super_admin_password)
            if updates:
                log.info("super_admin_repaired", fields=sorted(updates))
                existing = await self._users.update_by_email(email, updates)
            return self._warn_if_passwordless(existing)

        admin = await self._users.create(
            UserDoc(
                name=settings.super_admin_name,
                email=email,
                phone_number=settings.super_admin_phone,
                address=settings.super_admin_address,
                role=UserRole.SUPERADMIN,
                verified=True,
                password_hash=(
                    hash_secret(settings.super_admin_password)
                    if settings.super_admin_password
                    else None
                ),
            )
        )
        log.info("super_admin_initialized", user_id=admin.id_str)
        return self._warn_if_passwordless(admin)

    @staticmethod
    def _warn_if_passwordless(admin: UserDoc) -> UserDoc:
        # /auth/login needs a hash; without SUPER_ADMIN_PASSWORD only Google works
        if not admin.password_hash:
            log.warning("super_admin_without_password", user_id=admin.id_str)
        return admin
