"""
Account document models.

Two variants live in separate collections and are never shape-sniffed:
- `users`  → UserDoc  (kind = "user")
- `agents` → AgentDoc (kind = "agent")

Email uniqueness is enforced per collection only, so the same address may
exist once as a user and once as an agent.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal, Optional

from schemas.models.base import MongoBaseModel, UtcDatetime


class AccountKind(str, Enum):
    USER = "user"
    AGENT = "agent"


class UserRole(str, Enum):
    USER = "user"
    SUPERADMIN = "superadmin"


USERS_COLLECTION = "users"
AGENTS_COLLECTION = "agents"


class AccountDoc(MongoBaseModel):
    """Fields shared by both account variants."""

    name: str
    email: str
    phone_number: str = ""
    address: str = ""
    verified: bool = False
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None


class UserDoc(AccountDoc):
    """
    Document model for the `users` collection.

    role values: "user" (default) or "superadmin" (the single bootstrap account).
    OAuth-created users are stored with verified=True and google_id set.
    """

    kind: Literal["user"] = "user"
    role: UserRole = UserRole.USER
    password_hash: Optional[str] = None
    google_id: Optional[str] = None
    avatar_url: Optional[str] = None

    @property
    def is_superadmin(self) -> bool:
        return self.role == UserRole.SUPERADMIN


class AgentDoc(AccountDoc):
    """
    Document model for the `agents` collection.

    approved gates login; it only changes through an explicit admin action.
    verified records a successful OTP check and has no effect on login.
    """

    kind: Literal["agent"] = "agent"
    password_hash: Optional[str] = None
    photo_url: str
    approved: bool = False


# Fields an admin may edit through PATCH; approval is handled separately
EDITABLE_PROFILE_FIELDS = ("name", "phone_number", "address")
