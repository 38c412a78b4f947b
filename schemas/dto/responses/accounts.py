"""
Response DTOs for account endpoints.

Password hashes never leave the service: every document goes through
account_to_response(), which dispatches on the document's kind.
"""

from __future__ import annotations

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

from schemas.models.account import AgentDoc, UserDoc
from shared.datetime_utils import isoformat_or_none


class UserResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    kind: Literal["user"] = "user"
    name: str
    email: str
    phone_number: str
    address: str
    role: str
    verified: bool
    google_id: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: Optional[str] = None  # ISO 8601 string
    updated_at: Optional[str] = None


class AgentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    kind: Literal["agent"] = "agent"
    name: str
    email: str
    phone_number: str
    address: str
    photo_url: str
    approved: bool
    verified: bool
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


AccountResponse = Union[UserResponse, AgentResponse]


class AccountListResponse(BaseModel):
    """Response body for GET /dashboard/accounts."""

    model_config = ConfigDict(populate_by_name=True)

    items: list[AccountResponse]
    total: int


def user_to_response(user: UserDoc) -> UserResponse:
    return UserResponse(
        id=user.id_str,
        name=user.name,
        email=user.email,
        phone_number=user.phone_number,
        address=user.address,
        role=str(user.role),
        verified=user.verified,
        google_id=user.google_id,
        avatar_url=user.avatar_url,
        created_at=isoformat_or_none(user.created_at),
        updated_at=isoformat_or_none(user.updated_at),
    )


def agent_to_response(agent: AgentDoc) -> AgentResponse:
    return AgentResponse(
        id=agent.id_str,
        name=agent.name,
        email=agent.email,
        phone_number=agent.phone_number,
        address=agent.address,
        photo_url=agent.photo_url,
        approved=agent.approved,
        verified=agent.verified,
        created_at=isoformat_or_none(agent.created_at),
        updated_at=isoformat_or_none(agent.updated_at),
    )


def account_to_response(account: Union[UserDoc, AgentDoc]) -> AccountResponse:
    if isinstance(account, AgentDoc):
        return agent_to_response(account)
    return user_to_response(account)
