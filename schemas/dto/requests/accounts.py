"""
Request DTOs for account endpoints.

UserSignupRequest   — POST /users
AgentUpdateRequest  — PATCH /agents/{id}

Agent sign-up is multipart (it carries the photo) and is read from form
fields in the route instead of a JSON body.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class UserSignupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    email: str
    phone_number: str
    address: str
    password: Optional[str] = None


class AgentUpdateRequest(BaseModel):
    """Partial update; only the fields present in the body are applied."""

    model_config = ConfigDict(populate_by_name=True)

    approved: Optional[bool] = None
    name: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
