"""
Response DTOs for authentication endpoints.

AccountSession      — caller-visible session descriptor (also the JWT payload)
SendOtpResponse     — POST /auth/send-otp  (200)
VerifyOtpResponse   — POST /auth/verify-otp  (200)
LoginResponse       — POST /auth/login, POST /auth/agent-login  (200)
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from schemas.dto.responses.accounts import AccountResponse


class AccountSession(BaseModel):
    """Minimal descriptor of an authenticated account.

    role is "user" or "superadmin" for users and always "agent" for agents.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    email: str
    role: str
    kind: str

    @property
    def is_superadmin(self) -> bool:
        return self.role == "superadmin"


class SendOtpResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str
    message: str
    account_id: str
    email: str
    kind: str


class VerifyOtpResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str
    message: str
    kind: str
    auto_login: bool
    account: AccountResponse
    # Present only when auto_login is true
    access_token: Optional[str] = None


class LoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    access_token: str
    account: AccountSession
