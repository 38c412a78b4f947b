"""
Request DTOs for authentication endpoints.

SendOtpRequest    — POST /auth/send-otp
VerifyOtpRequest  — POST /auth/verify-otp
LoginRequest      — POST /auth/login and POST /auth/agent-login
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from schemas.models.account import AccountKind


class SendOtpRequest(BaseModel):
    """Request body for POST /auth/send-otp.

    ``account_id`` is optional; without it the account is resolved by email.
    name/phone_number/address let a brand-new user sign up inline.
    """

    model_config = ConfigDict(populate_by_name=True)

    email: str
    account_id: Optional[str] = None
    kind: AccountKind = AccountKind.USER
    name: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None


class VerifyOtpRequest(BaseModel):
    """Request body for POST /auth/verify-otp."""

    model_config = ConfigDict(populate_by_name=True)

    account_id: str
    otp: str
    kind: AccountKind = AccountKind.USER


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
    password: str
