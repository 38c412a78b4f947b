"""
One-time code document model.

Maps to the `otp_verifications` MongoDB collection.

code_hash stores argon2(code) — the plain code is never stored.
At most one live record exists per (account_id, purpose); issuing a new
code deletes the previous ones first. Reads ignore rows whose expires_at
has passed, so a stale row may linger until the sweeper removes it.
"""

from __future__ import annotations

from typing import Optional

from schemas.models.account import AccountKind
from schemas.models.base import MongoBaseModel, PyObjectId, UtcDatetime

OTP_COLLECTION = "otp_verifications"

PURPOSE_REGISTRATION = "registration"

OTP_TTL_SECONDS = 300  # 5 minutes


class OneTimeCodeDoc(MongoBaseModel):
    """Document model for the `otp_verifications` collection."""

    account_id: PyObjectId
    account_kind: Optional[AccountKind] = None
    purpose: str = PURPOSE_REGISTRATION
    code_hash: str
    # Hash of the code this record replaced, so a stale code reads as expired
    previous_code_hash: Optional[str] = None
    created_at: UtcDatetime
    expires_at: UtcDatetime
