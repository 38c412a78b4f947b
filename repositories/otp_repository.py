"""
One-time-code store over the `otp_verifications` collection.

issue() clears the key before inserting, so a key normally holds one live
code. The delete-then-insert pair is not atomic; two concurrent requests
for the same account can briefly leave two rows, and the next issue() or
consume() clears both.

The replacing record keeps the hash of the code it superseded, letting the
verifier report a stale code as expired rather than as a typo.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Optional

from bson import ObjectId

from schemas.models.account import AccountKind
from schemas.models.otp import (
    OTP_COLLECTION,
    OTP_TTL_SECONDS,
    PURPOSE_REGISTRATION,
    OneTimeCodeDoc,
)
from shared.datetime_utils import utcnow
from shared.logging import get_logger

log = get_logger(__name__)


class OneTimeCodeRepository:
    ttl = timedelta(seconds=OTP_TTL_SECONDS)

    def __init__(self, db: Any) -> None:
        self._col = db[OTP_COLLECTION]

    async def issue(
        self,
        account_id: ObjectId,
        code_hash: str,
        purpose: str = PURPOSE_REGISTRATION,
        account_kind: Optional[AccountKind] = None,
    ) -> OneTimeCodeDoc:
        previous = await self.find(account_id, purpose)
        await self.consume(account_id, purpose)

        now = utcnow()
        record = OneTimeCodeDoc(
            account_id=account_id,
            account_kind=account_kind,
            purpose=purpose,
            code_hash=code_hash,
            previous_code_hash=previous.code_hash if previous else None,
            created_at=now,
            expires_at=now + self.ttl,
        )
        result = await self._col.insert_one(record.to_mongo())
        record.id = result.inserted_id
        log.info(
            "otp_issued",
            account_id=str(account_id),
            purpose=purpose,
            expires_at=record.expires_at.isoformat(),
        )
        return record

    async def find(
        self, account_id: ObjectId, purpose: str = PURPOSE_REGISTRATION
    ) -> Optional[OneTimeCodeDoc]:
        """Return the live record for the key; expired rows are never returned."""
        doc = await self._col.find_one(
            {
                "account_id": account_id,
                "purpose": purpose,
                "expires_at": {"$gt": utcnow()},
            },
            sort=[("created_at", -1)],
        )
        return OneTimeCodeDoc.from_mongo(doc)

    async def consume(
        self, account_id: ObjectId, purpose: str = PURPOSE_REGISTRATION
    ) -> int:
        """Delete every record for the key. Idempotent."""
        result = await self._col.delete_many(
            {"account_id": account_id, "purpose": purpose}
        )
        return result.deleted_count

    async def sweep_expired(self) -> int:
        result = await self._col.delete_many({"expires_at": {"$lte": utcnow()}})
        if result.deleted_count:
            log.info("otp_sweep_completed", deleted=result.deleted_count)
        return result.deleted_count
