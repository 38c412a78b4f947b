"""MongoDB index setup, run once from the app lifespan."""

from __future__ import annotations

from typing import Any

from pymongo import ASCENDING, DESCENDING

from schemas.models.account import AGENTS_COLLECTION, USERS_COLLECTION
from schemas.models.otp import OTP_COLLECTION
from shared.logging import get_logger

log = get_logger(__name__)


async def ensure_indexes(db: Any) -> None:
    for name in (USERS_COLLECTION, AGENTS_COLLECTION):
        col = db[name]
        await col.create_index([("email", ASCENDING)], unique=True)
        await col.create_index([("created_at", DESCENDING)])

    await db[USERS_COLLECTION].create_index([("google_id", ASCENDING)])

    otp = db[OTP_COLLECTION]
    await otp.create_index([("account_id", ASCENDING), ("purpose", ASCENDING)])
    await otp.create_index([("expires_at", ASCENDING)])

    log.info("mongo_indexes_ensured")
