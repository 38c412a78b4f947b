"""
Periodic removal of expired one-time codes.

Purely housekeeping: lookups already ignore expired rows, so the sweep only
reclaims space. Started as a task in the app lifespan and cancelled on
shutdown.
"""

from __future__ import annotations

import asyncio

from pymongo.errors import PyMongoError

from repositories.otp_repository import OneTimeCodeRepository
from shared.logging import get_logger

log = get_logger(__name__)


async def sweep_once(codes: OneTimeCodeRepository) -> int:
    try:
        return await codes.sweep_expired()
    except PyMongoError as e:
        log.error("otp_sweep_failed", error=str(e), error_type=type(e).__name__)
        return 0
    except Exception:
        log.exception("otp_sweep_failed")
        return 0


async def run_sweeper(codes: OneTimeCodeRepository, interval_seconds: float) -> None:
    log.info("otp_sweeper_started", interval_seconds=interval_seconds)
    try:
        while True:
            await sweep_once(codes)
            await asyncio.sleep(interval_seconds)
    except asyncio.CancelledError:
        log.info("otp_sweeper_stopped")
        raise
