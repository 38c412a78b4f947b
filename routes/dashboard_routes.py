"""
Admin dashboard listing.

GET /dashboard/accounts?type=all|user|agent&q=... — users and agents in one
table, newest first, searchable by name, email or phone. The super-admin is
never listed.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from dependencies import get_account_service, require_superadmin
from schemas.dto.responses.accounts import AccountListResponse, account_to_response
from services.account_service import FILTER_ALL, AccountService

router = APIRouter(
    prefix="/dashboard",
    tags=["dashboard"],
    dependencies=[Depends(require_superadmin)],
)


@router.get("/accounts", response_model=AccountListResponse)
async def list_accounts(
    type: str = Query(default=FILTER_ALL),
    q: Optional[str] = Query(default=None),
    accounts: AccountService = Depends(get_account_service),
) -> AccountListResponse:
    items = [account_to_response(a) for a in await accounts.list_accounts(type, q)]
    return AccountListResponse(items=items, total=len(items))
