"""
User endpoints.

POST   /users       — public sign-up (unverified until the OTP is checked)
GET    /users       — list users (super-admin)
GET    /users/{id}  — view a user (super-admin)
DELETE /users/{id}  — delete a user; the super-admin itself is protected
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from dependencies import get_account_service, require_superadmin
from schemas.dto.requests.accounts import UserSignupRequest
from schemas.dto.responses.accounts import UserResponse, user_to_response
from schemas.dto.responses.common import ErrorResponse, MessageResponse
from services.account_service import AccountService

router = APIRouter(
    prefix="/users",
    tags=["users"],
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    body: UserSignupRequest,
    accounts: AccountService = Depends(get_account_service),
) -> UserResponse:
    user = await accounts.sign_up_user(
        name=body.name,
        email=body.email,
        phone_number=body.phone_number,
        address=body.address,
        password=body.password,
    )
    return user_to_response(user)


@router.get(
    "",
    response_model=list[UserResponse],
    dependencies=[Depends(require_superadmin)],
)
async def list_users(
    q: Optional[str] = Query(default=None),
    accounts: AccountService = Depends(get_account_service),
) -> list[UserResponse]:
    return [user_to_response(u) for u in await accounts.list_users(q)]


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    dependencies=[Depends(require_superadmin)],
)
async def get_user(
    user_id: str,
    accounts: AccountService = Depends(get_account_service),
) -> UserResponse:
    return user_to_response(await accounts.get_user(user_id))


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_superadmin)],
)
async def delete_user(
    user_id: str,
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    await accounts.delete_user(user_id)
    return MessageResponse(success=True, message="User deleted successfully")
