"""
Agent endpoints.

POST   /agents       — multipart sign-up with required photo; starts unapproved
GET    /agents       — list agents (super-admin)
GET    /agents/{id}  — view an agent (super-admin)
PATCH  /agents/{id}  — approve / edit profile fields (super-admin)
DELETE /agents/{id}  — delete an agent and, best-effort, its photo (super-admin)
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from config import AppSettings
from dependencies import get_account_service, get_settings, require_superadmin
from schemas.dto.requests.accounts import AgentUpdateRequest
from schemas.dto.responses.accounts import AgentResponse, agent_to_response
from schemas.dto.responses.common import ErrorResponse, MessageResponse
from services.account_service import AccountService

router = APIRouter(
    prefix="/agents",
    tags=["agents"],
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)


@router.post("", response_model=AgentResponse, status_code=201)
async def create_agent(
    name: Optional[str] = Form(default=None),
    email: Optional[str] = Form(default=None),
    phone_number: Optional[str] = Form(default=None),
    address: Optional[str] = Form(default=None),
    password: Optional[str] = Form(default=None),
    photo: Optional[UploadFile] = File(default=None),
    accounts: AccountService = Depends(get_account_service),
    settings: AppSettings = Depends(get_settings),
) -> AgentResponse:
    # One byte past the limit is enough for the size check to reject it
    limit = settings.storage.max_photo_bytes + 1
    data = await photo.read(limit) if photo is not None else b""
    agent = await accounts.sign_up_agent(
        name=name,
        email=email,
        phone_number=phone_number,
        address=address,
        password=password,
        photo=data,
        photo_filename=photo.filename if photo is not None else None,
        photo_content_type=photo.content_type if photo is not None else None,
    )
    return agent_to_response(agent)


@router.get(
    "",
    response_model=list[AgentResponse],
    dependencies=[Depends(require_superadmin)],
)
async def list_agents(
    q: Optional[str] = Query(default=None),
    accounts: AccountService = Depends(get_account_service),
) -> list[AgentResponse]:
    return [agent_to_response(a) for a in await accounts.list_agents(q)]


@router.get(
    "/{agent_id}",
    response_model=AgentResponse,
    dependencies=[Depends(require_superadmin)],
)
async def get_agent(
    agent_id: str,
    accounts: AccountService = Depends(get_account_service),
) -> AgentResponse:
    return agent_to_response(await accounts.get_agent(agent_id))


@router.patch(
    "/{agent_id}",
    response_model=AgentResponse,
    dependencies=[Depends(require_superadmin)],
)
async def update_agent(
    agent_id: str,
    body: AgentUpdateRequest,
    accounts: AccountService = Depends(get_account_service),
) -> AgentResponse:
    agent = await accounts.update_agent(
        agent_id,
        approved=body.approved,
        name=body.name,
        phone_number=body.phone_number,
        address=body.address,
    )
    return agent_to_response(agent)


@router.delete(
    "/{agent_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_superadmin)],
)
async def delete_agent(
    agent_id: str,
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    await accounts.delete_agent(agent_id)
    return MessageResponse(success=True, message="Agent deleted successfully")
