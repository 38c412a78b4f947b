"""
Authentication endpoints.

POST /auth/send-otp     — issue and email a verification code
POST /auth/verify-otp   — check a code; users get a session token back
POST /auth/login        — user / super-admin login
POST /auth/agent-login  — agent login (approval-gated)
GET  /auth/me           — describe the caller's session
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dependencies import (
    get_auth_service,
    get_current_session,
    get_token_service,
    get_verification_service,
)
from schemas.dto.requests.auth import LoginRequest, SendOtpRequest, VerifyOtpRequest
from schemas.dto.responses.accounts import account_to_response
from schemas.dto.responses.auth import (
    AccountSession,
    LoginResponse,
    SendOtpResponse,
    VerifyOtpResponse,
)
from schemas.dto.responses.common import ErrorResponse
from services.auth_service import AuthService, session_for_user
from services.token_service import TokenService
from services.verification_service import SignupFields, VerificationService

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)


@router.post("/send-otp", response_model=SendOtpResponse)
async def send_otp(
    body: SendOtpRequest,
    verification: VerificationService = Depends(get_verification_service),
) -> SendOtpResponse:
    pending = await verification.request_code(
        body.email,
        account_id=body.account_id,
        kind=body.kind,
        signup=SignupFields(
            name=body.name,
            phone_number=body.phone_number,
            address=body.address,
        ),
    )
    return SendOtpResponse(
        status=pending.status,
        message="OTP sent to your email",
        account_id=pending.account_id,
        email=pending.email,
        kind=pending.kind.value,
    )


@router.post("/verify-otp", response_model=VerifyOtpResponse)
async def verify_otp(
    body: VerifyOtpRequest,
    verification: VerificationService = Depends(get_verification_service),
    tokens: TokenService = Depends(get_token_service),
) -> VerifyOtpResponse:
    result = await verification.verify_code(body.account_id, body.otp, body.kind)

    access_token = None
    if result.auto_login:
        access_token = tokens.issue(session_for_user(result.account), auth_method="otp")

    return VerifyOtpResponse(
        status=result.status,
        message=result.message,
        kind=result.kind.value,
        auto_login=result.auto_login,
        account=account_to_response(result.account),
        access_token=access_token,
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
    tokens: TokenService = Depends(get_token_service),
) -> LoginResponse:
    session = await auth.login_user(body.email, body.password)
    return LoginResponse(
        message="Login successful",
        access_token=tokens.issue(session),
        account=session,
    )


@router.post("/agent-login", response_model=LoginResponse)
async def agent_login(
    body: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
    tokens: TokenService = Depends(get_token_service),
) -> LoginResponse:
    session = await auth.login_agent(body.email, body.password)
    return LoginResponse(
        message="Login successful",
        access_token=tokens.issue(session),
        account=session,
    )


@router.get("/me", response_model=AccountSession)
async def me(session: AccountSession = Depends(get_current_session)) -> AccountSession:
    return session
