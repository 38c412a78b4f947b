"""
Email verification with one-time codes.

request_code() resolves (or, for users, creates) the account, issues a
fresh 4-digit code, stores only its hash and emails the plaintext.
verify_code() checks a submitted code against the live record and moves the
account forward:

    user:  unverified ──verify──▶ verified  (auto_login=True)
    agent: unverified ──verify──▶ verified  (approved untouched, auto_login=False)

A wrong code leaves the record in place; only a successful match or a newer
request clears it.
The super-admin is refused a code; it signs in with its password only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from errors import (
    CodeNotFoundOrExpiredError,
    DeliveryFailedError,
    ForbiddenError,
    InvalidCodeError,
    NotFoundError,
    ValidationError,
)
from infrastructure.email.protocol import EmailDeliveryError, EmailProvider
from repositories.account_repository import AgentRepository, UserRepository
from repositories.otp_repository import OneTimeCodeRepository
from schemas.models.account import AccountKind, AgentDoc, UserDoc, UserRole
from schemas.models.base import parse_object_id
from schemas.models.otp import PURPOSE_REGISTRATION
from shared.crypto import hash_secret, verify_secret
from shared.generators import generate_otp_code
from shared.logging import get_logger
from shared.validators import normalize_email, validate_email

log = get_logger(__name__)

STATUS_PENDING = "PENDING"
STATUS_VERIFIED = "VERIFIED"


@dataclass
class SignupFields:
    name: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None

    @property
    def complete(self) -> bool:
        return all(
            v is not None and str(v).strip()
            for v in (self.name, self.phone_number, self.address)
        )


@dataclass
class PendingVerification:
    status: str
    account_id: str
    email: str
    kind: AccountKind


@dataclass
class VerificationResult:
    status: str
    account: Union[UserDoc, AgentDoc]
    kind: AccountKind
    auto_login: bool

    @property
    def message(self) -> str:
        if self.kind == AccountKind.AGENT:
            return (
                "Email verified successfully. "
                "Your account is pending admin approval."
            )
        return "Email verified successfully"


class VerificationService:
    def __init__(
        self,
        users: UserRepository,
        agents: AgentRepository,
        codes: OneTimeCodeRepository,
        email_provider: EmailProvider,
        reserved_email: str,
        expose_dev_otp: bool = False,
    ) -> None:
        self._users = users
        self._agents = agents
        self._codes = codes
        self._email = email_provider
        self._reserved_email = normalize_email(reserved_email)
        self._expose_dev_otp = expose_dev_otp

    async def _resolve(
        self, email: str, account_id: Optional[str], kind: AccountKind
    ) -> tuple[Optional[Union[UserDoc, AgentDoc]], AccountKind]:
        if account_id:
            repo = self._agents if kind == AccountKind.AGENT else self._users
            account = await repo.get_by_id(account_id)
            if account is not None:
                return account, kind

        user = await self._users.get_by_email(email)
        if user is not None:
            return user, AccountKind.USER
        agent = await self._agents.get_by_email(email)
        if agent is not None:
            return agent, AccountKind.AGENT
        return None, kind

    async def _create_pending_user(self, email: str, fields: SignupFields) -> UserDoc:
        if email == self._reserved_email:
            raise ForbiddenError(
                "Admin account cannot be created through signup. "
                "Please use the admin login."
            )
        return await self._users.create(
            UserDoc(
                name=fields.name.strip(),
                email=email,
                phone_number=fields.phone_number.strip(),
                address=fields.address.strip(),
                role=UserRole.USER,
                verified=False,
            )
        )

    async def request_code(
        self,
        email: str,
        account_id: Optional[str] = None,
        kind: AccountKind = AccountKind.USER,
        signup: Optional[SignupFields] = None,
    ) -> PendingVerification:
        email = validate_email(email)
        account, kind = await self._resolve(email, account_id, kind)

        if account is None:
            if kind == AccountKind.AGENT:
                raise NotFoundError("Agent not found. Please sign up first.")
            if signup is None or not signup.complete:
                raise NotFoundError("User not found. Please sign up first.")
            account = await self._create_pending_user(email, signup)
            kind = AccountKind.USER
        elif isinstance(account, UserDoc) and account.is_superadmin:
            log.warning("otp_superadmin_blocked", account_id=account.id_str)
            raise ForbiddenError("Admin account must sign in with the admin login")

        code = generate_otp_code()
        await self._codes.issue(
            account.id,
            hash_secret(code),
            purpose=PURPOSE_REGISTRATION,
            account_kind=kind,
        )

        try:
            await self._email.send_verification_email(account.email, account.name, code)
        except EmailDeliveryError as e:
            log.error(
                "otp_email_failed",
                account_id=account.id_str,
                kind=kind.value,
                reason=e.kind,
                error=e.message,
            )
            details: dict = {"reason": e.kind, "transport_error": e.message}
            if self._expose_dev_otp:
                log.warning("otp_dev_fallback", email=account.email, dev_otp=code)
                details["dev_otp"] = code
                details["note"] = (
                    "Email sending failed. Use the OTP above for testing "
                    "in development mode."
                )
            raise DeliveryFailedError("Failed to send OTP email", details=details) from e

        log.info("otp_sent", account_id=account.id_str, kind=kind.value)
        return PendingVerification(
            status=STATUS_PENDING,
            account_id=account.id_str,
            email=account.email,
            kind=kind,
        )

    async def verify_code(
        self,
        account_id: str,
        submitted_code: str,
        kind: AccountKind = AccountKind.USER,
    ) -> VerificationResult:
        if not account_id or not submitted_code:
            raise ValidationError("Account ID and OTP are required")

        oid = parse_object_id(account_id)
        record = await self._codes.find(oid, PURPOSE_REGISTRATION) if oid else None
        if record is None:
            log.info("otp_verification_failed", account_id=account_id, reason="not_found")
            raise CodeNotFoundOrExpiredError()

        submitted_code = submitted_code.strip()
        if not verify_secret(submitted_code, record.code_hash):
            if verify_secret(submitted_code, record.previous_code_hash or ""):
                log.info(
                    "otp_verification_failed", account_id=account_id, reason="superseded"
                )
                raise CodeNotFoundOrExpiredError()
            log.info("otp_verification_failed", account_id=account_id, reason="mismatch")
            raise InvalidCodeError()

        account: Optional[Union[UserDoc, AgentDoc]]
        if kind == AccountKind.AGENT:
            account = await self._agents.update_by_id(oid, {"verified": True})
            auto_login = False
        else:
            account = await self._users.update_by_id(oid, {"verified": True})
            # A code alone never opens an admin session
            auto_login = account is not None and not account.is_superadmin

        if account is None:
            raise NotFoundError("User/Agent not found")

        await self._codes.consume(oid, PURPOSE_REGISTRATION)
        log.info(
            "otp_verified",
            account_id=account_id,
            kind=kind.value,
            auto_login=auto_login,
        )
        return VerificationResult(
            status=STATUS_VERIFIED,
            account=account,
            kind=kind,
            auto_login=auto_login,
        )
