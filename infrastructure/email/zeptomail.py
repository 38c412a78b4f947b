"""ZeptoMail implementation of EmailProvider.

Sends through the ZeptoMail HTTP API using the shared HttpClient (httpx).
HTML bodies are rendered from Jinja2 templates in templates/emails/.
Failures raise EmailDeliveryError subclasses instead of returning False so
the verification flow can surface them to the caller.
"""

import os
from typing import Optional

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

from config import EmailSettings
from infrastructure.email.protocol import (
    EmailAuthError,
    EmailDeliveryError,
    EmailNotConfiguredError,
)
from infrastructure.http_client import HttpClient
from schemas.models.otp import OTP_TTL_SECONDS
from shared.logging import get_logger

log = get_logger(__name__)

_ZEPTO_API_URL = "https://api.zeptomail.com/v1.1/email"
_DEFAULT_TEMPLATE_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(__file__))),
    "templates",
    "emails",
)


class ZeptoMailProvider:
    def __init__(
        self,
        settings: EmailSettings,
        http_client: HttpClient,
        app_name: str = "Agent Based Service System",
        template_dir: str = _DEFAULT_TEMPLATE_DIR,
    ) -> None:
        self._settings = settings
        self._http = http_client
        self._app_name = app_name
        self._jinja = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
        )

    async def _send(
        self,
        to_email: str,
        to_name: Optional[str],
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
    ) -> None:
        if not self._settings.zepto_api_token:
            log.error("zepto_mail_send_failed", reason="token_not_configured")
            raise EmailNotConfiguredError("Email transport is not configured")

        payload: dict = {
            "from": {
                "address": self._settings.zepto_from_email,
                "name": self._settings.zepto_from_name,
            },
            "to": [
                {
                    "email_address": {
                        "address": to_email,
                        "name": to_name or to_email,
                    }
                }
            ],
            "subject": subject,
            "htmlbody": html_body,
        }
        if text_body:
            payload["textbody"] = text_body

        token = self._settings.zepto_api_token
        if not token.startswith("Zoho-enczapikey "):
            token = f"Zoho-enczapikey {token}"

        headers = {"Authorization": token, "Content-Type": "application/json"}

        try:
            response = await self._http.post(
                _ZEPTO_API_URL, json=payload, headers=headers
            )
        except httpx.HTTPError as e:
            log.error(
                "email_send_error",
                to_email=to_email,
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise EmailDeliveryError(f"Email transport error: {e}") from e

        if response.status_code in (200, 201, 202):
            log.info("email_sent_success", to_email=to_email, subject=subject)
            return

        log.error(
            "email_sent_failed",
            to_email=to_email,
            subject=subject,
            status_code=response.status_code,
            response=response.text[:200],
        )
        if response.status_code in (401, 403):
            raise EmailAuthError(
                "Email authentication failed. Check the ZeptoMail API token.",
                status_code=response.status_code,
            )
        raise EmailDeliveryError(
            f"Email provider rejected the message ({response.status_code})",
            status_code=response.status_code,
        )

    async def send_verification_email(
        self, email: str, user_name: Optional[str], otp_code: str
    ) -> None:
        minutes = OTP_TTL_SECONDS // 60
        subject = "Complete your registration - Verification code inside"
        template = self._jinja.get_template("verification.html")
        html_body = template.render(
            otp_code=otp_code,
            user_name=user_name,
            app_name=self._app_name,
            expires_minutes=minutes,
        )
        text_body = (
            f"Your verification code is: {otp_code}\n\n"
            f"This code is valid for {minutes} minutes.\n\n"
            f"If you didn't request this code, please ignore this email."
        )
        await self._send(email, user_name, subject, html_body, text_body)
