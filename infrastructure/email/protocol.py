"""EmailProvider protocol — services depend on this, not the concrete implementation."""

from typing import Optional, Protocol


class EmailDeliveryError(Exception):
    """Raised when an email could not be handed to the transport.

    ``kind`` lets callers tell a credentials problem ("auth") apart from a
    network/provider failure ("transport") or a missing configuration
    ("not_configured").
    """

    kind = "transport"

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class EmailAuthError(EmailDeliveryError):
    kind = "auth"


class EmailNotConfiguredError(EmailDeliveryError):
    kind = "not_configured"


class EmailProvider(Protocol):
    async def send_verification_email(
        self, email: str, user_name: Optional[str], otp_code: str
    ) -> None: ...
