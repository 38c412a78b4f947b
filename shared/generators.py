"""
Random code generators — pure, side-effect-free functions.

All generators use the ``secrets`` module.
"""

from __future__ import annotations

import secrets

OTP_MIN = 1000
OTP_MAX = 9999


def generate_otp_code() -> str:
    """Generate a 4-digit numeric OTP, uniform over ``1000``–``9999`` inclusive."""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))

