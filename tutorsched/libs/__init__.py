"""Shared library helpers."""

from tutorsched.libs.mailer import recent_emails, send_email

__all__ = [
    "recent_emails",
    "send_email",
]
