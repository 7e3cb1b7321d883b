"""
Mock email transport.

Outbound mail is never sent; each message is appended to the store's email
log so it can be inspected from the presentation layer.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

import structlog
from tutorsched.core.config import get_settings
from tutorsched.domain.models import EmailLogEntry, new_id

if TYPE_CHECKING:
    from tutorsched.domain.store import DomainStore

logger = structlog.get_logger(__name__)


def send_email(
    store: DomainStore,
    to_address: str,
    subject: str,
    body: str,
    *,
    now: datetime,
) -> EmailLogEntry:
    """Append a message to the mock email log and return the entry."""
    entry = EmailLogEntry(id=new_id(), to=to_address, subject=subject, body=body, at=now)
    store.email_log.append(entry)
    logger.info(
        "mock_email_logged",
        email_id=entry.id,
        from_email=get_settings().mail_from,
        to_email=to_address,
        subject=subject,
    )
    return entry


def recent_emails(store: DomainStore, limit: int | None = None) -> list[EmailLogEntry]:
    """Return logged emails newest first."""
    entries = list(reversed(store.email_log))
    return entries if limit is None else entries[:limit]
