from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field
from tutorsched.domain import Announcement


class AnnouncementCreate(BaseModel):
    title: str = Field(..., max_length=200)
    body: str = ""


class AnnouncementResponse(BaseModel):
    id: str
    tutor_id: str
    title: str
    body: str
    created_at: datetime
    recipients: list[str]
    read: bool

    @classmethod
    def for_reader(cls, announcement: Announcement, user_id: str) -> AnnouncementResponse:
        return cls(
            id=announcement.id,
            tutor_id=announcement.tutor_id,
            title=announcement.title,
            body=announcement.body,
            created_at=announcement.created_at,
            recipients=list(announcement.recipients),
            read=announcement.is_read_by(user_id),
        )


class AnnouncementsResponse(BaseModel):
    items: list[AnnouncementResponse]


class HiddenAnnouncementsResponse(BaseModel):
    hidden: list[str]
