from pydantic import BaseModel, Field, field_validator
from typing import List

class AnnouncementRecord(BaseModel):
    announcement_date: str = Field(min_length=1, description="Date as shown on the listing, e.g. '06 Oct 2025'")
    company: str = Field(min_length=1)
    download_link: str = Field(min_length=1, description="Absolute URL of the announcement")
    memo: str = Field(min_length=1, description="Announcement title")

    @field_validator("download_link")
    @classmethod
    def link_must_be_absolute(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("download_link must be an absolute http(s) URL")
        return value

class AnnouncementsResponse(BaseModel):
    msg: str = "ok"
    data: List[AnnouncementRecord]

class FailedResponse(BaseModel):
    msg: str = "failed"
    error: str

class ErrorResponse(BaseModel):
    error: str
