from typing import Optional

from pydantic import BaseModel, EmailStr

from app.platform.schemas import APIResponse


class ReportEmailRequest(BaseModel):
    url: str
    email: EmailStr


class ReportEmailOut(BaseModel):
    url: str
    email: EmailStr


class ReportEmailResponse(APIResponse[ReportEmailOut]):
    pass


class QueueStatus(BaseModel):
    processing: bool
    current_url: Optional[str] = None
    queued: int
    oldest_wait_seconds: Optional[float] = None
    cached: int
