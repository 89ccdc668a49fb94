from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr

from app.platform.schemas import APIResponse


class SubscribeIn(BaseModel):
    email: EmailStr
    name: str | None = None


class SubscriberOut(BaseModel):
    id: UUID
    email: EmailStr
    name: str | None = None
    subscribed_at: datetime

    class Config:
        from_attributes = True


class SubscribeResponse(APIResponse[SubscriberOut]):
    pass
