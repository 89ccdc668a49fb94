from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import UUID, uuid4

from fastapi import HTTPException, status


@dataclass
class Subscriber:
    email: str
    name: Optional[str] = None
    id: UUID = field(default_factory=uuid4)
    subscribed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class MailingList:
    """In-memory subscriber list, lives as long as the process."""

    def __init__(self):
        self._subscribers: Dict[str, Subscriber] = {}

    def subscribe(self, email: str, name: Optional[str] = None) -> Subscriber:
        key = email.strip().lower()
        if key in self._subscribers:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already subscribed")

        subscriber = Subscriber(email=key, name=name)
        self._subscribers[key] = subscriber
        return subscriber

    def is_subscribed(self, email: str) -> bool:
        return email.strip().lower() in self._subscribers

    def all(self) -> List[Subscriber]:
        return list(self._subscribers.values())

    def __len__(self) -> int:
        return len(self._subscribers)
