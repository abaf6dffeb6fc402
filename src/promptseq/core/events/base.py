from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, ClassVar, Self
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True, kw_only=True)
class Event:
    """
    Base for everything published on the EventBus.

    Subclasses set `event_type` (bus routing key) and add their own fields.
    Use `create()` so identity and timestamp are always filled in.
    """

    event_type: ClassVar[str] = "event"

    event_id: UUID
    timestamp_utc: datetime

    @classmethod
    def create(cls, **fields: Any) -> Self:
        return cls(
            event_id=uuid4(),
            timestamp_utc=datetime.now(timezone.utc),
            **fields,
        )
