from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Sequence

from promptseq.core.engine.router import EventHandler
from promptseq.core.events.base import Event
from promptseq.core.events.signals import SIGNAL_TYPES, Evaluate, Resume, signal_to_dict


@dataclass(slots=True)
class SignalJournal:
    """
    EventBus component: keeps the most recent signals of a session in memory.

    Diagnostics only; nothing is written to disk.
    """
    maxlen: int = 50
    _entries: deque[dict[str, Any]] = field(init=False)

    def __post_init__(self) -> None:
        if self.maxlen <= 0:
            raise ValueError("maxlen must be > 0")
        self._entries = deque(maxlen=self.maxlen)

    def subscriptions(self) -> Sequence[tuple[str, EventHandler]]:
        return [(et, self._on_signal) for et in SIGNAL_TYPES]

    def _on_signal(self, e: Event) -> None:
        if isinstance(e, (Evaluate, Resume)):
            self._entries.append(signal_to_dict(e))

    def recent(self) -> list[dict[str, Any]]:
        return list(self._entries)
