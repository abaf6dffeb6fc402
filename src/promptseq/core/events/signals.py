from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, TypeAlias

import structlog

from promptseq.core.events.base import Event
from promptseq.core.events.bus import EventBus

log = structlog.get_logger()


@dataclass(frozen=True, slots=True, kw_only=True)
class Evaluate(Event):
    """
    A prompt slot should be evaluated: extend the available list by one lookahead scan.
    """
    event_type: ClassVar[str] = "prompt.evaluate"

    # Opaque to the engine; handed through to oracle and presenter untouched.
    context: Any = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Resume(Event):
    """
    The active prompt was dismissed (or the sequence is being kicked off): show the next one.
    """
    event_type: ClassVar[str] = "prompt.resume"

    context: Any = None


Signal: TypeAlias = Evaluate | Resume

SIGNAL_TYPES: tuple[str, ...] = (Evaluate.event_type, Resume.event_type)


def emit(bus: EventBus, signal: Signal) -> None:
    """
    Publish a signal on `bus`.

    Delivery is whatever the bus does; the engine never assumes the handler ran
    before emit() returns.
    """
    log.debug("signal.emit", event_type=signal.event_type, event_id=str(signal.event_id))
    bus.publish(signal)


def signal_to_dict(signal: Signal) -> dict[str, Any]:
    return {
        "event_id": str(signal.event_id),
        "timestamp_utc": signal.timestamp_utc.isoformat(),
        "event_type": signal.event_type,
        "context": repr(signal.context),
    }
