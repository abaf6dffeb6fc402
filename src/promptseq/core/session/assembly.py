from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal, Mapping, Sequence

import structlog

from promptseq.core.engine.engine import SequenceEngine
from promptseq.core.engine.ports import AvailabilityOracle, PromptId
from promptseq.core.engine.router import EngineRouter, RouterWiring
from promptseq.core.events.bus import EventBus
from promptseq.core.logging.setup import bind_context
from promptseq.core.session.journal import SignalJournal
from promptseq.presentation.catalog import DEMO_SEQUENCE, card_for
from promptseq.presentation.oracle import StaticAvailabilityOracle
from promptseq.presentation.presenter import InteractivePresenter

log = structlog.get_logger()

SessionStatus = Literal["created", "awaiting_dismissal", "running", "complete"]


def new_session_id() -> str:
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    # High-entropy suffix to avoid collisions (even if called in same second)
    return f"{timestamp}_{secrets.token_hex(4)}"


@dataclass(frozen=True, slots=True)
class SessionHandle:
    """
    Everything wired for one sequencing session (one screen visit).

    The session id doubles as the context token passed to oracle and presenter.
    """
    session_id: str
    created_at_utc: datetime
    bus: EventBus
    engine: SequenceEngine
    presenter: InteractivePresenter
    journal: SignalJournal
    wiring: RouterWiring

    def status(self) -> SessionStatus:
        if not self.engine.state.started:
            return "created"
        if self.presenter.active is not None:
            return "awaiting_dismissal"
        if self.engine.is_complete:
            return "complete"
        return "running"

    def start(self) -> None:
        bind_context(session_id=self.session_id, component="session")
        self.engine.start(self.session_id)

    def close(self) -> None:
        self.engine.close()
        EngineRouter(bus=self.bus).unregister(self.wiring)


def build_session(
    *,
    session_id: str | None = None,
    availability: Mapping[str, bool],
    sequence: Sequence[PromptId] = DEMO_SEQUENCE,
    oracle: AvailabilityOracle | None = None,
    journal_size: int = 50,
) -> SessionHandle:
    sid = session_id or new_session_id()

    bus = EventBus()
    presenter = InteractivePresenter(bus=bus, cards=card_for)
    engine = SequenceEngine(
        session_id=sid,
        bus=bus,
        sequence=sequence,
        oracle=oracle if oracle is not None else StaticAvailabilityOracle(answers=dict(availability)),
        presenter=presenter,
    )

    journal = SignalJournal(maxlen=journal_size)
    wiring = EngineRouter(bus=bus).register([journal])

    log.info(
        "session.assembled",
        session_id=sid,
        prompts=[getattr(p, "value", str(p)) for p in sequence],
        availability=dict(availability),
    )

    return SessionHandle(
        session_id=sid,
        created_at_utc=datetime.now(timezone.utc),
        bus=bus,
        engine=engine,
        presenter=presenter,
        journal=journal,
        wiring=wiring,
    )
