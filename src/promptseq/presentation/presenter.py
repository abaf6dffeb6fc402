from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

import structlog

from promptseq.core.engine.ports import PromptId
from promptseq.core.errors import NoActivePrompt, UnknownAction
from promptseq.core.events.bus import EventBus
from promptseq.core.events.signals import Evaluate, Resume, emit
from promptseq.presentation.catalog import PromptCard

log = structlog.get_logger()

CardLookup = Callable[[Any], PromptCard]


@dataclass(frozen=True, slots=True)
class ActivePrompt:
    """
    The prompt currently on screen, waiting for the user.
    """

    prompt_id: PromptId
    card: PromptCard
    context: Any
    shown_at_utc: datetime


@dataclass(frozen=True, slots=True)
class Dismissal:
    prompt_id: PromptId
    action: str
    dismissed_at_utc: datetime


class InteractivePresenter:
    """
    Presenter whose "screen" is a single slot polled by a client.

    present():  emits Evaluate (lookahead while the prompt is visible), then
                publishes the prompt's card as the active prompt
    dismiss():  user picked one of the card's actions; clears the slot and
                emits Resume exactly once
    """

    def __init__(self, *, bus: EventBus, cards: CardLookup) -> None:
        self._bus = bus
        self._cards = cards
        self._active: ActivePrompt | None = None
        self._dismissals: list[Dismissal] = []

    @property
    def active(self) -> ActivePrompt | None:
        return self._active

    @property
    def dismissals(self) -> tuple[Dismissal, ...]:
        return tuple(self._dismissals)

    def present(self, prompt_id: PromptId, context: Any) -> None:
        if self._active is not None:
            raise RuntimeError(
                f"cannot present {prompt_id!r}: {self._active.prompt_id!r} is still on screen"
            )

        card = self._cards(prompt_id)

        emit(self._bus, Evaluate.create(context=context))

        self._active = ActivePrompt(
            prompt_id=prompt_id,
            card=card,
            context=context,
            shown_at_utc=datetime.now(timezone.utc),
        )
        log.info("presenter.shown", prompt=card.prompt, layout=card.layout)

    def dismiss(self, action: str) -> PromptId:
        active = self._active
        if active is None:
            raise NoActivePrompt("no prompt is currently shown")

        allowed = active.card.action_names()
        if action not in allowed:
            raise UnknownAction(active.card.prompt, action, allowed)

        self._active = None
        self._dismissals.append(
            Dismissal(
                prompt_id=active.prompt_id,
                action=action,
                dismissed_at_utc=datetime.now(timezone.utc),
            )
        )
        log.info("presenter.dismissed", prompt=active.card.prompt, action=action)

        emit(self._bus, Resume.create(context=active.context))
        return active.prompt_id
