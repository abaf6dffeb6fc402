from __future__ import annotations

import asyncio
import inspect
from collections import deque
from typing import Any, Sequence, assert_never

import structlog

from promptseq.core.engine.ports import AvailabilityOracle, Presenter, PromptId
from promptseq.core.engine.router import EngineRouter, EventHandler
from promptseq.core.engine.state import EngineState, PromptStatus
from promptseq.core.errors import SessionAlreadyStarted
from promptseq.core.events.base import Event
from promptseq.core.events.bus import EventBus
from promptseq.core.events.signals import Evaluate, Resume, Signal, emit

log = structlog.get_logger()


class SequenceEngine:
    """
    Signal-driven prompt sequencer.

    Shows a fixed, ordered set of prompts one at a time, skipping the ones the
    oracle rejects. Two signals drive it:

      - prompt.evaluate: scan forward from the evaluation cursor until ONE
        available prompt is found (or the sequence runs out)
      - prompt.resume:   present the next available prompt, if any

    Signals are queued and processed by a single drain loop at a time. The
    presenter is not awaited; it reports back only through the bus.

    Must be driven from a running asyncio event loop (signals schedule the
    drain loop as a task).
    """

    def __init__(
        self,
        *,
        session_id: str,
        bus: EventBus,
        sequence: Sequence[PromptId],
        oracle: AvailabilityOracle,
        presenter: Presenter,
    ) -> None:
        self._session_id = session_id
        self._bus = bus
        self._oracle = oracle
        self._presenter = presenter
        self._state = EngineState.for_sequence(sequence)

        self._queue: deque[Signal] = deque()
        self._drains: set[asyncio.Task[None]] = set()
        self._presentations: set[asyncio.Task[Any]] = set()
        self._closed = False

        self._router = EngineRouter(bus=bus)
        self._wiring = self._router.register([self])

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def pending_signals(self) -> tuple[Signal, ...]:
        return tuple(self._queue)

    @property
    def is_complete(self) -> bool:
        return (
            self._state.started
            and self._state.presentation_exhausted
            and not self._queue
            and not self._state.draining
        )

    def subscriptions(self) -> Sequence[tuple[str, EventHandler]]:
        return [
            (Evaluate.event_type, self.on_signal),
            (Resume.event_type, self.on_signal),
        ]

    def prompt_status(self) -> dict[PromptId, PromptStatus]:
        return dict(self._state.statuses)

    # ---------------- Public contract ----------------

    def start(self, context: Any) -> None:
        # Fails before any state changes when there is no loop to drain on.
        asyncio.get_running_loop()

        if self._state.started:
            log.warning("engine.double_start", session_id=self._session_id)
            raise SessionAlreadyStarted(self._session_id)
        self._state.started = True

        log.info("engine.started", session_id=self._session_id, prompts=len(self._state.sequence))
        emit(self._bus, Evaluate.create(context=context))
        emit(self._bus, Resume.create(context=context))

    def on_signal(self, event: Event) -> None:
        if not isinstance(event, (Evaluate, Resume)) or self._closed:
            return

        loop = asyncio.get_running_loop()
        self._queue.append(event)

        task = loop.create_task(self.drain())
        self._drains.add(task)
        task.add_done_callback(self._on_drain_done)

    async def drain(self) -> None:
        if self._state.draining or self._closed:
            return
        self._state.draining = True

        try:
            # Handlers may append to the queue (presenter emits), so re-check every pass.
            while self._queue and not self._closed:
                signal = self._queue.popleft()
                match signal:
                    case Evaluate(context=context):
                        await self.handle_evaluate(context)
                    case Resume(context=context):
                        self.handle_resume(context)
                    case _:
                        assert_never(signal)
        finally:
            self._state.draining = False

    async def handle_evaluate(self, context: Any) -> None:
        state = self._state
        start_cursor = state.evaluation_cursor

        while not state.evaluation_exhausted:
            prompt_id = state.peek_unchecked()
            available = await self._ask_oracle(prompt_id, context)
            if self._closed:
                return
            state.record_check(prompt_id, available=available)
            if available:
                break

        log.debug(
            "engine.evaluated",
            session_id=self._session_id,
            from_cursor=start_cursor,
            to_cursor=state.evaluation_cursor,
            available=[str(p) for p in state.available],
        )

    def handle_resume(self, context: Any) -> None:
        if self._closed:
            return

        state = self._state
        state.complete_current()

        if state.presentation_exhausted:
            log.info(
                "engine.sequence_complete",
                session_id=self._session_id,
                presented=len(state.available),
            )
            return

        # Cursor moves before the call: a failing presenter loses its prompt, not the sequence.
        prompt_id = state.take_next()
        log.info(
            "engine.presenting",
            session_id=self._session_id,
            prompt=str(prompt_id),
            position=state.presentation_cursor,
        )

        try:
            result = self._presenter.present(prompt_id, context)
        except Exception:
            log.exception("engine.presenter_failed", session_id=self._session_id, prompt=str(prompt_id))
            return

        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._presentations.add(task)
            task.add_done_callback(lambda t, p=prompt_id: self._on_presentation_done(t, p))

    async def wait_idle(self) -> None:
        """
        Wait until every scheduled drain has finished.

        Presentations are not waited for; a prompt may stay on screen indefinitely.
        """
        while self._drains:
            # Failures are logged by _on_drain_done; cancelled drains belong to close().
            await asyncio.gather(*tuple(self._drains), return_exceptions=True)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        self._router.unregister(self._wiring)
        self._queue.clear()
        for task in (*self._drains, *self._presentations):
            task.cancel()
        log.info("engine.closed", session_id=self._session_id)

    # ---------------- Internals ----------------

    async def _ask_oracle(self, prompt_id: PromptId, context: Any) -> bool:
        try:
            answer = self._oracle.is_available(prompt_id, context)
            if inspect.isawaitable(answer):
                answer = await answer
        except Exception:
            # Fail closed: an oracle error means "not available", never a stalled scan.
            log.warning(
                "engine.oracle_failed",
                session_id=self._session_id,
                prompt=str(prompt_id),
                exc_info=True,
            )
            return False
        return bool(answer)

    def _on_drain_done(self, task: asyncio.Task[None]) -> None:
        self._drains.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error(
                "engine.drain_crashed",
                session_id=self._session_id,
                error_type=type(exc).__name__,
                error_message=str(exc),
            )

    def _on_presentation_done(self, task: asyncio.Task[Any], prompt_id: PromptId) -> None:
        self._presentations.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error(
                "engine.presenter_failed",
                session_id=self._session_id,
                prompt=str(prompt_id),
                error_type=type(exc).__name__,
                error_message=str(exc),
            )
