from __future__ import annotations

import pytest

from promptseq.core.errors import NoActivePrompt, UnknownAction
from promptseq.core.events.base import Event
from promptseq.core.events.bus import EventBus
from promptseq.presentation.catalog import DEMO_SEQUENCE, DemoPrompt, card_for
from promptseq.presentation.oracle import StaticAvailabilityOracle
from promptseq.presentation.presenter import InteractivePresenter


def test_demo_sequence_order() -> None:
    assert DEMO_SEQUENCE == (
        DemoPrompt.popup_a,
        DemoPrompt.popup_b,
        DemoPrompt.popup_c,
        DemoPrompt.popup_d,
    )


@pytest.mark.parametrize("prompt", list(DemoPrompt))
def test_every_demo_prompt_has_a_card(prompt: DemoPrompt) -> None:
    card = card_for(prompt)

    assert card.prompt == prompt.value
    assert card.actions
    assert card.barrier_dismissible is False


def test_card_contents() -> None:
    assert card_for(DemoPrompt.popup_b).action_names() == ("cancel", "confirm")
    assert card_for(DemoPrompt.popup_d).note == "Feature completed successfully!"


def test_static_oracle_matches_enum_by_value_and_defaults_closed() -> None:
    oracle = StaticAvailabilityOracle(answers={"popup_a": True, "popup_b": False})

    assert oracle.is_available(DemoPrompt.popup_a, None) is True
    assert oracle.is_available(DemoPrompt.popup_b, None) is False
    assert oracle.is_available(DemoPrompt.popup_c, None) is False
    assert StaticAvailabilityOracle(default=True).is_available("anything", None) is True


class SignalCapture:
    def __init__(self, bus: EventBus, presenter: InteractivePresenter) -> None:
        self.presenter = presenter
        self.events: list[tuple[str, object]] = []
        self.active_during_evaluate: list[object] = []
        bus.subscribe(event_type="prompt.evaluate", handler=self._on_evaluate)
        bus.subscribe(event_type="prompt.resume", handler=self._on_resume)

    def _on_evaluate(self, e: Event) -> None:
        self.events.append((e.event_type, e.context))
        self.active_during_evaluate.append(self.presenter.active)

    def _on_resume(self, e: Event) -> None:
        self.events.append((e.event_type, e.context))


def test_present_emits_evaluate_before_showing() -> None:
    bus = EventBus()
    presenter = InteractivePresenter(bus=bus, cards=card_for)
    cap = SignalCapture(bus, presenter)

    presenter.present(DemoPrompt.popup_a, "session-1")

    assert cap.events == [("prompt.evaluate", "session-1")]
    assert cap.active_during_evaluate == [None]
    assert presenter.active is not None
    assert presenter.active.card.title == "Popup A"


def test_dismiss_emits_exactly_one_resume() -> None:
    bus = EventBus()
    presenter = InteractivePresenter(bus=bus, cards=card_for)
    cap = SignalCapture(bus, presenter)
    presenter.present(DemoPrompt.popup_c, "session-1")

    with pytest.raises(UnknownAction):
        presenter.dismiss("ok")
    assert presenter.active is not None

    assert presenter.dismiss("skip") == DemoPrompt.popup_c
    assert presenter.active is None
    assert cap.events[-1] == ("prompt.resume", "session-1")
    assert [d.action for d in presenter.dismissals] == ["skip"]

    with pytest.raises(NoActivePrompt):
        presenter.dismiss("skip")
    assert [et for et, _ in cap.events].count("prompt.resume") == 1


def test_present_refuses_second_prompt_while_one_is_shown() -> None:
    bus = EventBus()
    presenter = InteractivePresenter(bus=bus, cards=card_for)
    presenter.present(DemoPrompt.popup_a, None)

    with pytest.raises(RuntimeError):
        presenter.present(DemoPrompt.popup_c, None)
