from __future__ import annotations

from typing import Any, Awaitable, Hashable, Protocol, TypeAlias

PromptId: TypeAlias = Hashable


class AvailabilityOracle(Protocol):
    """
    Decides whether a prompt may be shown right now.

    May be sync or async, and may answer differently between calls.
    Should resolve to False when the answer is indeterminate; the engine
    also treats a raise as False.
    """

    def is_available(self, prompt_id: PromptId, context: Any) -> bool | Awaitable[bool]:
        ...


class Presenter(Protocol):
    """
    Puts a prompt on screen.

    Obligations:
      - emit Evaluate(context) before rendering
      - emit exactly one Resume(context) when the user dismisses the prompt

    A returned awaitable is run as its own task; the engine never waits for it.
    """

    def present(self, prompt_id: PromptId, context: Any) -> None | Awaitable[None]:
        ...
