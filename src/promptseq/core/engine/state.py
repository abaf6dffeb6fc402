from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from promptseq.core.engine.ports import PromptId


class PromptStatus(str, Enum):
    unchecked = "unchecked"
    unavailable = "unavailable"
    available = "available"
    presented = "presented"
    completed = "completed"


@dataclass(slots=True)
class EngineState:
    """
    Sequencing state for one session.

    - evaluation_cursor: index into `sequence`, everything before it has been checked
    - available: prompts confirmed showable, in sequence order
    - presentation_cursor: index into `available` of the next prompt to show
    - draining: a drain loop is currently running

    Guardrails:
      - cursors only move forward, through the methods below
      - available never repeats a prompt and never reorders the sequence
    """

    sequence: tuple[PromptId, ...]
    evaluation_cursor: int = 0
    available: list[PromptId] = field(default_factory=list)
    presentation_cursor: int = 0
    draining: bool = False
    started: bool = False
    statuses: dict[PromptId, PromptStatus] = field(default_factory=dict)

    @classmethod
    def for_sequence(cls, sequence: Sequence[PromptId]) -> "EngineState":
        seq = tuple(sequence)
        if len(set(seq)) != len(seq):
            raise ValueError("prompt sequence must not contain duplicates")
        return cls(sequence=seq, statuses={p: PromptStatus.unchecked for p in seq})

    @property
    def evaluation_exhausted(self) -> bool:
        return self.evaluation_cursor >= len(self.sequence)

    @property
    def presentation_exhausted(self) -> bool:
        return self.presentation_cursor >= len(self.available)

    def peek_unchecked(self) -> PromptId:
        if self.evaluation_exhausted:
            raise RuntimeError("no unchecked prompts left")
        return self.sequence[self.evaluation_cursor]

    def record_check(self, prompt_id: PromptId, *, available: bool) -> None:
        """
        Record the availability answer for the prompt under the evaluation cursor
        and move the cursor past it.
        """
        if self.peek_unchecked() != prompt_id:
            raise RuntimeError(f"prompt {prompt_id!r} is not under the evaluation cursor")

        self.evaluation_cursor += 1
        if not available:
            self.statuses[prompt_id] = PromptStatus.unavailable
            return

        if prompt_id in self.available:
            raise RuntimeError(f"prompt {prompt_id!r} already in available list")
        self.available.append(prompt_id)
        self.statuses[prompt_id] = PromptStatus.available

    def complete_current(self) -> PromptId | None:
        """
        Mark the most recently presented prompt as completed (its Resume arrived).
        """
        if self.presentation_cursor == 0:
            return None
        prompt_id = self.available[self.presentation_cursor - 1]
        if self.statuses.get(prompt_id) is PromptStatus.presented:
            self.statuses[prompt_id] = PromptStatus.completed
        return prompt_id

    def take_next(self) -> PromptId:
        if self.presentation_exhausted:
            raise RuntimeError("no available prompt left to present")
        prompt_id = self.available[self.presentation_cursor]
        self.presentation_cursor += 1
        self.statuses[prompt_id] = PromptStatus.presented
        return prompt_id

    def presented(self) -> list[PromptId]:
        return list(self.available[: self.presentation_cursor])
