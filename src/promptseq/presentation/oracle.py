from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

import structlog

from promptseq.core.engine.ports import PromptId

log = structlog.get_logger()


@dataclass(slots=True)
class StaticAvailabilityOracle:
    """
    Availability from a fixed mapping (demo / tests).

    Lookup tries the prompt itself, then its `.value` (so enum prompts can be
    configured with plain strings). Unknown prompts get `default`.
    """

    answers: Mapping[Any, bool] = field(default_factory=dict)
    default: bool = False

    def is_available(self, prompt_id: PromptId, context: Any) -> bool:
        if prompt_id in self.answers:
            answer = self.answers[prompt_id]
        else:
            answer = self.answers.get(getattr(prompt_id, "value", prompt_id), self.default)
        log.debug("oracle.answered", prompt=str(prompt_id), available=bool(answer))
        return bool(answer)
