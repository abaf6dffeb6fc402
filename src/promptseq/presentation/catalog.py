from __future__ import annotations

from enum import Enum
from typing import Literal, assert_never

from pydantic import BaseModel, Field


class DemoPrompt(str, Enum):
    """
    The demo prompt set. Declaration order is presentation priority.
    """

    popup_a = "popup_a"
    popup_b = "popup_b"
    popup_c = "popup_c"
    popup_d = "popup_d"


DEMO_SEQUENCE: tuple[DemoPrompt, ...] = tuple(DemoPrompt)


class PromptAction(BaseModel):
    """
    A button offered by a prompt. Every action dismisses the prompt.
    """

    action: str
    label: str
    emphasis: Literal["text", "elevated"] = "text"


class PromptCard(BaseModel):
    """
    Render-agnostic description of a prompt, handed to whatever draws it.
    """

    prompt: str
    layout: Literal["alert", "confirm", "custom", "styled"]
    title: str
    body: str
    icon: str | None = None
    note: str | None = Field(default=None, description="Secondary highlighted message")
    # Prompts are interruptive: tapping outside never dismisses them.
    barrier_dismissible: bool = False
    actions: list[PromptAction]

    def action_names(self) -> tuple[str, ...]:
        return tuple(a.action for a in self.actions)


def card_for(prompt: DemoPrompt) -> PromptCard:
    match prompt:
        case DemoPrompt.popup_a:
            return PromptCard(
                prompt=prompt.value,
                layout="alert",
                title="Popup A",
                body="This is Popup A - A simple alert dialog.",
                actions=[PromptAction(action="ok", label="OK")],
            )
        case DemoPrompt.popup_b:
            return PromptCard(
                prompt=prompt.value,
                layout="confirm",
                title="Popup B",
                body="This is Popup B - A confirmation dialog with two options.",
                icon="question_mark",
                actions=[
                    PromptAction(action="cancel", label="Cancel"),
                    PromptAction(action="confirm", label="Confirm", emphasis="elevated"),
                ],
            )
        case DemoPrompt.popup_c:
            return PromptCard(
                prompt=prompt.value,
                layout="custom",
                title="Popup C",
                body="This is Popup C - A custom dialog with icon and styled content.",
                icon="star",
                actions=[
                    PromptAction(action="skip", label="Skip"),
                    PromptAction(action="continue", label="Continue", emphasis="elevated"),
                ],
            )
        case DemoPrompt.popup_d:
            return PromptCard(
                prompt=prompt.value,
                layout="styled",
                title="Popup D",
                body="This is Popup D - A styled dialog with rounded corners.",
                icon="info_outline",
                note="Feature completed successfully!",
                actions=[PromptAction(action="close", label="Close")],
            )
        case _:
            assert_never(prompt)
