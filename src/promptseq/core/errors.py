from __future__ import annotations


class SequencingError(Exception):
    """
    Base class for caller-visible sequencing errors.

    None of these are fatal: the engine keeps processing signals after any of them.
    """


class SessionAlreadyStarted(SequencingError):
    """
    start() was called on an engine that already started its sequence.
    """

    def __init__(self, session_id: str) -> None:
        super().__init__(f"session already started: {session_id}")
        self.session_id = session_id


class SessionNotFound(SequencingError):
    def __init__(self, session_id: str) -> None:
        super().__init__(f"session not found: {session_id}")
        self.session_id = session_id


class NoActivePrompt(SequencingError):
    """
    dismiss() was called while no prompt is on screen.
    """


class UnknownAction(SequencingError):
    def __init__(self, prompt: str, action: str, allowed: tuple[str, ...]) -> None:
        super().__init__(f"action {action!r} is not offered by {prompt} (allowed: {', '.join(allowed)})")
        self.prompt = prompt
        self.action = action
        self.allowed = allowed
