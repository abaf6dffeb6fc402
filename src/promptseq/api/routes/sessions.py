from __future__ import annotations

from datetime import datetime
from typing import Any

import structlog
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field, model_validator

from promptseq.core.config.settings import settings
from promptseq.core.errors import NoActivePrompt, SessionNotFound, UnknownAction
from promptseq.core.session.assembly import SessionHandle, SessionStatus, build_session
from promptseq.core.session.registry import SessionRegistry
from promptseq.presentation.catalog import DemoPrompt, PromptCard

log = structlog.get_logger()

router = APIRouter(tags=["sessions"])

# Process-local (single worker dev/demo).
_registry = SessionRegistry()


# =========================
# Schemas
# =========================

class CreateSessionRequest(BaseModel):
    availability: dict[str, bool] | None = Field(
        default=None,
        description="Per-prompt availability override (prompt name -> bool); defaults to settings",
    )

    @model_validator(mode="after")
    def _validate_prompt_names(self) -> "CreateSessionRequest":
        if self.availability is not None:
            known = {p.value for p in DemoPrompt}
            unknown = sorted(set(self.availability) - known)
            if unknown:
                raise ValueError(f"unknown prompts in availability: {', '.join(unknown)}")
        return self


class CreateSessionResponse(BaseModel):
    session_id: str
    status: SessionStatus


class DismissRequest(BaseModel):
    action: str = Field(..., min_length=1, description="One of the active prompt's actions")


class DismissResponse(BaseModel):
    session_id: str
    dismissed: str
    status: SessionStatus


class SessionDetailsResponse(BaseModel):
    session_id: str
    status: SessionStatus
    created_at_utc: datetime
    active_prompt: PromptCard | None = None
    available: list[str]
    presented: list[str]
    evaluation_cursor: int
    prompt_status: dict[str, str]
    recent_signals: list[dict[str, Any]]


class SessionsListResponse(BaseModel):
    sessions: list[SessionDetailsResponse]


# =========================
# Helpers
# =========================

def _name(prompt_id: Any) -> str:
    return str(getattr(prompt_id, "value", prompt_id))


def _details(handle: SessionHandle) -> SessionDetailsResponse:
    state = handle.engine.state
    active = handle.presenter.active
    return SessionDetailsResponse(
        session_id=handle.session_id,
        status=handle.status(),
        created_at_utc=handle.created_at_utc,
        active_prompt=active.card if active is not None else None,
        available=[_name(p) for p in state.available],
        presented=[_name(p) for p in state.presented()],
        evaluation_cursor=state.evaluation_cursor,
        prompt_status={_name(p): s.value for p, s in handle.engine.prompt_status().items()},
        recent_signals=handle.journal.recent(),
    )


def _lookup(session_id: str) -> SessionHandle:
    try:
        return _registry.get(session_id=session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="session not found")


# =========================
# Routes
# =========================
# async handlers: the engine schedules its drain loop on the running event loop.

@router.post("/sessions", response_model=CreateSessionResponse)
async def create_session(payload: CreateSessionRequest | None = None) -> CreateSessionResponse:
    availability = settings.demo_availability
    if payload is not None and payload.availability is not None:
        availability = payload.availability

    handle = build_session(
        availability=availability,
        journal_size=settings.signal_journal_size,
    )
    _registry.add(handle)

    handle.start()
    await handle.engine.wait_idle()

    log.info("session.created", session_id=handle.session_id, status=handle.status())
    return CreateSessionResponse(session_id=handle.session_id, status=handle.status())


@router.get("/sessions", response_model=SessionsListResponse)
async def list_sessions() -> SessionsListResponse:
    return SessionsListResponse(sessions=[_details(h) for h in _registry.list()])


@router.get("/sessions/{session_id}", response_model=SessionDetailsResponse)
async def get_session(session_id: str) -> SessionDetailsResponse:
    return _details(_lookup(session_id))


@router.post("/sessions/{session_id}/dismiss", response_model=DismissResponse)
async def dismiss_prompt(session_id: str, payload: DismissRequest) -> DismissResponse:
    handle = _lookup(session_id)

    try:
        dismissed = handle.presenter.dismiss(payload.action)
    except (NoActivePrompt, UnknownAction) as e:
        raise HTTPException(status_code=409, detail=str(e))

    await handle.engine.wait_idle()

    return DismissResponse(
        session_id=session_id,
        dismissed=_name(dismissed),
        status=handle.status(),
    )


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(session_id: str) -> None:
    try:
        _registry.remove(session_id=session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="session not found")
