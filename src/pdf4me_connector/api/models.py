from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import httpx

from pdf4me_connector.errors import Pdf4meError


class JobPhase(str, Enum):
    SUBMITTED = "submitted"
    IMMEDIATE_DONE = "immediate_done"
    AWAITING_POLL = "awaiting_poll"
    DONE = "done"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    CANCELED = "canceled"


ALLOWED_PHASE_TRANSITIONS: dict[JobPhase, set[JobPhase]] = {
    JobPhase.SUBMITTED: {
        JobPhase.IMMEDIATE_DONE,
        JobPhase.AWAITING_POLL,
        JobPhase.FAILED,
        JobPhase.CANCELED,
    },
    JobPhase.AWAITING_POLL: {
        JobPhase.AWAITING_POLL,
        JobPhase.DONE,
        JobPhase.FAILED,
        JobPhase.TIMED_OUT,
        JobPhase.CANCELED,
    },
    JobPhase.IMMEDIATE_DONE: set(),
    JobPhase.DONE: set(),
    JobPhase.FAILED: set(),
    JobPhase.TIMED_OUT: set(),
    JobPhase.CANCELED: set(),
}

TERMINAL_PHASES = {phase for phase, targets in ALLOWED_PHASE_TRANSITIONS.items() if not targets}


class InvalidPhaseTransitionError(Pdf4meError):
    pass


@dataclass
class PhaseEvent:
    at: datetime
    phase: JobPhase
    message: str


@dataclass
class JobTrace:
    path: str
    history: list[PhaseEvent] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.history:
            self.history.append(PhaseEvent(datetime.now(timezone.utc), JobPhase.SUBMITTED, "job submitted"))

    @property
    def current_phase(self) -> JobPhase:
        return self.history[-1].phase

    @property
    def is_terminal(self) -> bool:
        return self.current_phase in TERMINAL_PHASES

    def advance(self, phase: JobPhase, message: str) -> None:
        current = self.current_phase
        if phase not in ALLOWED_PHASE_TRANSITIONS[current]:
            raise InvalidPhaseTransitionError(
                f"invalid job phase transition: {current.value} -> {phase.value}"
            )
        self.history.append(PhaseEvent(datetime.now(timezone.utc), phase, message))


class SubmissionKind(str, Enum):
    IMMEDIATE = "immediate"
    ACCEPTED = "accepted"
    FAILED = "failed"


@dataclass
class SubmissionResult:
    kind: SubmissionKind
    status_code: int
    content: bytes = b""
    poll_location: str | None = None
    body: str = ""


class PollKind(str, Enum):
    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"


@dataclass
class PollOutcome:
    kind: PollKind
    status_code: int
    content: bytes = b""
    body: str = ""


@dataclass
class JobOutcome:
    content: bytes
    poll_calls: int
    pending_observations: int
    elapsed_seconds: float
    trace: JobTrace


def classify_submission(response: httpx.Response) -> SubmissionResult:
    if response.status_code == 200:
        return SubmissionResult(SubmissionKind.IMMEDIATE, 200, content=response.content)
    if response.status_code == 202:
        return SubmissionResult(
            SubmissionKind.ACCEPTED,
            202,
            poll_location=response.headers.get("location") or None,
        )
    return SubmissionResult(SubmissionKind.FAILED, response.status_code, body=response.text)


def classify_poll(response: httpx.Response) -> PollOutcome:
    if response.status_code == 200:
        return PollOutcome(PollKind.DONE, 200, content=response.content)
    if response.status_code == 202:
        return PollOutcome(PollKind.PENDING, 202)
    return PollOutcome(PollKind.FAILED, response.status_code, body=response.text)


def extract_error_detail(body: str) -> str | None:
    try:
        payload: Any = json.loads(body)
    except (json.JSONDecodeError, TypeError):
        return None
    if not isinstance(payload, dict):
        return None
    for key in ("message", "error", "detail", "Message", "title"):
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None
