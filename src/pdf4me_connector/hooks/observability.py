from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

from .security import mask_sensitive_text

DEFAULT_MAX_EVENTS = 1000


@dataclass
class HookEvent:
    at: datetime
    kind: str
    name: str
    payload: dict[str, Any] = field(default_factory=dict)

    def describe(self) -> str:
        details = " ".join(f"{key}={value}" for key, value in self.payload.items() if value is not None)
        return f"{self.at.isoformat()} {self.kind}:{self.name} {details}".rstrip()


EventSink = Callable[[HookEvent], None]


class EventLogger:
    """In-memory event trail for HTTP calls, job phases and warnings.

    String payload values are masked before they are stored or forwarded, so
    API keys never reach the buffer or the sink.
    """

    def __init__(self, *, max_events: int = DEFAULT_MAX_EVENTS, sink: EventSink | None = None) -> None:
        self._events: deque[HookEvent] = deque(maxlen=max_events)
        self.sink = sink

    def record(self, kind: str, name: str, payload: dict[str, Any] | None = None) -> HookEvent:
        event = HookEvent(
            at=datetime.now(timezone.utc),
            kind=kind,
            name=name,
            payload={
                key: mask_sensitive_text(value) if isinstance(value, str) else value
                for key, value in (payload or {}).items()
            },
        )
        self._events.append(event)
        if self.sink is not None:
            self.sink(event)
        return event

    def on_http_call(self, method: str, url: str, status_code: int | None, phase: str) -> None:
        self.record("http_call", phase, {"method": method, "url": url, "status_code": status_code})

    def on_job_transition(self, path: str, phase: str, **metadata: Any) -> None:
        self.record("job_transition", phase, {"path": path, **metadata})

    def on_warning(self, source: str, message: str) -> None:
        self.record("warning", source, {"message": message})

    def list_events(self, kind: str | None = None) -> list[HookEvent]:
        return [event for event in self._events if kind is None or event.kind == kind]
