from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator


@dataclass
class AuditEntry:
    run_id: str
    operation: str
    item_index: int
    status: str
    metadata: dict[str, Any] = field(default_factory=dict)
    at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class JsonlAuditLogger:
    """One JSON line per processed item, appended to a local file."""

    def __init__(self, path: str) -> None:
        self.path = Path(path).expanduser().resolve()
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def log(
        self,
        *,
        run_id: str,
        operation: str,
        item_index: int,
        status: str,
        metadata: dict[str, Any],
    ) -> AuditEntry:
        entry = AuditEntry(
            run_id=run_id,
            operation=operation,
            item_index=item_index,
            status=status,
            metadata=metadata,
        )
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(entry), ensure_ascii=True, default=str) + "\n")
        return entry

    def _iter_entries(self) -> Iterator[AuditEntry]:
        if not self.path.exists():
            return
        with self.path.open(encoding="utf-8") as handle:
            for line in handle:
                if line.strip():
                    yield AuditEntry(**json.loads(line))

    def read_entries(
        self,
        *,
        operation: str | None = None,
        run_id: str | None = None,
        status: str | None = None,
    ) -> list[AuditEntry]:
        return [
            entry
            for entry in self._iter_entries()
            if (operation is None or entry.operation == operation)
            and (run_id is None or entry.run_id == run_id)
            and (status is None or entry.status == status)
        ]
