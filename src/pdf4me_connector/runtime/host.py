from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Protocol

from pdf4me_connector.errors import ValidationError

MISSING: Any = object()


@dataclass
class BinaryData:
    data: bytes
    file_name: str
    mime_type: str = "application/octet-stream"

    @property
    def file_size(self) -> int:
        return len(self.data)


@dataclass
class Item:
    json: dict[str, Any] = field(default_factory=dict)
    binary: dict[str, BinaryData] = field(default_factory=dict)


class ExecutionContext(Protocol):
    """What an action needs from the workflow host for one run."""

    continue_on_fail: bool
    cancel_event: asyncio.Event | None

    def get_input_items(self) -> list[Item]: ...

    def get_parameter(self, name: str, index: int, default: Any = MISSING) -> Any: ...

    def get_binary_buffer(self, index: int, property_name: str) -> BinaryData: ...


class StaticExecutionContext:
    def __init__(
        self,
        items: list[Item],
        parameters: dict[str, Any] | list[dict[str, Any]],
        *,
        continue_on_fail: bool = False,
        cancel_event: asyncio.Event | None = None,
    ) -> None:
        if isinstance(parameters, list) and len(parameters) != len(items):
            raise ValueError("per-item parameters must match the number of items")
        self.items = items
        self.parameters = parameters
        self.continue_on_fail = continue_on_fail
        self.cancel_event = cancel_event

    def get_input_items(self) -> list[Item]:
        return list(self.items)

    def get_parameter(self, name: str, index: int, default: Any = MISSING) -> Any:
        values = self.parameters[index] if isinstance(self.parameters, list) else self.parameters
        if name in values:
            return values[name]
        if default is MISSING:
            raise ValidationError(f"missing parameter '{name}' for item {index}")
        return default

    def get_binary_buffer(self, index: int, property_name: str) -> BinaryData:
        item = self.items[index]
        binary = item.binary.get(property_name)
        if binary is None:
            raise ValidationError(f"no binary data found in property '{property_name}'")
        return binary
