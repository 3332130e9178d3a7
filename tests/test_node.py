import asyncio
from pathlib import Path

import httpx
import pytest

from pdf4me_connector.api.client import AsyncJobClient
from pdf4me_connector.config import Pdf4meSettings
from pdf4me_connector.errors import RequestError, ValidationError
from pdf4me_connector.node import Operation, Pdf4meNode, build_action_registry, resolve_operation
from pdf4me_connector.runtime.audit import JsonlAuditLogger
from pdf4me_connector.runtime.host import BinaryData, Item, StaticExecutionContext


def _pdf(name: str) -> Item:
    return Item(json={"name": name}, binary={"data": BinaryData(data=b"%PDF " + name.encode(), file_name=name)})


def _node(settings: Pdf4meSettings, handler, audit_path: Path | None = None) -> Pdf4meNode:
    client = AsyncJobClient(settings, transport=httpx.MockTransport(handler))
    audit_logger = JsonlAuditLogger(str(audit_path)) if audit_path else None
    return Pdf4meNode(client, build_action_registry(), audit_logger=audit_logger)


def test_registry_covers_every_operation() -> None:
    assert set(build_action_registry()) == set(Operation)


def test_operations_resolve_by_display_name_or_enum_name() -> None:
    assert resolve_operation("Compress PDF") == Operation.COMPRESS_PDF
    assert resolve_operation("SPLIT_PDF") == Operation.SPLIT_PDF
    assert resolve_operation(Operation.URL_TO_PDF) == Operation.URL_TO_PDF
    with pytest.raises(ValidationError):
        resolve_operation("Shred PDF")


def test_items_are_processed_in_order(fast_settings: Pdf4meSettings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"%PDF rotated")

    node = _node(fast_settings, handler)
    ctx = StaticExecutionContext(
        [_pdf("a.pdf"), _pdf("b.pdf")],
        [
            {"operation": "Rotate Document", "rotationType": "UpsideDown"},
            {"operation": "Rotate Document"},
        ],
    )

    results = asyncio.run(node.execute(ctx))

    assert [item.json["fileName"] for item in results] == ["rotated_a.pdf", "rotated_b.pdf"]
    assert [item.json["rotationType"] for item in results] == ["UpsideDown", "Clockwise"]


def test_unknown_operation_fails_without_network(fast_settings: Pdf4meSettings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    node = _node(fast_settings, handler)
    ctx = StaticExecutionContext([_pdf("a.pdf")], {"operation": "Shred PDF"})

    with pytest.raises(ValidationError):
        asyncio.run(node.execute(ctx))


def test_continue_on_fail_records_error_and_keeps_going(fast_settings: Pdf4meSettings, tmp_path: Path) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"%PDF small")

    audit_path = tmp_path / "audit" / "runs.jsonl"
    node = _node(fast_settings, handler, audit_path)
    ctx = StaticExecutionContext(
        [Item(json={"name": "empty"}), _pdf("b.pdf")],
        {"operation": Operation.COMPRESS_PDF},
        continue_on_fail=True,
    )

    results = asyncio.run(node.execute(ctx))

    assert len(results) == 2
    assert results[0].json["name"] == "empty"
    assert "no binary data" in results[0].json["error"]
    assert results[1].json["success"] is True

    entries = JsonlAuditLogger(str(audit_path)).read_entries()
    assert [(entry.item_index, entry.status) for entry in entries] == [(0, "failed"), (1, "succeeded")]
    assert entries[0].operation == "Compress PDF"
    assert entries[0].metadata["error_type"] == "ValidationError"
    assert entries[0].run_id == entries[1].run_id


def test_request_failure_propagates_without_continue_on_fail(
    fast_settings: Pdf4meSettings, tmp_path: Path
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "invalid api key"})

    audit_path = tmp_path / "runs.jsonl"
    node = _node(fast_settings, handler, audit_path)
    ctx = StaticExecutionContext([_pdf("a.pdf")], {"operation": "Compress PDF"})

    with pytest.raises(RequestError) as exc_info:
        asyncio.run(node.execute(ctx))

    assert exc_info.value.status_code == 401
    entries = JsonlAuditLogger(str(audit_path)).read_entries(operation="Compress PDF", status="failed")
    assert entries[0].status == "failed"
    assert entries[0].metadata["status_code"] == 401
