from __future__ import annotations

import argparse
import asyncio
import json
import mimetypes
import sys
from pathlib import Path
from typing import Any, Mapping

import httpx

from pdf4me_connector.api.client import AsyncJobClient
from pdf4me_connector.config import load_settings
from pdf4me_connector.errors import Pdf4meError
from pdf4me_connector.hooks.observability import EventLogger, HookEvent
from pdf4me_connector.node import Operation, Pdf4meNode, build_action_registry
from pdf4me_connector.runtime.audit import JsonlAuditLogger
from pdf4me_connector.runtime.host import BinaryData, Item, StaticExecutionContext


def _binary_property_name(position: int) -> str:
    return "data" if position == 0 else f"data{position}"


def _parse_param_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _parse_params(values: list[str] | None) -> dict[str, Any]:
    params: dict[str, Any] = {}
    for value in values or []:
        key, separator, raw = value.partition("=")
        if not separator or not key.strip():
            raise ValueError(f"invalid --param (expected key=value): {value}")
        params[key.strip()] = _parse_param_value(raw)
    return params


def _load_inputs(paths: list[str] | None) -> dict[str, BinaryData]:
    binaries: dict[str, BinaryData] = {}
    for position, raw_path in enumerate(paths or []):
        path = Path(raw_path).expanduser()
        if not path.is_file():
            raise ValueError(f"input file not found: {path}")
        mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        binaries[_binary_property_name(position)] = BinaryData(
            data=path.read_bytes(),
            file_name=path.name,
            mime_type=mime_type,
        )
    return binaries


def _write_outputs(results: list[Item], output_dir: Path) -> list[dict[str, Any]]:
    summary: list[dict[str, Any]] = []
    for item in results:
        written: dict[str, str] = {}
        for key, binary in item.binary.items():
            output_dir.mkdir(parents=True, exist_ok=True)
            target = output_dir / Path(binary.file_name).name
            target.write_bytes(binary.data)
            written[key] = str(target)
        record = dict(item.json)
        if written:
            record["writtenFiles"] = written
        summary.append(record)
    return summary


def _echo_event(event: HookEvent) -> None:
    print(event.describe(), file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run one PDF4me action against local files.")
    parser.add_argument(
        "--operation",
        help="operation display name or enum name, e.g. 'Compress PDF' or COMPRESS_PDF",
    )
    parser.add_argument(
        "--input",
        action="append",
        help="input file; repeat for multi-file operations (attached as data, data1, ...)",
    )
    parser.add_argument("--param", action="append", help="action parameter as key=value (JSON values allowed)")
    parser.add_argument("--output-dir", default=".", help="directory for binary results")
    parser.add_argument("--audit-log", default=None, help="append a JSONL audit line per item")
    parser.add_argument("--list-operations", action="store_true", help="print supported operations and exit")
    parser.add_argument("--verbose", action="store_true", help="echo HTTP calls and job phases to stderr")
    return parser


def run(
    argv: list[str] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.list_operations:
        for operation in Operation:
            print(operation.value)
        return 0
    if not args.operation:
        parser.error("--operation is required")

    try:
        settings = load_settings(environ)
        params = {"operation": args.operation, **_parse_params(args.param)}
        items = [Item(json={}, binary=_load_inputs(args.input))]
    except (Pdf4meError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    ctx = StaticExecutionContext(items, params)
    logger = EventLogger(sink=_echo_event if args.verbose else None)
    client = AsyncJobClient(settings, transport=transport, logger=logger)
    audit_logger = JsonlAuditLogger(args.audit_log) if args.audit_log else None
    node = Pdf4meNode(client, build_action_registry(), audit_logger=audit_logger)

    try:
        results = asyncio.run(node.execute(ctx))
    except Pdf4meError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    summary = _write_outputs(results, Path(args.output_dir).expanduser())
    print(json.dumps(summary, indent=2, ensure_ascii=False))
    return 0


def main() -> None:
    raise SystemExit(run())


if __name__ == "__main__":
    main()
