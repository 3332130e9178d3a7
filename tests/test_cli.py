import json
from pathlib import Path

import httpx
import pytest

from pdf4me_connector.cli.run_action import run
from pdf4me_connector.node import Operation

ENV = {"PDF4ME_API_KEY": "cli-key", "PDF4ME_BASE_URL": "https://api.test.local"}


def test_list_operations_prints_display_names(capsys: pytest.CaptureFixture[str]) -> None:
    assert run(["--list-operations"], environ={}) == 0

    lines = capsys.readouterr().out.splitlines()
    assert lines == [operation.value for operation in Operation]


def test_run_writes_binary_result(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "report.pdf"
    source.write_bytes(b"%PDF-1.7 report")
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.method == "POST":
            return httpx.Response(202, headers={"Location": "/status/1"})
        return httpx.Response(200, content=b"%PDF compressed")

    exit_code = run(
        [
            "--operation",
            "Compress PDF",
            "--input",
            str(source),
            "--param",
            "optimizeProfile=Print",
            "--output-dir",
            str(tmp_path / "out"),
            "--audit-log",
            str(tmp_path / "audit.jsonl"),
        ],
        environ=ENV,
        transport=httpx.MockTransport(handler),
    )

    assert exit_code == 0
    assert json.loads(seen[0].content)["optimizeProfile"] == "Print"
    assert seen[0].headers["Authorization"] == "Basic cli-key"
    assert (tmp_path / "out" / "compressed_report.pdf").read_bytes() == b"%PDF compressed"
    summary = json.loads(capsys.readouterr().out)
    assert summary[0]["writtenFiles"]["data"].endswith("compressed_report.pdf")
    assert (tmp_path / "audit.jsonl").read_text(encoding="utf-8").count("\n") == 1


def test_run_reports_missing_api_key(capsys: pytest.CaptureFixture[str]) -> None:
    assert run(["--operation", "Compress PDF"], environ={}) == 1
    assert "PDF4ME_API_KEY" in capsys.readouterr().err


def test_run_reports_request_failures(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "a.pdf"
    source.write_bytes(b"%PDF a")
    transport = httpx.MockTransport(lambda request: httpx.Response(500, text="server exploded"))

    exit_code = run(
        ["--operation", "ROTATE_DOCUMENT", "--input", str(source)],
        environ=ENV,
        transport=transport,
    )

    assert exit_code == 1
    assert "HTTP 500" in capsys.readouterr().err


def test_run_rejects_malformed_params(capsys: pytest.CaptureFixture[str]) -> None:
    assert run(["--operation", "Compress PDF", "--param", "novalue"], environ=ENV) == 1
    assert "key=value" in capsys.readouterr().err


def test_operation_is_required() -> None:
    with pytest.raises(SystemExit):
        run([], environ=ENV)


def test_verbose_echoes_masked_events(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "a.pdf"
    source.write_bytes(b"%PDF a")
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"%PDF out"))

    exit_code = run(
        ["--operation", "Compress PDF", "--input", str(source), "--output-dir", str(tmp_path), "--verbose"],
        environ=ENV,
        transport=transport,
    )

    err = capsys.readouterr().err
    assert exit_code == 0
    assert "http_call:submit" in err
    assert "job_transition:immediate_done" in err
    assert "cli-key" not in err
