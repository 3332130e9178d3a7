from __future__ import annotations

import asyncio
import json
import time
from typing import Any

import httpx

from pdf4me_connector.config import Pdf4meSettings, PollPolicy
from pdf4me_connector.errors import (
    JobCancelledError,
    NetworkError,
    PollTimeoutError,
    ProtocolError,
    RequestError,
)
from pdf4me_connector.hooks.observability import EventLogger

from .models import (
    JobOutcome,
    JobPhase,
    JobTrace,
    PollKind,
    PollOutcome,
    SubmissionKind,
    SubmissionResult,
    classify_poll,
    classify_submission,
    extract_error_detail,
)
from .session import open_client
from .uploader import BlobUploader

JOB_NOT_FOUND_DETAIL = "processing job not found or expired"


class AsyncJobClient:
    """
    Submits document jobs and waits for their result.
    A 200 on submit is the artifact itself; a 202 carries a Location to poll
    until the server answers 200 or fails. Nothing is shared between calls.
    """

    def __init__(
        self,
        settings: Pdf4meSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: EventLogger | None = None,
        uploader: BlobUploader | None = None,
    ) -> None:
        self.settings = settings
        self.transport = transport
        self.logger = logger or EventLogger()
        self.uploader = uploader or BlobUploader(settings, transport=transport, logger=self.logger)

    async def submit(self, path: str, body: dict[str, Any]) -> SubmissionResult:
        async with open_client(self.settings, self.transport) as client:
            return await self._submit(client, path, body)

    async def poll(self, location: str, poll_policy: PollPolicy | None = None) -> PollOutcome:
        policy = poll_policy or self.settings.poll
        async with open_client(self.settings, self.transport) as client:
            return await self._poll(client, location, policy)

    async def upload_blob(self, buffer: bytes, file_name: str) -> str:
        return await self.uploader.upload(buffer, file_name)

    async def submit_and_wait(
        self,
        path: str,
        body: dict[str, Any],
        *,
        cancel_event: asyncio.Event | None = None,
        poll_policy: PollPolicy | None = None,
    ) -> bytes:
        outcome = await self.run_job(path, body, cancel_event=cancel_event, poll_policy=poll_policy)
        return outcome.content

    async def run_job(
        self,
        path: str,
        body: dict[str, Any],
        *,
        cancel_event: asyncio.Event | None = None,
        poll_policy: PollPolicy | None = None,
    ) -> JobOutcome:
        policy = poll_policy or self.settings.poll
        started = time.monotonic()
        trace = JobTrace(path=path)
        if cancel_event is not None and cancel_event.is_set():
            self._advance(trace, JobPhase.CANCELED, "canceled before submit", attempts=0)
            raise JobCancelledError(0)
        self.logger.on_job_transition(path, JobPhase.SUBMITTED.value)

        async with open_client(self.settings, self.transport) as client:
            submission = await self._submit(client, path, body)

            if submission.kind == SubmissionKind.IMMEDIATE:
                if not submission.content:
                    self._advance(trace, JobPhase.FAILED, "empty body on immediate result")
                    raise ProtocolError(f"empty response body from {path}")
                self._advance(trace, JobPhase.IMMEDIATE_DONE, "result returned on submit")
                return JobOutcome(
                    content=submission.content,
                    poll_calls=0,
                    pending_observations=0,
                    elapsed_seconds=time.monotonic() - started,
                    trace=trace,
                )

            if submission.kind == SubmissionKind.FAILED:
                self._advance(trace, JobPhase.FAILED, f"submit returned HTTP {submission.status_code}")
                raise RequestError(
                    submission.status_code,
                    submission.body,
                    extract_error_detail(submission.body),
                )

            location = submission.poll_location
            if not location:
                self._advance(trace, JobPhase.FAILED, "202 without Location header")
                raise ProtocolError(f"missing Location header in 202 response from {path}")
            self._advance(trace, JobPhase.AWAITING_POLL, "job accepted", location=location)

            attempts = 0
            pending = 0
            while True:
                if cancel_event is not None and cancel_event.is_set():
                    self._advance(trace, JobPhase.CANCELED, "canceled before poll", attempts=attempts)
                    raise JobCancelledError(attempts)

                attempts += 1
                outcome = await self._poll(client, location, policy)

                if outcome.kind == PollKind.DONE:
                    if not outcome.content:
                        self._advance(trace, JobPhase.FAILED, "empty body on poll result", attempts=attempts)
                        raise ProtocolError(f"empty response body from {location}")
                    self._advance(trace, JobPhase.DONE, "result ready", attempts=attempts)
                    return JobOutcome(
                        content=outcome.content,
                        poll_calls=attempts,
                        pending_observations=pending,
                        elapsed_seconds=time.monotonic() - started,
                        trace=trace,
                    )

                if outcome.kind == PollKind.FAILED:
                    detail = extract_error_detail(outcome.body)
                    if outcome.status_code == 404 and not detail:
                        detail = JOB_NOT_FOUND_DETAIL
                    self._advance(
                        trace,
                        JobPhase.FAILED,
                        f"poll returned HTTP {outcome.status_code}",
                        attempts=attempts,
                    )
                    raise RequestError(outcome.status_code, outcome.body, detail)

                pending += 1
                delay = policy.delay_for_attempt(attempts)
                elapsed = time.monotonic() - started
                if attempts >= policy.max_attempts or elapsed + delay > policy.max_elapsed_seconds:
                    self._advance(trace, JobPhase.TIMED_OUT, "poll bound exceeded", attempts=attempts)
                    raise PollTimeoutError(attempts, elapsed)
                self._advance(trace, JobPhase.AWAITING_POLL, "still processing", attempts=attempts)

                if await self._wait(delay, cancel_event):
                    self._advance(trace, JobPhase.CANCELED, "canceled while waiting", attempts=attempts)
                    raise JobCancelledError(attempts)

    async def _submit(
        self,
        client: httpx.AsyncClient,
        path: str,
        body: dict[str, Any],
    ) -> SubmissionResult:
        try:
            response = await client.post(
                path,
                content=json.dumps(body, ensure_ascii=True).encode("utf-8"),
                headers={"Content-Type": "application/json"},
            )
        except httpx.TransportError as exc:
            self.logger.on_http_call("POST", path, None, "submit_network_error")
            raise NetworkError(f"job submission to {path} failed: {exc}") from exc
        self.logger.on_http_call("POST", path, response.status_code, "submit")
        return classify_submission(response)

    async def _poll(
        self,
        client: httpx.AsyncClient,
        location: str,
        policy: PollPolicy,
    ) -> PollOutcome:
        try:
            response = await client.request(policy.poll_method, location)
        except httpx.TransportError as exc:
            self.logger.on_http_call(policy.poll_method, location, None, "poll_network_error")
            raise NetworkError(f"polling {location} failed: {exc}") from exc
        self.logger.on_http_call(policy.poll_method, location, response.status_code, "poll")
        return classify_poll(response)

    @staticmethod
    async def _wait(delay: float, cancel_event: asyncio.Event | None) -> bool:
        if cancel_event is None:
            await asyncio.sleep(delay)
            return False
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return False
        return True

    def _advance(self, trace: JobTrace, phase: JobPhase, message: str, **metadata: Any) -> None:
        trace.advance(phase, message)
        self.logger.on_job_transition(trace.path, phase.value, message=message, **metadata)


def decode_json_result(content: bytes) -> Any:
    try:
        return json.loads(content.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ProtocolError(f"expected a JSON result, got: {content[:100]!r}") from exc
