# SPDX-License-Identifier: Apache-2.0
"""Tests for the document job state machine."""

from __future__ import annotations

from typing import Any

import pytest

from deepl_client.document import DocumentJob, JobState, next_poll_delay
from deepl_client.errors import AuthorizationError, DocumentTranslationError
from deepl_client.models import DocumentHandle, DocumentState, DocumentStatus

HANDLE = DocumentHandle(document_id="doc-1", document_key="key-1")


class ScriptedApi:
    """Document API returning scripted statuses in order."""

    def __init__(
        self,
        states: list[DocumentStatus],
        upload_error: Exception | None = None,
    ) -> None:
        self.states = states
        self.upload_error = upload_error
        self.calls: list[str] = []

    async def upload_document(self, content: bytes, **kwargs: Any) -> DocumentHandle:
        self.calls.append("upload")
        if self.upload_error is not None:
            raise self.upload_error
        return HANDLE

    async def get_document_status(self, handle: DocumentHandle) -> DocumentStatus:
        self.calls.append("status")
        return self.states[min(self.calls.count("status") - 1, len(self.states) - 1)]

    async def download_document(self, handle: DocumentHandle) -> bytes:
        self.calls.append("download")
        return b"result"


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def status(state: DocumentState, **kwargs: Any) -> DocumentStatus:
    return DocumentStatus(document_id="doc-1", state=state, **kwargs)


class TestNextPollDelay:
    def test_without_estimate(self) -> None:
        assert next_poll_delay(status(DocumentState.QUEUED), 2.0, 60.0) == 2.0

    def test_half_of_estimate(self) -> None:
        s = status(DocumentState.TRANSLATING, seconds_remaining=20)
        assert next_poll_delay(s, 1.0, 60.0) == 10.0

    def test_clamped(self) -> None:
        long = status(DocumentState.TRANSLATING, seconds_remaining=1000)
        short = status(DocumentState.TRANSLATING, seconds_remaining=0)
        assert next_poll_delay(long, 1.0, 60.0) == 60.0
        assert next_poll_delay(short, 1.0, 60.0) == 1.0


class TestDocumentJob:
    """Tests for DocumentJob."""

    @pytest.mark.asyncio
    async def test_run_to_done(self) -> None:
        api = ScriptedApi(
            [
                status(DocumentState.QUEUED),
                status(DocumentState.TRANSLATING, seconds_remaining=4),
                status(DocumentState.DONE, billed_characters=6),
            ]
        )
        sleep = RecordingSleep()
        job = DocumentJob(api, poll_interval=1.0, max_poll_interval=60.0, sleep=sleep)

        result = await job.run(b"input", filename="a.txt", source_lang=None, target_lang="de")

        assert result == b"result"
        assert job.state == JobState.DONE
        assert job.handle == HANDLE
        assert api.calls == ["upload", "status", "status", "status", "download"]
        assert sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_error_state_skips_download(self) -> None:
        api = ScriptedApi(
            [
                status(DocumentState.TRANSLATING),
                status(DocumentState.ERROR, error_message="Unsupported file"),
            ]
        )
        job = DocumentJob(api, sleep=RecordingSleep())

        with pytest.raises(DocumentTranslationError) as exc_info:
            await job.run(b"input", filename="a.txt", source_lang=None, target_lang="de")

        assert "while translating document: Unsupported file" in str(exc_info.value)
        assert exc_info.value.document_handle == HANDLE
        assert job.state == JobState.ERROR
        assert "download" not in api.calls

    @pytest.mark.asyncio
    async def test_submit_failure_skips_polling(self) -> None:
        api = ScriptedApi([], upload_error=AuthorizationError("bad key"))
        job = DocumentJob(api, sleep=RecordingSleep())

        with pytest.raises(AuthorizationError):
            await job.run(b"input", filename="a.txt", source_lang=None, target_lang="de")

        assert api.calls == ["upload"]
        assert job.state == JobState.PENDING
        assert job.handle is None

    @pytest.mark.asyncio
    async def test_terminal_state_is_final(self) -> None:
        """A status arriving after a terminal state does not change it."""
        api = ScriptedApi([status(DocumentState.DONE), status(DocumentState.TRANSLATING)])
        job = DocumentJob.resume(api, HANDLE, sleep=RecordingSleep())

        await job.poll()
        await job.poll()

        assert job.state == JobState.DONE
        assert job.status is not None
        assert job.status.state == DocumentState.DONE

    @pytest.mark.asyncio
    async def test_progress_updates_recorded(self) -> None:
        """Repeated translating statuses refresh the recorded estimate."""
        api = ScriptedApi(
            [
                status(DocumentState.TRANSLATING, seconds_remaining=10),
                status(DocumentState.TRANSLATING, seconds_remaining=3),
            ]
        )
        job = DocumentJob.resume(api, HANDLE, sleep=RecordingSleep())

        await job.poll()
        await job.poll()

        assert job.status is not None
        assert job.status.seconds_remaining == 3

    @pytest.mark.asyncio
    async def test_no_backwards_transition(self) -> None:
        api = ScriptedApi(
            [status(DocumentState.TRANSLATING), status(DocumentState.QUEUED)]
        )
        job = DocumentJob.resume(api, HANDLE, sleep=RecordingSleep())

        await job.poll()
        await job.poll()

        assert job.state == JobState.TRANSLATING
        assert job.status is not None
        assert job.status.state == DocumentState.TRANSLATING

    @pytest.mark.asyncio
    async def test_download_before_terminal(self) -> None:
        job = DocumentJob.resume(ScriptedApi([]), HANDLE)
        with pytest.raises(RuntimeError):
            await job.download()

    @pytest.mark.asyncio
    async def test_submit_twice(self) -> None:
        api = ScriptedApi([status(DocumentState.DONE)])
        job = DocumentJob(api)
        await job.submit(b"x", filename="a.txt", source_lang=None, target_lang="de")
        with pytest.raises(RuntimeError):
            await job.submit(b"x", filename="a.txt", source_lang=None, target_lang="de")

    @pytest.mark.asyncio
    async def test_poll_without_submit(self) -> None:
        job = DocumentJob(ScriptedApi([]))
        with pytest.raises(RuntimeError):
            await job.poll()
