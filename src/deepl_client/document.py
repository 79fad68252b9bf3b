# SPDX-License-Identifier: Apache-2.0
"""Document translation job: submit, poll until terminal, download."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Protocol

from deepl_client.errors import DocumentTranslationError
from deepl_client.models import DocumentHandle, DocumentState, DocumentStatus

logger = logging.getLogger(__name__)


class JobState(str, Enum):
    """Client-side job state."""

    PENDING = "pending"
    SUBMITTED = "submitted"
    QUEUED = "queued"
    TRANSLATING = "translating"
    DONE = "done"
    ERROR = "error"

    @property
    def terminal(self) -> bool:
        return self in (JobState.DONE, JobState.ERROR)


_ORDER = {
    JobState.PENDING: 0,
    JobState.SUBMITTED: 1,
    JobState.QUEUED: 2,
    JobState.TRANSLATING: 3,
    JobState.DONE: 4,
    JobState.ERROR: 4,
}

_FROM_SERVICE = {
    DocumentState.QUEUED: JobState.QUEUED,
    DocumentState.TRANSLATING: JobState.TRANSLATING,
    DocumentState.DONE: JobState.DONE,
    DocumentState.ERROR: JobState.ERROR,
}


class DocumentApi(Protocol):
    """The three service calls a job needs."""

    async def upload_document(
        self,
        content: bytes,
        *,
        filename: str,
        source_lang: str | None,
        target_lang: str,
        **options: Any,
    ) -> DocumentHandle: ...

    async def get_document_status(self, handle: DocumentHandle) -> DocumentStatus: ...

    async def download_document(self, handle: DocumentHandle) -> bytes: ...


def next_poll_delay(
    status: DocumentStatus,
    poll_interval: float,
    max_poll_interval: float,
) -> float:
    """Seconds to wait before the next status query.

    Half of the server's remaining-time estimate, clamped to
    ``[poll_interval, max_poll_interval]``; ``poll_interval`` when the
    server gives no estimate.
    """
    if status.seconds_remaining is None:
        return poll_interval
    return min(max_poll_interval, max(poll_interval, status.seconds_remaining / 2))


class DocumentJob:
    """State machine for one document translation.

    States advance ``PENDING -> SUBMITTED -> QUEUED -> TRANSLATING`` and
    end in ``DONE`` or ``ERROR``. Transitions never go backwards, and no
    transition leaves a terminal state. Polling is sequential, and its
    interval is unrelated to the retry backoff of individual requests.
    """

    def __init__(
        self,
        api: DocumentApi,
        *,
        poll_interval: float = 1.0,
        max_poll_interval: float = 60.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._api = api
        self._poll_interval = poll_interval
        self._max_poll_interval = max_poll_interval
        self._sleep = sleep
        self.state = JobState.PENDING
        self.handle: DocumentHandle | None = None
        self.status: DocumentStatus | None = None

    @classmethod
    def resume(cls, api: DocumentApi, handle: DocumentHandle, **kwargs: Any) -> DocumentJob:
        """Create a job for a document that was already uploaded."""
        job = cls(api, **kwargs)
        job.handle = handle
        job.state = JobState.SUBMITTED
        return job

    def _advance(self, new_state: JobState) -> bool:
        """Move to ``new_state``; returns False if the transition was ignored."""
        if self.state.terminal:
            if new_state != self.state:
                logger.debug(
                    "Ignoring %s after terminal state %s", new_state.value, self.state.value
                )
            return False
        if _ORDER[new_state] < _ORDER[self.state]:
            logger.debug(
                "Ignoring backwards transition %s -> %s",
                self.state.value,
                new_state.value,
            )
            return False
        self.state = new_state
        return True

    async def submit(
        self,
        content: bytes,
        *,
        filename: str,
        source_lang: str | None,
        target_lang: str,
        **options: Any,
    ) -> DocumentHandle:
        """Upload the document. Errors propagate without polling."""
        if self.state != JobState.PENDING:
            raise RuntimeError(f"Cannot submit a job in state {self.state.value}")
        self.handle = await self._api.upload_document(
            content,
            filename=filename,
            source_lang=source_lang,
            target_lang=target_lang,
            **options,
        )
        logger.debug("Uploaded %s: %s", filename, self.handle)
        self._advance(JobState.SUBMITTED)
        return self.handle

    async def poll(self) -> DocumentStatus:
        """Query the status once and advance the state.

        A status that would move the job backwards, or out of a terminal
        state, is returned but not recorded.
        """
        if self.handle is None:
            raise RuntimeError("Cannot poll a job that was not submitted")
        status = await self._api.get_document_status(self.handle)
        if self._advance(_FROM_SERVICE[status.state]):
            self.status = status
        logger.debug(
            "%s: %s (seconds remaining: %s)",
            self.handle,
            status.state.value,
            status.seconds_remaining,
        )
        return status

    async def wait(self) -> DocumentStatus:
        """Poll until the job is terminal.

        Returns:
            The terminal status (done or error).
        """
        status = await self.poll()
        while not self.state.terminal:
            await self._sleep(
                next_poll_delay(status, self._poll_interval, self._max_poll_interval)
            )
            status = await self.poll()
        return status

    async def download(self) -> bytes:
        """Fetch the translated document.

        Raises:
            DocumentTranslationError: If the job ended in the error state.
            RuntimeError: If the job is not terminal yet.
        """
        if self.state == JobState.ERROR:
            raise self._error()
        if self.state != JobState.DONE or self.handle is None:
            raise RuntimeError(f"Cannot download a job in state {self.state.value}")
        return await self._api.download_document(self.handle)

    async def run(
        self,
        content: bytes,
        *,
        filename: str,
        source_lang: str | None,
        target_lang: str,
        **options: Any,
    ) -> bytes:
        """Submit, wait and download.

        Raises:
            DocumentTranslationError: If the service reports an error state.
            DeepLError: If a request fails.
        """
        await self.submit(
            content,
            filename=filename,
            source_lang=source_lang,
            target_lang=target_lang,
            **options,
        )
        await self.wait()
        return await self.download()

    def _error(self) -> DocumentTranslationError:
        reason = "unknown error"
        if self.status is not None and self.status.error_message:
            reason = self.status.error_message
        return DocumentTranslationError(
            f"Error occurred while translating document: {reason}",
            document_handle=self.handle,
        )
