# SPDX-License-Identifier: Apache-2.0
"""Exponential backoff with jitter around single transport exchanges."""

from __future__ import annotations

import asyncio
import logging
import random
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Awaitable, Callable, Container, Mapping

from deepl_client.transport import HttpResponse, TransportError

logger = logging.getLogger(__name__)

JITTER_MIN = 0.5
JITTER_MAX = 1.0

SleepFunc = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration.

    Attributes:
        max_retries: Retries after the first attempt; 0 means one attempt.
        min_timeout: Base backoff delay in seconds.
        max_timeout: Upper bound for a single backoff delay in seconds.
    """

    max_retries: int = 5
    min_timeout: float = 1.0
    max_timeout: float = 60.0

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.min_timeout < 0 or self.max_timeout < 0:
            raise ValueError("min_timeout and max_timeout must be >= 0")

    @property
    def total_timeout(self) -> float:
        """Ceiling on time spent in one retry sequence."""
        return self.max_timeout * (self.max_retries + 1)

    def backoff_delay(self, retry: int) -> float:
        """Delay before retry number ``retry`` (0-based), jitter applied."""
        base = min(self.max_timeout, self.min_timeout * (2**retry))
        return base * random.uniform(JITTER_MIN, JITTER_MAX)


@dataclass
class RetryState:
    """Bookkeeping for one logical request. Never shared between calls."""

    attempt: int = 0
    started: float = 0.0
    retry_after: float | None = None
    last_error: TransportError | None = None

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started


def parse_retry_after(headers: Mapping[str, str]) -> float | None:
    """Read a Retry-After header as seconds.

    Accepts delta-seconds or an HTTP date. Returns None if absent or
    unparseable.
    """
    value = None
    for key, header_value in headers.items():
        if key.lower() == "retry-after":
            value = header_value.strip()
            break
    if not value:
        return None

    try:
        return max(0.0, float(value))
    except ValueError:
        pass

    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())


def is_retryable_status(status: int) -> bool:
    return status == 429 or 500 <= status < 600


async def send_with_retry(
    send: Callable[[], Awaitable[HttpResponse]],
    policy: RetryPolicy,
    *,
    final_statuses: Container[int] = (),
    sleep: SleepFunc = asyncio.sleep,
) -> HttpResponse:
    """Call ``send`` until its outcome is final.

    Retries transport failures, 429 and 5xx (except statuses listed in
    ``final_statuses``) up to ``policy.max_retries`` times, waiting
    ``policy.backoff_delay(n)`` between attempts, or the server's
    Retry-After hint if that is longer.

    Args:
        send: Performs one exchange.
        policy: Retry limits and backoff bounds.
        final_statuses: Statuses returned as-is even though retryable.
        sleep: Awaitable used between attempts.

    Returns:
        The first non-retryable response, or the last response once
        retries are exhausted.

    Raises:
        TransportError: If the last attempt produced no response.
    """
    state = RetryState(started=time.monotonic())

    while True:
        response: HttpResponse | None = None
        try:
            response = await send()
        except TransportError as e:
            state.last_error = e
            state.retry_after = None
            outcome = str(e)
        else:
            state.last_error = None
            if response.status in final_statuses or not is_retryable_status(
                response.status
            ):
                return response
            state.retry_after = parse_retry_after(response.headers)
            outcome = f"status {response.status}"

        if state.attempt >= policy.max_retries:
            break

        delay = policy.backoff_delay(state.attempt)
        if state.retry_after is not None:
            delay = max(delay, state.retry_after)
        if state.elapsed + delay > policy.total_timeout:
            logger.debug(
                "Retry time limit of %.1fs would be exceeded, giving up",
                policy.total_timeout,
            )
            break

        state.attempt += 1
        logger.warning(
            "Request failed (attempt %d/%d), retrying in %.2fs: %s",
            state.attempt,
            policy.max_retries + 1,
            delay,
            outcome,
        )
        await sleep(delay)

    if response is not None:
        return response
    if state.last_error is None:
        raise RuntimeError("Retry loop ended without a response or an error")
    raise state.last_error
