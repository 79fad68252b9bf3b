# SPDX-License-Identifier: Apache-2.0
"""Translator configuration."""

from __future__ import annotations

from dataclasses import dataclass

from deepl_client._version import __version__
from deepl_client.retry import RetryPolicy


@dataclass(frozen=True)
class TranslatorOptions:
    """Immutable translator configuration.

    Attributes:
        server_url: Endpoint override. None selects the free or paid
            endpoint from the auth key.
        max_retries: Retries per request after the first attempt.
        min_timeout: Base backoff delay in seconds.
        max_timeout: Upper bound for one backoff delay in seconds.
        request_timeout: Seconds allowed for one HTTP attempt.
        proxy: Proxy URL for all requests.
        poll_interval: Minimum seconds between document status polls.
        max_poll_interval: Maximum seconds between document status polls.
        user_agent: User-Agent header value.
    """

    server_url: str | None = None
    max_retries: int = 5
    min_timeout: float = 1.0
    max_timeout: float = 60.0
    request_timeout: float = 10.0
    proxy: str | None = None
    poll_interval: float = 1.0
    max_poll_interval: float = 60.0
    user_agent: str = f"deepl-client/{__version__}"

    def __post_init__(self) -> None:
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be > 0")
        if self.poll_interval < 0 or self.max_poll_interval < self.poll_interval:
            raise ValueError(
                "poll intervals must satisfy 0 <= poll_interval <= max_poll_interval"
            )
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_retries=self.max_retries,
            min_timeout=self.min_timeout,
            max_timeout=self.max_timeout,
        )
