# SPDX-License-Identifier: Apache-2.0
"""Error taxonomy for the translation client.

Every error raised by a public operation is a ``DeepLError``. Each subclass
sets ``kind``, so callers can either catch a specific class or match on
``exc.kind``:

    try:
        await translator.translate_text("Hello", None, "de")
    except DeepLError as exc:
        match exc.kind:
            case ErrorKind.QUOTA_EXCEEDED:
                ...
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from deepl_client.models import DocumentHandle


class ErrorKind(str, Enum):
    """Discriminant for ``DeepLError`` subclasses."""

    GENERIC = "generic"
    CONFIGURATION = "configuration"
    AUTHORIZATION = "authorization"
    QUOTA_EXCEEDED = "quota_exceeded"
    TOO_MANY_REQUESTS = "too_many_requests"
    CONNECTION = "connection"
    DOCUMENT_TRANSLATION = "document_translation"
    DOCUMENT_NOT_READY = "document_not_ready"
    GLOSSARY_NOT_FOUND = "glossary_not_found"
    DESERIALIZATION = "deserialization"


class DeepLError(Exception):
    """Base exception for the client.

    Attributes:
        kind: Error discriminant.
        message: Human-readable message, including the service's reason
            where one was returned.
        should_retry: Whether repeating the same request may succeed.
    """

    kind = ErrorKind.GENERIC

    def __init__(self, message: str, should_retry: bool = False) -> None:
        super().__init__(message)
        self.message = message
        self.should_retry = should_retry


class ConfigurationError(DeepLError):
    """Invalid argument or option, detected before any network call."""

    kind = ErrorKind.CONFIGURATION


class AuthorizationError(DeepLError):
    """Credential missing, invalid or revoked. Never retried."""

    kind = ErrorKind.AUTHORIZATION


class QuotaExceededError(DeepLError):
    """Character, document or team-document quota reached."""

    kind = ErrorKind.QUOTA_EXCEEDED


class TooManyRequestsError(DeepLError):
    """Rate limit still exceeded after all retries."""

    kind = ErrorKind.TOO_MANY_REQUESTS

    def __init__(self, message: str) -> None:
        super().__init__(message, should_retry=True)


class ConnectionError(DeepLError):  # noqa: A001
    """Network failure, timeout or server error after all retries.

    Attributes:
        timeout: True when the failure was a timeout (per attempt or the
            caller's overall deadline).
    """

    kind = ErrorKind.CONNECTION

    def __init__(
        self,
        message: str,
        should_retry: bool = True,
        timeout: bool = False,
    ) -> None:
        super().__init__(message, should_retry=should_retry)
        self.timeout = timeout


class DocumentTranslationError(DeepLError):
    """Document translation failed on the service or while driving the job.

    Attributes:
        document_handle: Handle of the failed job, or None when the upload
            itself failed.
    """

    kind = ErrorKind.DOCUMENT_TRANSLATION

    def __init__(
        self,
        message: str,
        document_handle: DocumentHandle | None = None,
    ) -> None:
        super().__init__(message)
        self.document_handle = document_handle


class DocumentNotReadyError(DeepLError):
    """Download requested before the document reached the done state."""

    kind = ErrorKind.DOCUMENT_NOT_READY


class GlossaryNotFoundError(DeepLError):
    """Glossary ID does not exist for this account."""

    kind = ErrorKind.GLOSSARY_NOT_FOUND


class DeserializationError(DeepLError):
    """Response body could not be decoded."""

    kind = ErrorKind.DESERIALIZATION
