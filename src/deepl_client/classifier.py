# SPDX-License-Identifier: Apache-2.0
"""Map a finished exchange to a payload or a typed error."""

from __future__ import annotations

import re
from typing import Any

from deepl_client.errors import (
    AuthorizationError,
    ConnectionError,
    DeepLError,
    DeserializationError,
    DocumentNotReadyError,
    GlossaryNotFoundError,
    QuotaExceededError,
    TooManyRequestsError,
)
from deepl_client.transport import HttpResponse, TransportError

QUOTA_EXCEEDED_STATUS = 456

_QUOTA_PATTERN = re.compile(r"quota", re.IGNORECASE)


def _error_detail(response: HttpResponse) -> str:
    """Extract the service's message/detail fields, if any.

    A body that is not a JSON object is used as the message when it looks
    like plain text.
    """
    try:
        data = response.json()
    except ValueError:
        return _text_detail(response)
    if not isinstance(data, dict):
        return ""

    parts = []
    message = data.get("message")
    if message:
        parts.append(f"message: {message}")
    detail = data.get("detail")
    if detail:
        parts.append(f"detail: {detail}")
    return ", ".join(parts)


_MAX_TEXT_DETAIL = 200


def _text_detail(response: HttpResponse) -> str:
    text = response.text().strip()
    # HTML error pages from proxies carry nothing useful
    if not text or text.startswith("<"):
        return ""
    return f"message: {text[:_MAX_TEXT_DETAIL]}"


def _with_detail(message: str, detail: str) -> str:
    return f"{message}, {detail}" if detail else message


def error_for_response(
    response: HttpResponse,
    *,
    glossary: bool = False,
    document_download: bool = False,
) -> DeepLError:
    """Build the error for a non-2xx response.

    Args:
        response: Completed response with a non-2xx status.
        glossary: The request addressed a glossary.
        document_download: The request fetched a translated document.
    """
    status = response.status
    detail = _error_detail(response)

    if status in (401, 403):
        return AuthorizationError(
            _with_detail("Authorization failure, check auth_key", detail)
        )
    if status == QUOTA_EXCEEDED_STATUS:
        return QuotaExceededError(
            _with_detail("Quota for this billing period has been exceeded", detail)
        )
    if status == 429:
        return TooManyRequestsError(
            _with_detail("Too many requests, the service is under high load", detail)
        )
    if 400 <= status < 500 and _QUOTA_PATTERN.search(detail):
        return QuotaExceededError(
            _with_detail("Quota for this billing period has been exceeded", detail)
        )
    if status == 404 and glossary:
        return GlossaryNotFoundError(_with_detail("Glossary not found", detail))
    if status == 404:
        return DeepLError(_with_detail("Not found, check server_url", detail))
    if status == 400:
        return DeepLError(_with_detail("Bad request", detail))
    if status == 503 and document_download:
        return DocumentNotReadyError(_with_detail("Document not ready", detail))
    if 500 <= status < 600:
        return ConnectionError(
            _with_detail(f"Server error (status {status})", detail)
        )
    return DeepLError(
        _with_detail(f"Unexpected status code: {status}", detail)
    )


def classify_response(
    response: HttpResponse,
    *,
    expect_json: bool = True,
    glossary: bool = False,
    document_download: bool = False,
) -> Any:
    """Return the payload of a successful response or raise its error.

    Args:
        response: Completed response.
        expect_json: Decode the body as JSON; otherwise return raw bytes.
        glossary: The request addressed a glossary.
        document_download: The request fetched a translated document.

    Returns:
        Decoded JSON, or the raw body when ``expect_json`` is False.

    Raises:
        DeepLError: The subclass matching the failure.
    """
    if not 200 <= response.status < 300:
        raise error_for_response(
            response, glossary=glossary, document_download=document_download
        )

    if not expect_json:
        return response.body
    if not response.body:
        return None
    try:
        return response.json()
    except (UnicodeDecodeError, ValueError) as e:
        raise DeserializationError(
            f"Error parsing response JSON: {e}"
        ) from e


def classify_transport_error(error: TransportError) -> ConnectionError:
    """Wrap a transport failure that survived all retries."""
    return ConnectionError(str(error), timeout=error.timeout)
