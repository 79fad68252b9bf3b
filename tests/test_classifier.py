# SPDX-License-Identifier: Apache-2.0
"""Tests for response classification."""

from __future__ import annotations

import pytest

from deepl_client.classifier import (
    classify_response,
    classify_transport_error,
    error_for_response,
)
from deepl_client.errors import (
    AuthorizationError,
    ConnectionError,
    DeepLError,
    DeserializationError,
    DocumentNotReadyError,
    ErrorKind,
    GlossaryNotFoundError,
    QuotaExceededError,
    TooManyRequestsError,
)
from deepl_client.transport import HttpResponse, TransportError
from fakes import json_response


class TestClassifyResponse:
    """Tests for classify_response."""

    def test_success_json(self) -> None:
        assert classify_response(json_response(200, {"a": 1})) == {"a": 1}

    def test_success_bytes(self) -> None:
        response = HttpResponse(200, body=b"\x00binary")
        assert classify_response(response, expect_json=False) == b"\x00binary"

    def test_empty_success_body(self) -> None:
        assert classify_response(HttpResponse(204)) is None

    def test_undecodable_body(self) -> None:
        with pytest.raises(DeserializationError):
            classify_response(HttpResponse(200, body=b"not json"))

    def test_invalid_utf8_body(self) -> None:
        with pytest.raises(DeserializationError):
            classify_response(HttpResponse(200, body=b"\xff\xfe"))

    @pytest.mark.parametrize("status", [401, 403])
    def test_authorization(self, status: int) -> None:
        with pytest.raises(AuthorizationError):
            classify_response(json_response(status, {"message": "Forbidden"}))

    def test_quota_status(self) -> None:
        with pytest.raises(QuotaExceededError) as exc_info:
            classify_response(HttpResponse(456))
        assert "Quota for this billing period has been exceeded" in str(exc_info.value)

    def test_quota_message_on_400(self) -> None:
        response = json_response(400, {"message": "Quota exceeded for this account"})
        with pytest.raises(QuotaExceededError):
            classify_response(response)

    def test_quota_text_body_on_400(self) -> None:
        response = HttpResponse(400, body=b"Quota exceeded")
        with pytest.raises(QuotaExceededError) as exc_info:
            classify_response(response)
        assert "message: Quota exceeded" in str(exc_info.value)

    def test_plain_bad_request(self) -> None:
        response = json_response(400, {"message": "Value for 'target_lang' not supported"})
        with pytest.raises(DeepLError) as exc_info:
            classify_response(response)
        assert exc_info.value.kind == ErrorKind.GENERIC
        assert "target_lang" in str(exc_info.value)

    def test_too_many_requests(self) -> None:
        with pytest.raises(TooManyRequestsError) as exc_info:
            classify_response(HttpResponse(429))
        assert exc_info.value.should_retry is True

    def test_glossary_not_found(self) -> None:
        with pytest.raises(GlossaryNotFoundError):
            classify_response(HttpResponse(404), glossary=True)

    def test_not_found(self) -> None:
        with pytest.raises(DeepLError) as exc_info:
            classify_response(HttpResponse(404))
        assert "check server_url" in str(exc_info.value)

    def test_document_not_ready(self) -> None:
        with pytest.raises(DocumentNotReadyError):
            classify_response(HttpResponse(503), document_download=True)

    @pytest.mark.parametrize("status", [500, 502, 503, 504])
    def test_server_error(self, status: int) -> None:
        with pytest.raises(ConnectionError) as exc_info:
            classify_response(HttpResponse(status))
        assert exc_info.value.timeout is False

    def test_unexpected_status(self) -> None:
        with pytest.raises(DeepLError) as exc_info:
            classify_response(HttpResponse(302))
        assert "302" in str(exc_info.value)


class TestErrorDetail:
    def test_message_and_detail_included(self) -> None:
        error = error_for_response(
            json_response(403, {"message": "Invalid key", "detail": "revoked"})
        )
        assert "message: Invalid key" in error.message
        assert "detail: revoked" in error.message

    def test_html_body_ignored(self) -> None:
        error = error_for_response(HttpResponse(403, body=b"<html>"))
        assert error.message == "Authorization failure, check auth_key"

    def test_plain_text_body_included(self) -> None:
        error = error_for_response(HttpResponse(400, body=b"  Unsupported file type\n"))
        assert error.message == "Bad request, message: Unsupported file type"


class TestClassifyTransportError:
    def test_timeout_flag_preserved(self) -> None:
        error = classify_transport_error(TransportError("slow", timeout=True))
        assert isinstance(error, ConnectionError)
        assert error.timeout is True
        assert error.should_retry is True

    def test_connection_failure(self) -> None:
        error = classify_transport_error(TransportError("refused"))
        assert error.timeout is False
        assert "refused" in str(error)
