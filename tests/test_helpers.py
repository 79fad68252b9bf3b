# SPDX-License-Identifier: Apache-2.0
"""Tests for language helpers, glossary entries, models and errors."""

from __future__ import annotations

from datetime import timezone

import pytest

from deepl_client.errors import (
    AuthorizationError,
    ConfigurationError,
    ConnectionError,
    DeepLError,
    DeserializationError,
    DocumentNotReadyError,
    DocumentTranslationError,
    ErrorKind,
    GlossaryNotFoundError,
    QuotaExceededError,
    TooManyRequestsError,
)
from deepl_client.glossary import entries_from_tsv, entries_to_tsv, validate_entry
from deepl_client.languages import (
    nonregional_language_code,
    server_url_for,
    standardize_language_code,
    validate_source_lang,
    validate_target_lang,
)
from deepl_client.models import DocumentState, DocumentStatus, GlossaryInfo


class TestLanguageCodes:
    def test_standardize(self) -> None:
        assert standardize_language_code(" EN-US ") == "en-us"

    def test_nonregional(self) -> None:
        assert nonregional_language_code("en-GB") == "en"
        assert nonregional_language_code("DE") == "de"

    def test_server_url_for(self) -> None:
        assert server_url_for("abc:fx") == "https://api-free.deepl.com"
        assert server_url_for("abc") == "https://api.deepl.com"

    @pytest.mark.parametrize("code", ["de", "EN-US", "pt-BR", "zh-hans"])
    def test_valid_targets(self, code: str) -> None:
        assert validate_target_lang(code) == code.lower()

    @pytest.mark.parametrize("code", ["", "en", "pt", "german", "d"])
    def test_invalid_targets(self, code: str) -> None:
        with pytest.raises(ConfigurationError):
            validate_target_lang(code)

    def test_source_none_means_auto(self) -> None:
        assert validate_source_lang(None) is None

    def test_source_rejects_region(self) -> None:
        with pytest.raises(ConfigurationError):
            validate_source_lang("en-US")


class TestGlossaryEntries:
    def test_round_trip_order(self) -> None:
        entries = {"Hello": "Hallo", "World": "Welt"}
        tsv = entries_to_tsv(entries)
        assert tsv == "Hello\tHallo\nWorld\tWelt"
        assert entries_from_tsv(tsv) == entries

    def test_blank_lines_skipped(self) -> None:
        assert entries_from_tsv("a\tb\n\n c\td\n") == {"a": "b", "c": "d"}

    @pytest.mark.parametrize(
        ("source", "target"),
        [("", "x"), ("x", ""), (" x", "y"), ("x", "y\n"), ("a\tb", "c")],
    )
    def test_invalid_entry(self, source: str, target: str) -> None:
        with pytest.raises(ConfigurationError):
            validate_entry(source, target)

    def test_malformed_line(self) -> None:
        with pytest.raises(DeserializationError):
            entries_from_tsv("only-one-column")

    def test_duplicate_source(self) -> None:
        with pytest.raises(DeserializationError):
            entries_from_tsv("a\tb\na\tc")


class TestModels:
    def test_document_status_from_json(self) -> None:
        status = DocumentStatus.from_json(
            {"document_id": "d", "status": "translating", "seconds_remaining": 5}
        )
        assert status.state == DocumentState.TRANSLATING
        assert status.seconds_remaining == 5
        assert status.ok is True
        assert status.terminal is False

    def test_document_status_error(self) -> None:
        status = DocumentStatus.from_json(
            {"document_id": "d", "status": "error", "error_message": "Bad file"}
        )
        assert status.ok is False
        assert status.terminal is True
        assert status.error_message == "Bad file"

    def test_document_status_unknown_state(self) -> None:
        with pytest.raises(DeserializationError):
            DocumentStatus.from_json({"document_id": "d", "status": "lost"})

    def test_glossary_info_from_json(self) -> None:
        info = GlossaryInfo.from_json(
            {
                "glossary_id": "g1",
                "name": "My glossary",
                "ready": True,
                "source_lang": "en",
                "target_lang": "de",
                "creation_time": "2021-08-03T14:16:18.329Z",
                "entry_count": 1,
            }
        )
        assert info.creation_time.tzinfo == timezone.utc
        assert info.creation_time.microsecond == 329000
        assert str(info) == 'Glossary "My glossary" (g1)'

    def test_glossary_info_missing_field(self) -> None:
        with pytest.raises(DeserializationError):
            GlossaryInfo.from_json({"glossary_id": "g1"})


class TestErrors:
    """Test exception hierarchy."""

    @pytest.mark.parametrize(
        ("error_class", "kind"),
        [
            (ConfigurationError, ErrorKind.CONFIGURATION),
            (AuthorizationError, ErrorKind.AUTHORIZATION),
            (QuotaExceededError, ErrorKind.QUOTA_EXCEEDED),
            (TooManyRequestsError, ErrorKind.TOO_MANY_REQUESTS),
            (ConnectionError, ErrorKind.CONNECTION),
            (DocumentTranslationError, ErrorKind.DOCUMENT_TRANSLATION),
            (DocumentNotReadyError, ErrorKind.DOCUMENT_NOT_READY),
            (GlossaryNotFoundError, ErrorKind.GLOSSARY_NOT_FOUND),
            (DeserializationError, ErrorKind.DESERIALIZATION),
        ],
    )
    def test_kind_and_base(self, error_class: type[DeepLError], kind: ErrorKind) -> None:
        error = error_class("message")
        assert isinstance(error, DeepLError)
        assert error.kind is kind
        assert error.message == "message"

    def test_retry_flags(self) -> None:
        assert TooManyRequestsError("x").should_retry is True
        assert ConnectionError("x").should_retry is True
        assert AuthorizationError("x").should_retry is False
