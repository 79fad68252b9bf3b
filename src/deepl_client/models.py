# SPDX-License-Identifier: Apache-2.0
"""Result and metadata types returned by the translator."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from deepl_client.errors import DeserializationError


class Formality(str, Enum):
    """Register of the translated text."""

    DEFAULT = "default"
    MORE = "more"
    LESS = "less"
    PREFER_MORE = "prefer_more"
    PREFER_LESS = "prefer_less"


class SplitSentences(str, Enum):
    """How the service splits input into sentences."""

    OFF = "0"
    ALL = "1"
    NO_NEWLINES = "nonewlines"


@dataclass(frozen=True)
class TextResult:
    """Translated text and the source language the service used."""

    text: str
    detected_source_lang: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Language:
    """A language the service supports.

    ``supports_formality`` is a bool for target languages and always None
    for source languages.
    """

    code: str
    name: str
    supports_formality: bool | None = None

    def __str__(self) -> str:
        return self.code


@dataclass(frozen=True)
class GlossaryLanguagePair:
    """Source/target combination accepted for glossaries."""

    source_lang: str
    target_lang: str


@dataclass(frozen=True)
class GlossaryInfo:
    """Glossary metadata (entries are fetched separately)."""

    glossary_id: str
    name: str
    ready: bool
    source_lang: str
    target_lang: str
    creation_time: datetime
    entry_count: int

    @classmethod
    def from_json(cls, data: Any) -> GlossaryInfo:
        try:
            creation_time = data["creation_time"]
            # fromisoformat() before Python 3.11 rejects the "Z" suffix
            if creation_time.endswith("Z"):
                creation_time = creation_time[:-1] + "+00:00"
            return cls(
                glossary_id=data["glossary_id"],
                name=data["name"],
                ready=bool(data["ready"]),
                source_lang=data["source_lang"],
                target_lang=data["target_lang"],
                creation_time=datetime.fromisoformat(creation_time),
                entry_count=int(data["entry_count"]),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise DeserializationError(f"Invalid glossary info: {e}") from e

    def __str__(self) -> str:
        return f'Glossary "{self.name}" ({self.glossary_id})'


@dataclass(frozen=True)
class DocumentHandle:
    """Server-assigned identity of an uploaded document."""

    document_id: str
    document_key: str

    def __str__(self) -> str:
        return f"Document ID: {self.document_id}"


class DocumentState(str, Enum):
    """Service-side document state. DONE and ERROR are terminal."""

    QUEUED = "queued"
    TRANSLATING = "translating"
    DONE = "done"
    ERROR = "error"


@dataclass(frozen=True)
class DocumentStatus:
    """Result of one document status query."""

    document_id: str
    state: DocumentState
    seconds_remaining: int | None = None
    billed_characters: int | None = None
    error_message: str | None = None

    @classmethod
    def from_json(cls, data: Any) -> DocumentStatus:
        try:
            state = DocumentState(str(data["status"]).lower())
            seconds_remaining = data.get("seconds_remaining")
            billed_characters = data.get("billed_characters")
            return cls(
                document_id=data["document_id"],
                state=state,
                seconds_remaining=(
                    int(seconds_remaining) if seconds_remaining is not None else None
                ),
                billed_characters=(
                    int(billed_characters) if billed_characters is not None else None
                ),
                error_message=data.get("error_message") or data.get("message"),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise DeserializationError(f"Invalid document status: {e}") from e

    @property
    def ok(self) -> bool:
        return self.state != DocumentState.ERROR

    @property
    def done(self) -> bool:
        return self.state == DocumentState.DONE

    @property
    def terminal(self) -> bool:
        return self.state in (DocumentState.DONE, DocumentState.ERROR)
