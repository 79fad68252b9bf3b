# SPDX-License-Identifier: Apache-2.0
"""Glossary entry validation and TSV conversion."""

from __future__ import annotations

from typing import Mapping

from deepl_client.errors import ConfigurationError, DeserializationError

_FORBIDDEN = ("\t", "\n", "\r")


def validate_entry(source: str, target: str) -> None:
    """Check one glossary entry.

    Raises:
        ConfigurationError: If either side is empty, padded with whitespace,
            or contains a tab or line break.
    """
    for term in (source, target):
        if not term:
            raise ConfigurationError("Glossary terms must not be empty")
        if term != term.strip():
            raise ConfigurationError(
                f'Glossary term "{term}" has leading or trailing whitespace'
            )
        if any(ch in term for ch in _FORBIDDEN):
            raise ConfigurationError(
                f'Glossary term "{term}" contains a tab or line break'
            )


def entries_to_tsv(entries: Mapping[str, str]) -> str:
    """Serialize entries as tab-separated lines.

    Raises:
        ConfigurationError: If there are no entries or one is invalid.
    """
    if not entries:
        raise ConfigurationError("Glossary must contain at least one entry")
    lines = []
    for source, target in entries.items():
        validate_entry(source, target)
        lines.append(f"{source}\t{target}")
    return "\n".join(lines)


def entries_from_tsv(tsv: str) -> dict[str, str]:
    """Parse the tab-separated entry list returned by the service.

    Blank lines are skipped.

    Raises:
        DeserializationError: If a line is not a single tab-separated pair
            or a source term repeats.
    """
    entries: dict[str, str] = {}
    for line_number, line in enumerate(tsv.splitlines(), start=1):
        if not line.strip():
            continue
        parts = line.split("\t")
        if len(parts) != 2:
            raise DeserializationError(
                f"Glossary entry line {line_number} is not a source/target pair"
            )
        source, target = (part.strip() for part in parts)
        if source in entries:
            raise DeserializationError(
                f'Glossary entry line {line_number} repeats source term "{source}"'
            )
        entries[source] = target
    return entries
