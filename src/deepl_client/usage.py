# SPDX-License-Identifier: Apache-2.0
"""Account usage and quota limits."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from deepl_client.errors import DeserializationError


@dataclass(frozen=True)
class UsageLimit:
    """Consumed amount and ceiling for one quota category."""

    count: int
    limit: int

    @property
    def limit_reached(self) -> bool:
        return self.count >= self.limit

    def __str__(self) -> str:
        return f"{self.count} of {self.limit}"


@dataclass(frozen=True)
class Usage:
    """Usage snapshot for the current billing period.

    A category is None when the account has no limit of that kind. It is
    never represented as a zero limit.
    """

    character: UsageLimit | None = None
    document: UsageLimit | None = None
    team_document: UsageLimit | None = None

    @classmethod
    def from_json(cls, data: Any) -> Usage:
        """Parse the usage endpoint payload.

        Raises:
            DeserializationError: If the payload is not an object or a
                present field is not an integer.
        """
        if not isinstance(data, dict):
            raise DeserializationError("Usage response is not a JSON object")
        return cls(
            character=_parse_limit(data, "character"),
            document=_parse_limit(data, "document"),
            team_document=_parse_limit(data, "team_document"),
        )

    @property
    def any_limit_reached(self) -> bool:
        return any(
            limit.limit_reached
            for limit in (self.character, self.document, self.team_document)
            if limit is not None
        )

    def __str__(self) -> str:
        lines = ["Usage this billing period:"]
        for label, limit in (
            ("Characters", self.character),
            ("Documents", self.document),
            ("Team documents", self.team_document),
        ):
            if limit is not None:
                lines.append(f"{label}: {limit}")
        return "\n".join(lines)


def _parse_limit(data: dict[str, Any], prefix: str) -> UsageLimit | None:
    count = data.get(f"{prefix}_count")
    limit = data.get(f"{prefix}_limit")
    if count is None or limit is None:
        return None
    try:
        return UsageLimit(count=int(count), limit=int(limit))
    except (TypeError, ValueError) as e:
        raise DeserializationError(f"Invalid {prefix} usage values: {e}") from e
