# SPDX-License-Identifier: Apache-2.0
"""Shared fixtures wiring a Translator to the in-memory service."""

from __future__ import annotations

import pytest

from deepl_client import Translator
from fakes import FakeService, make_translator


@pytest.fixture
def fake_service() -> FakeService:
    """A fresh service with no limits and no scripted failures."""
    return FakeService()


@pytest.fixture
def translator(fake_service: FakeService) -> Translator:
    """Translator talking to ``fake_service`` with fast retry settings."""
    return make_translator(fake_service)
