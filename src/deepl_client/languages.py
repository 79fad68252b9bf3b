# SPDX-License-Identifier: Apache-2.0
"""Language-code helpers and auth-key routing."""

from __future__ import annotations

import re

from deepl_client.errors import ConfigurationError

SERVER_URL = "https://api.deepl.com"
SERVER_URL_FREE = "https://api-free.deepl.com"
FREE_ACCOUNT_SUFFIX = ":fx"

# Targets that need a regional variant ("en-GB"/"en-US", "pt-PT"/"pt-BR")
AMBIGUOUS_TARGET_LANGS = frozenset({"en", "pt"})

_LANG_CODE = re.compile(r"^[a-z]{2,3}(-[a-z0-9]{2,4})?$")


def is_free_account_auth_key(auth_key: str) -> bool:
    """Return True if the key belongs to a free account."""
    return auth_key.endswith(FREE_ACCOUNT_SUFFIX)


def server_url_for(auth_key: str) -> str:
    """Default endpoint for the account type of ``auth_key``."""
    return SERVER_URL_FREE if is_free_account_auth_key(auth_key) else SERVER_URL


def standardize_language_code(code: str) -> str:
    """Lower-case a language code ("EN-US" -> "en-us")."""
    return code.strip().lower()


def nonregional_language_code(code: str) -> str:
    """Strip any regional variant ("en-US" -> "en")."""
    return standardize_language_code(code).split("-", 1)[0]


def validate_target_lang(target_lang: str | None) -> str:
    """Return the standardized target code.

    Raises:
        ConfigurationError: If the code is empty, malformed, or an
            ambiguous base code that needs a regional variant.
    """
    if not target_lang or not target_lang.strip():
        raise ConfigurationError("target_lang must not be empty")
    code = standardize_language_code(target_lang)
    if code in AMBIGUOUS_TARGET_LANGS:
        raise ConfigurationError(
            f"target_lang '{code}' is ambiguous, "
            f"use a regional variant such as '{code}-{_example_region(code)}'"
        )
    if not _LANG_CODE.match(code):
        raise ConfigurationError(f"target_lang '{target_lang}' is not a valid code")
    return code


def validate_source_lang(source_lang: str | None) -> str | None:
    """Return the standardized source code, or None for auto-detection.

    Raises:
        ConfigurationError: If the code is malformed or carries a region.
    """
    if source_lang is None:
        return None
    code = standardize_language_code(source_lang)
    if not _LANG_CODE.match(code) or "-" in code:
        raise ConfigurationError(
            f"source_lang '{source_lang}' is not a valid source language code"
        )
    return code


def _example_region(code: str) -> str:
    return "us" if code == "en" else "br"
