# SPDX-License-Identifier: Apache-2.0
"""Async client for the DeepL translation API.

Usage:
    from deepl_client import Translator

    async with Translator("your-auth-key") as translator:
        result = await translator.translate_text("Hello", None, "de")
        usage = await translator.get_usage()
        if usage.any_limit_reached:
            print("Translation limit reached")

Failures surface as ``DeepLError`` subclasses. Timeouts, rate limiting
(429) and server errors (5xx) are retried with exponential backoff first.
"""

from deepl_client._version import __version__
from deepl_client.config import TranslatorOptions
from deepl_client.document import DocumentJob, JobState
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
from deepl_client.languages import (
    is_free_account_auth_key,
    nonregional_language_code,
    standardize_language_code,
)
from deepl_client.models import (
    DocumentHandle,
    DocumentState,
    DocumentStatus,
    Formality,
    GlossaryInfo,
    GlossaryLanguagePair,
    Language,
    SplitSentences,
    TextResult,
)
from deepl_client.retry import RetryPolicy
from deepl_client.translator import Translator
from deepl_client.usage import Usage, UsageLimit

__all__ = [
    "__version__",
    # Client
    "Translator",
    "TranslatorOptions",
    "RetryPolicy",
    "DocumentJob",
    "JobState",
    # Results
    "DocumentHandle",
    "DocumentState",
    "DocumentStatus",
    "Formality",
    "GlossaryInfo",
    "GlossaryLanguagePair",
    "Language",
    "SplitSentences",
    "TextResult",
    "Usage",
    "UsageLimit",
    # Errors
    "DeepLError",
    "ErrorKind",
    "AuthorizationError",
    "ConfigurationError",
    "ConnectionError",
    "DeserializationError",
    "DocumentNotReadyError",
    "DocumentTranslationError",
    "GlossaryNotFoundError",
    "QuotaExceededError",
    "TooManyRequestsError",
    # Helpers
    "is_free_account_auth_key",
    "nonregional_language_code",
    "standardize_language_code",
]
