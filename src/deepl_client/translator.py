# SPDX-License-Identifier: Apache-2.0
"""Public translator client."""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Awaitable, Iterable, Mapping, TypeVar

from deepl_client.classifier import classify_response, classify_transport_error
from deepl_client.config import TranslatorOptions
from deepl_client.document import DocumentJob
from deepl_client.errors import (
    AuthorizationError,
    ConfigurationError,
    ConnectionError,
    DeepLError,
    DeserializationError,
    DocumentTranslationError,
)
from deepl_client.glossary import entries_from_tsv, entries_to_tsv
from deepl_client.languages import (
    nonregional_language_code,
    server_url_for,
    validate_source_lang,
    validate_target_lang,
)
from deepl_client.models import (
    DocumentHandle,
    DocumentStatus,
    Formality,
    GlossaryInfo,
    GlossaryLanguagePair,
    Language,
    SplitSentences,
    TextResult,
)
from deepl_client.retry import send_with_retry
from deepl_client.transport import HttpTransport, Transport, TransportError
from deepl_client.usage import Usage

logger = logging.getLogger(__name__)

T = TypeVar("T")

GlossaryRef = str | GlossaryInfo


def _glossary_id(glossary: GlossaryRef) -> str:
    if isinstance(glossary, GlossaryInfo):
        return glossary.glossary_id
    if not glossary:
        raise ConfigurationError("glossary ID must not be empty")
    return glossary


class Translator:
    """Client for the translation service.

    Usage:
        async with Translator(auth_key) as translator:
            result = await translator.translate_text("Hello", None, "de")
            print(result.text)

    Every public coroutine accepts a keyword-only ``timeout`` (seconds)
    bounding the whole operation, retries and polling included. On expiry
    it raises ``ConnectionError`` with ``timeout=True``.
    """

    def __init__(
        self,
        auth_key: str,
        options: TranslatorOptions | None = None,
        transport: Transport | None = None,
    ) -> None:
        """Initialize Translator.

        Args:
            auth_key: Account authentication key.
            options: Translator configuration.
            transport: HTTP transport; built from ``options`` if omitted.

        Raises:
            AuthorizationError: If ``auth_key`` is empty.
        """
        if not auth_key or not auth_key.strip():
            raise AuthorizationError("auth_key must not be empty")

        self._options = options or TranslatorOptions()
        self._retry_policy = self._options.retry_policy
        self._server_url = self._options.server_url or server_url_for(auth_key)
        self._transport: Transport = transport or HttpTransport(
            self._server_url,
            headers={
                "Authorization": f"DeepL-Auth-Key {auth_key}",
                "User-Agent": self._options.user_agent,
            },
            proxy=self._options.proxy,
        )

    @property
    def server_url(self) -> str:
        return self._server_url

    @property
    def options(self) -> TranslatorOptions:
        return self._options

    async def __aenter__(self) -> Translator:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying transport."""
        await self._transport.close()

    async def _api_call(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        data: Any = None,
        files: Mapping[str, tuple[str, bytes]] | None = None,
        headers: Mapping[str, str] | None = None,
        expect_json: bool = True,
        glossary: bool = False,
        document_download: bool = False,
    ) -> Any:
        """Send one logical request with retries and classify the outcome."""

        async def send() -> Any:
            return await self._transport.request(
                method,
                path,
                params=params,
                data=data,
                files=files,
                headers=headers,
                timeout=self._options.request_timeout,
            )

        try:
            response = await send_with_retry(
                send,
                self._retry_policy,
                final_statuses=(503,) if document_download else (),
            )
        except TransportError as e:
            raise classify_transport_error(e) from e

        logger.debug("%s %s -> %d", method, path, response.status)
        return classify_response(
            response,
            expect_json=expect_json,
            glossary=glossary,
            document_download=document_download,
        )

    @staticmethod
    async def _with_deadline(awaitable: Awaitable[T], timeout: float | None) -> T:
        if timeout is None:
            return await awaitable
        try:
            return await asyncio.wait_for(awaitable, timeout)
        except asyncio.TimeoutError as e:
            raise ConnectionError(
                f"Operation timed out after {timeout}s", timeout=True
            ) from e

    @staticmethod
    def _translation_params(
        source_lang: str | None,
        target_lang: str,
        formality: Formality | str | None,
        glossary: GlossaryRef | None,
    ) -> list[tuple[str, str]]:
        target = validate_target_lang(target_lang)
        source = validate_source_lang(source_lang)

        params = [("target_lang", target.upper())]
        if source is not None:
            params.append(("source_lang", source.upper()))
        if formality is not None:
            try:
                params.append(("formality", Formality(formality).value))
            except ValueError:
                raise ConfigurationError(f"Invalid formality: {formality}") from None
        if glossary is not None:
            if source is None:
                raise ConfigurationError("source_lang is required when using a glossary")
            params.append(("glossary_id", _glossary_id(glossary)))
        return params

    async def translate_text(
        self,
        text: str | Iterable[str],
        source_lang: str | None,
        target_lang: str,
        *,
        formality: Formality | str | None = None,
        glossary: GlossaryRef | None = None,
        split_sentences: SplitSentences | str | None = None,
        preserve_formatting: bool | None = None,
        tag_handling: str | None = None,
        context: str | None = None,
        timeout: float | None = None,
    ) -> TextResult | list[TextResult]:
        """Translate one text or a list of texts.

        Args:
            text: Text, or texts translated in one request.
            source_lang: Source language code; None for auto-detection.
            target_lang: Target language code, e.g. "de" or "en-US".
            formality: Register of the output.
            glossary: Glossary ID or info; requires ``source_lang``.
            split_sentences: Sentence splitting mode.
            preserve_formatting: Keep the input's formatting.
            tag_handling: "xml" or "html" to translate markup.
            context: Extra text that informs but is not translated.
            timeout: Overall deadline in seconds.

        Returns:
            One TextResult for a str, a list for a list.

        Raises:
            ConfigurationError: On invalid arguments, before any request.
            DeepLError: On request failure.
        """
        single = isinstance(text, str)
        texts = [text] if single else list(text)  # type: ignore[list-item]
        if not texts:
            raise ConfigurationError("text must not be empty")

        data: list[tuple[str, str]] = [("text", t) for t in texts]
        data.extend(self._translation_params(source_lang, target_lang, formality, glossary))
        if split_sentences is not None:
            try:
                data.append(("split_sentences", SplitSentences(split_sentences).value))
            except ValueError:
                raise ConfigurationError(
                    f"Invalid split_sentences: {split_sentences}"
                ) from None
        if preserve_formatting is not None:
            data.append(("preserve_formatting", "1" if preserve_formatting else "0"))
        if tag_handling is not None:
            data.append(("tag_handling", tag_handling))
        if context is not None:
            data.append(("context", context))

        payload = await self._with_deadline(
            self._api_call("POST", "/v2/translate", data=data), timeout
        )
        try:
            results = [
                TextResult(
                    text=item["text"],
                    detected_source_lang=item["detected_source_language"].lower(),
                )
                for item in payload["translations"]
            ]
        except (KeyError, TypeError, AttributeError) as e:
            raise DeserializationError(f"Invalid translation response: {e}") from e
        if len(results) != len(texts):
            raise DeserializationError(
                f"Service returned {len(results)} translations for {len(texts)} texts"
            )
        return results[0] if single else results

    async def translate_document(
        self,
        input_path: str | Path,
        output_path: str | Path,
        source_lang: str | None,
        target_lang: str,
        *,
        formality: Formality | str | None = None,
        glossary: GlossaryRef | None = None,
        filename: str | None = None,
        timeout: float | None = None,
    ) -> DocumentStatus:
        """Translate a file and write the result to ``output_path``.

        The output file is only created once the translation is done, and
        appears complete or not at all.

        Args:
            input_path: File to translate.
            output_path: Destination; must not exist yet.
            source_lang: Source language code; None for auto-detection.
            target_lang: Target language code.
            formality: Register of the output.
            glossary: Glossary ID or info; requires ``source_lang``.
            filename: Name reported to the service (default: input name).
            timeout: Overall deadline in seconds for upload, polling and
                download.

        Returns:
            The final (done) document status.

        Raises:
            FileExistsError: If ``output_path`` exists.
            ConfigurationError: On invalid arguments, before any request.
            DocumentTranslationError: If any step fails; ``__cause__``
                holds the underlying error.
            ConnectionError: If ``timeout`` expires.
        """
        input_path = Path(input_path)
        output_path = Path(output_path)
        if output_path.exists():
            raise FileExistsError(f"Output file already exists: {output_path}")
        # Validate before uploading anything
        self._translation_params(source_lang, target_lang, formality, glossary)
        content = await asyncio.to_thread(input_path.read_bytes)

        job = self._document_job()

        async def run_job() -> bytes:
            try:
                return await job.run(
                    content,
                    filename=filename or input_path.name,
                    source_lang=source_lang,
                    target_lang=target_lang,
                    formality=formality,
                    glossary=glossary,
                )
            except DocumentTranslationError:
                raise
            except DeepLError as e:
                raise DocumentTranslationError(
                    f"Error occurred while translating document: {e.message}",
                    document_handle=job.handle,
                ) from e

        result = await self._with_deadline(run_job(), timeout)
        await asyncio.to_thread(_write_atomically, output_path, result)
        logger.debug("Wrote translated document to %s", output_path)
        if job.status is None:
            raise RuntimeError("Document job finished without a status")
        return job.status

    def _document_job(self, handle: DocumentHandle | None = None) -> DocumentJob:
        kwargs = {
            "poll_interval": self._options.poll_interval,
            "max_poll_interval": self._options.max_poll_interval,
        }
        if handle is not None:
            return DocumentJob.resume(self, handle, **kwargs)
        return DocumentJob(self, **kwargs)

    async def upload_document(
        self,
        content: bytes,
        *,
        filename: str,
        source_lang: str | None,
        target_lang: str,
        formality: Formality | str | None = None,
        glossary: GlossaryRef | None = None,
        timeout: float | None = None,
    ) -> DocumentHandle:
        """Upload a document for translation.

        Returns:
            Handle for status queries and the download.
        """
        fields = self._translation_params(source_lang, target_lang, formality, glossary)
        payload = await self._with_deadline(
            self._api_call(
                "POST",
                "/v2/document",
                data=fields,
                files={"file": (filename, content)},
            ),
            timeout,
        )
        try:
            return DocumentHandle(
                document_id=payload["document_id"],
                document_key=payload["document_key"],
            )
        except (KeyError, TypeError) as e:
            raise DeserializationError(f"Invalid document upload response: {e}") from e

    async def get_document_status(
        self,
        handle: DocumentHandle,
        *,
        timeout: float | None = None,
    ) -> DocumentStatus:
        """Query the status of an uploaded document."""
        payload = await self._with_deadline(
            self._api_call(
                "POST",
                f"/v2/document/{handle.document_id}",
                data={"document_key": handle.document_key},
            ),
            timeout,
        )
        return DocumentStatus.from_json(payload)

    async def wait_until_document_translation_complete(
        self,
        handle: DocumentHandle,
        *,
        timeout: float | None = None,
    ) -> DocumentStatus:
        """Poll an uploaded document until it is done or failed.

        Returns:
            The terminal status; check ``status.ok`` before downloading.
        """
        job = self._document_job(handle)
        return await self._with_deadline(job.wait(), timeout)

    async def download_document(
        self,
        handle: DocumentHandle,
        *,
        timeout: float | None = None,
    ) -> bytes:
        """Fetch a translated document.

        Raises:
            DocumentNotReadyError: If the translation is not done yet.
        """
        return await self._with_deadline(
            self._api_call(
                "POST",
                f"/v2/document/{handle.document_id}/result",
                data={"document_key": handle.document_key},
                expect_json=False,
                document_download=True,
            ),
            timeout,
        )

    async def get_usage(self, *, timeout: float | None = None) -> Usage:
        """Fetch usage and limits for the current billing period."""
        payload = await self._with_deadline(self._api_call("GET", "/v2/usage"), timeout)
        return Usage.from_json(payload)

    async def get_source_languages(self, *, timeout: float | None = None) -> list[Language]:
        """List source languages. ``supports_formality`` is always None."""
        return await self._get_languages("source", timeout)

    async def get_target_languages(self, *, timeout: float | None = None) -> list[Language]:
        """List target languages with their formality support."""
        return await self._get_languages("target", timeout)

    async def _get_languages(self, kind: str, timeout: float | None) -> list[Language]:
        payload = await self._with_deadline(
            self._api_call("GET", "/v2/languages", params={"type": kind}), timeout
        )
        try:
            return [
                Language(
                    code=item["language"].lower(),
                    name=item["name"],
                    supports_formality=(
                        bool(item.get("supports_formality", False))
                        if kind == "target"
                        else None
                    ),
                )
                for item in payload
            ]
        except (KeyError, TypeError, AttributeError) as e:
            raise DeserializationError(f"Invalid languages response: {e}") from e

    async def get_glossary_language_pairs(
        self, *, timeout: float | None = None
    ) -> list[GlossaryLanguagePair]:
        """List language pairs supported for glossaries."""
        payload = await self._with_deadline(
            self._api_call("GET", "/v2/glossary-language-pairs"), timeout
        )
        try:
            pairs = [
                GlossaryLanguagePair(
                    source_lang=item["source_lang"].lower(),
                    target_lang=item["target_lang"].lower(),
                )
                for item in payload["supported_languages"]
            ]
        except (KeyError, TypeError, AttributeError) as e:
            raise DeserializationError(f"Invalid glossary language pairs: {e}") from e
        if not pairs:
            raise DeserializationError("Service returned no glossary language pairs")
        for pair in pairs:
            if not pair.source_lang or not pair.target_lang:
                raise DeserializationError(f"Glossary language pair has an empty code: {pair}")
        return pairs

    async def create_glossary(
        self,
        name: str,
        source_lang: str,
        target_lang: str,
        entries: Mapping[str, str],
        *,
        timeout: float | None = None,
    ) -> GlossaryInfo:
        """Create a glossary from source/target term pairs."""
        if not name:
            raise ConfigurationError("glossary name must not be empty")
        source = validate_source_lang(source_lang)
        if source is None:
            raise ConfigurationError("source_lang is required for a glossary")
        if not target_lang or not target_lang.strip():
            raise ConfigurationError("target_lang must not be empty")
        data = {
            "name": name,
            "source_lang": source,
            "target_lang": nonregional_language_code(target_lang),
            "entries": entries_to_tsv(entries),
            "entries_format": "tsv",
        }
        payload = await self._with_deadline(
            self._api_call("POST", "/v2/glossaries", data=data, glossary=True), timeout
        )
        return GlossaryInfo.from_json(payload)

    async def get_glossary(
        self, glossary: GlossaryRef, *, timeout: float | None = None
    ) -> GlossaryInfo:
        """Fetch metadata of one glossary.

        Raises:
            GlossaryNotFoundError: If the glossary does not exist.
        """
        payload = await self._with_deadline(
            self._api_call(
                "GET", f"/v2/glossaries/{_glossary_id(glossary)}", glossary=True
            ),
            timeout,
        )
        return GlossaryInfo.from_json(payload)

    async def list_glossaries(self, *, timeout: float | None = None) -> list[GlossaryInfo]:
        payload = await self._with_deadline(
            self._api_call("GET", "/v2/glossaries", glossary=True), timeout
        )
        try:
            items = payload["glossaries"]
        except (KeyError, TypeError) as e:
            raise DeserializationError(f"Invalid glossary list: {e}") from e
        return [GlossaryInfo.from_json(item) for item in items]

    async def get_glossary_entries(
        self, glossary: GlossaryRef, *, timeout: float | None = None
    ) -> dict[str, str]:
        """Fetch the entries of one glossary as a source -> target mapping."""
        body = await self._with_deadline(
            self._api_call(
                "GET",
                f"/v2/glossaries/{_glossary_id(glossary)}/entries",
                headers={"Accept": "text/tab-separated-values"},
                expect_json=False,
                glossary=True,
            ),
            timeout,
        )
        try:
            tsv = body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DeserializationError(f"Glossary entries are not UTF-8: {e}") from e
        return entries_from_tsv(tsv)

    async def delete_glossary(
        self, glossary: GlossaryRef, *, timeout: float | None = None
    ) -> None:
        await self._with_deadline(
            self._api_call(
                "DELETE", f"/v2/glossaries/{_glossary_id(glossary)}", glossary=True
            ),
            timeout,
        )


def _read_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


# Read once at import; os.umask() is process-wide and not thread-safe
_UMASK = _read_umask()


def _write_atomically(path: Path, content: bytes) -> None:
    """Write ``content`` beside ``path`` and rename it into place.

    The file gets the permissions a plain ``open()`` would give it, and no
    temporary file is left behind if writing fails.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
    temp_path = Path(name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
        os.chmod(temp_path, 0o666 & ~_UMASK)
        os.replace(temp_path, path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise
