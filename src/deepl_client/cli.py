# SPDX-License-Identifier: Apache-2.0
"""
deepl-client - command line interface

Usage:
    deepl-client <command> [options]

Examples:
    deepl-client usage
    deepl-client text "Hello, world" -t de
    deepl-client document report.docx -o report_de.docx -t de
    deepl-client languages --target
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import NoReturn

from dotenv import load_dotenv

from deepl_client.config import TranslatorOptions
from deepl_client.errors import DeepLError
from deepl_client.models import Formality
from deepl_client.translator import Translator

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed argument Namespace.
    """
    parser = argparse.ArgumentParser(
        prog="deepl-client",
        description="Translate text and documents with the DeepL API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables:
  DEEPL_AUTH_KEY    Authentication key (required unless --auth-key is given)
  DEEPL_SERVER_URL  Endpoint override (e.g. a local mock server)
  DEEPL_PROXY       Proxy URL
""",
    )

    parser.add_argument("--auth-key", help="Authentication key (or set DEEPL_AUTH_KEY)")
    parser.add_argument("--server-url", help="Endpoint override (or set DEEPL_SERVER_URL)")
    parser.add_argument("--proxy", help="Proxy URL (or set DEEPL_PROXY)")
    parser.add_argument(
        "--max-retries",
        type=int,
        default=5,
        help="Retries per request (default: 5)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Overall deadline per operation in seconds",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("usage", help="Show usage for this billing period")

    languages = commands.add_parser("languages", help="List supported languages")
    languages.add_argument(
        "--target",
        action="store_true",
        help="List target languages instead of source languages",
    )

    commands.add_parser("glossary-pairs", help="List glossary language pairs")

    text = commands.add_parser("text", help="Translate text")
    text.add_argument("text", nargs="+", help="Text(s) to translate")
    _add_language_options(text)

    document = commands.add_parser("document", help="Translate a document")
    document.add_argument("input", type=Path, help="Document to translate")
    document.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Output path (default: <input>_<target><suffix>)",
    )
    _add_language_options(document)

    return parser.parse_args()


def _add_language_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-s",
        "--source",
        default=None,
        help="Source language code (default: auto-detect)",
    )
    parser.add_argument(
        "-t",
        "--target",
        required=True,
        help="Target language code",
    )
    parser.add_argument(
        "--formality",
        choices=[f.value for f in Formality],
        help="Formality of the translation",
    )
    parser.add_argument("--glossary", help="Glossary ID (requires --source)")


def create_translator(args: argparse.Namespace) -> Translator:
    """Create translator from arguments and environment.

    Raises:
        SystemExit: If no auth key is configured.
    """
    auth_key = args.auth_key or os.environ.get("DEEPL_AUTH_KEY", "")
    if not auth_key:
        print(
            "Error: An auth key is required.\n"
            "  Set --auth-key option or DEEPL_AUTH_KEY environment variable.",
            file=sys.stderr,
        )
        sys.exit(1)

    options = TranslatorOptions(
        server_url=args.server_url or os.environ.get("DEEPL_SERVER_URL"),
        proxy=args.proxy or os.environ.get("DEEPL_PROXY"),
        max_retries=args.max_retries,
    )
    return Translator(auth_key, options)


def default_output_path(input_path: Path, target_lang: str) -> Path:
    return input_path.with_name(f"{input_path.stem}_{target_lang.lower()}{input_path.suffix}")


async def run(args: argparse.Namespace) -> int:
    """Execute the selected command.

    Returns:
        Exit code (0: success, 1: failure).
    """
    async with create_translator(args) as translator:
        try:
            if args.command == "usage":
                print(await translator.get_usage(timeout=args.timeout))

            elif args.command == "languages":
                if args.target:
                    languages = await translator.get_target_languages(timeout=args.timeout)
                else:
                    languages = await translator.get_source_languages(timeout=args.timeout)
                for language in languages:
                    suffix = " (supports formality)" if language.supports_formality else ""
                    print(f"{language.code}: {language.name}{suffix}")

            elif args.command == "glossary-pairs":
                pairs = await translator.get_glossary_language_pairs(timeout=args.timeout)
                for pair in pairs:
                    print(f"{pair.source_lang} -> {pair.target_lang}")

            elif args.command == "text":
                results = await translator.translate_text(
                    args.text,
                    args.source,
                    args.target,
                    formality=args.formality,
                    glossary=args.glossary,
                    timeout=args.timeout,
                )
                for result in results:
                    print(result.text)

            elif args.command == "document":
                input_path: Path = args.input
                if not input_path.exists():
                    print(f"Error: File not found: {input_path}", file=sys.stderr)
                    return 1
                output_path = args.output or default_output_path(input_path, args.target)
                print(f"Input: {input_path}")
                print(f"Output: {output_path}")
                status = await translator.translate_document(
                    input_path,
                    output_path,
                    args.source,
                    args.target,
                    formality=args.formality,
                    glossary=args.glossary,
                    timeout=args.timeout,
                )
                print(f"Complete: {output_path}")
                if status.billed_characters is not None:
                    print(f"  Billed characters: {status.billed_characters}")

        except (DeepLError, FileExistsError) as e:
            print(f"Error: {e}", file=sys.stderr)
            if args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    return 0


def main() -> NoReturn:
    """Main entry point."""
    load_dotenv()
    args = parse_args()

    # Configure logging
    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    exit_code = asyncio.run(run(args))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
