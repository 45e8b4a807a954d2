"""
Command-line interface for xcstrings-translator.

Provides CLI commands for working with a local Ollama server:
- check: Verify that the Ollama server is reachable
- models: List the models installed on the server
- translate: Translate a single string
- batch: Translate a JSON file of catalog strings

Usage:
    xcstrings-translate check [--url URL]
    xcstrings-translate models [--url URL]
    xcstrings-translate translate TEXT --source en --target fr [--stream]
    xcstrings-translate batch strings.json --source en --target de > de.json

Environment Variables:
    XCT_OLLAMA_URL: Ollama base URL (default: http://127.0.0.1:11434)
    XCT_MODEL: Model tag used for translation
    XCT_LOG_LEVEL: Logging level (default: INFO)

Ctrl+C during translate/batch cancels the running request cleanly and
exits with status 130.
"""

import argparse
import json
import sys
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from xcstrings_translator import __version__
from xcstrings_translator.config import config, configure_logging, get_config_status
from xcstrings_translator.translation import (
    BatchEntry,
    CancellationToken,
    OllamaClient,
    OllamaError,
    TranslationCancelled,
    TranslationRequest,
    translate_batch,
)

T = TypeVar("T")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CANCELLED = 130


def _make_client() -> OllamaClient:
    return OllamaClient.from_settings(config.ollama)


def _base_url(args: argparse.Namespace) -> str:
    return args.url or config.ollama.base_url


def _model(args: argparse.Namespace) -> str:
    return args.model or config.ollama.model


def _config_source() -> str:
    status = get_config_status()
    if status["config_file_exists"]:
        return status["config_file_path"]
    if status["using_example"]:
        return "example config (no translator.ini)"
    return "built-in defaults"


def run_cancellable(work: Callable[[], T], token: CancellationToken) -> T:
    """
    Run ``work`` on a worker thread, turning Ctrl+C into ``token.cancel()``.

    The main thread only waits, so KeyboardInterrupt is delivered there and
    never tears through the middle of an HTTP read.  The worker notices the
    cancelled token at its next check and raises TranslationCancelled,
    which is re-raised here.  A second Ctrl+C while waiting for the worker
    raises TranslationCancelled at once.
    """
    outcome: dict[str, Any] = {}

    def target() -> None:
        try:
            outcome["value"] = work()
        except BaseException as exc:  # noqa: BLE001 - re-raised on the main thread
            outcome["error"] = exc

    worker = threading.Thread(target=target, name="xct-translate", daemon=True)
    worker.start()
    try:
        while worker.is_alive():
            worker.join(0.1)
    except KeyboardInterrupt:
        token.cancel("Cancelled by user")
        try:
            worker.join()
        except KeyboardInterrupt:
            # Second Ctrl+C: stop waiting for the worker.
            raise TranslationCancelled(token.reason) from None

    if "error" in outcome:
        raise outcome["error"]
    return outcome["value"]


def load_batch_entries(path: Path) -> list[BatchEntry]:
    """
    Read batch entries from a JSON file.

    Two shapes are accepted:
        {"greeting": "Hello", "farewell": "Goodbye"}
        [{"key": "greeting", "source_text": "Hello", "comment": "Home screen"}]

    Raises:
        ValueError: If the file is not one of the accepted shapes.
    """
    data = json.loads(path.read_text(encoding="utf-8"))

    if isinstance(data, dict):
        return [BatchEntry(key=str(key), source_text=str(text)) for key, text in data.items()]

    if isinstance(data, list):
        entries = []
        for index, item in enumerate(data):
            if not isinstance(item, dict) or "key" not in item or "source_text" not in item:
                raise ValueError(f"entry {index} must be an object with 'key' and 'source_text'")
            comment = item.get("comment")
            entries.append(
                BatchEntry(
                    key=str(item["key"]),
                    source_text=str(item["source_text"]),
                    comment=str(comment) if comment is not None else None,
                )
            )
        return entries

    raise ValueError("batch file must contain a JSON object or a JSON array")


# ============================================================================
# COMMANDS
# ============================================================================


def cmd_check(args: argparse.Namespace) -> int:
    """
    Check whether the Ollama server answers.

    Returns:
        0 if reachable, 1 otherwise
    """
    base_url = _base_url(args)
    print(f"Config: {_config_source()}")
    with _make_client() as client:
        reachable = client.check_connection(base_url)

    if reachable:
        print(f"Ollama is reachable at {base_url}")
        return EXIT_OK
    print(
        f"Cannot reach Ollama at {base_url}. Make sure it is running (try 127.0.0.1:11434).",
        file=sys.stderr,
    )
    return EXIT_ERROR


def cmd_models(args: argparse.Namespace) -> int:
    """
    List models installed on the Ollama server.

    Returns:
        0 on success (even if no models are installed), 1 if unreachable
    """
    base_url = _base_url(args)
    with _make_client() as client:
        if not client.check_connection(base_url):
            print(f"Cannot reach Ollama at {base_url}.", file=sys.stderr)
            return EXIT_ERROR
        models = client.list_models(base_url)

    if not models:
        print("No models found.")
        return EXIT_OK

    print("Available models:")
    for model in models:
        print(f"  - {model.name} (size: {model.size}, modified: {model.modified_at})")
    return EXIT_OK


def cmd_translate(args: argparse.Namespace) -> int:
    """
    Translate a single string and print the result.

    With --stream, tokens are echoed to stderr as they arrive and the final
    extracted translation is printed to stdout.

    Returns:
        0 on success, 1 on translation error, 130 if cancelled
    """
    token = CancellationToken()

    def echo(fragment: str) -> None:
        sys.stderr.write(fragment)
        sys.stderr.flush()

    request = TranslationRequest(
        text=args.text,
        source_locale=args.source,
        target_locale=args.target,
        base_url=_base_url(args),
        model=_model(args),
        cancellation=token,
        on_token=echo if args.stream else None,
    )

    try:
        with _make_client() as client:
            translation = run_cancellable(lambda: client.translate_text(request), token)
    except TranslationCancelled:
        print("\nCancelled.", file=sys.stderr)
        return EXIT_CANCELLED
    except OllamaError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    if args.stream:
        sys.stderr.write("\n")
    print(translation)
    return EXIT_OK


def cmd_batch(args: argparse.Namespace) -> int:
    """
    Translate every entry of a JSON file and write results as JSON to stdout.

    Progress lines go to stderr so stdout can be redirected to a file.

    Returns:
        0 if every entry translated, 1 if any entry failed or the file is
        invalid, 130 if cancelled
    """
    try:
        entries = load_batch_entries(Path(args.file))
    except (OSError, ValueError) as e:
        print(f"Error reading {args.file}: {e}", file=sys.stderr)
        return EXIT_ERROR

    token = CancellationToken()

    def progress(completed: int, total: int, key: str, translation: str) -> None:
        print(f"[{completed}/{total}] {key}: {translation or '-'}", file=sys.stderr)

    try:
        with _make_client() as client:
            results = run_cancellable(
                lambda: translate_batch(
                    entries,
                    source_locale=args.source,
                    target_locale=args.target,
                    base_url=_base_url(args),
                    model=_model(args),
                    cancellation=token,
                    on_progress=progress,
                    client=client,
                ),
                token,
            )
    except TranslationCancelled:
        print("Cancelled.", file=sys.stderr)
        return EXIT_CANCELLED

    json.dump([r.to_dict() for r in results], sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")

    failed = sum(1 for r in results if not r.ok)
    if failed:
        print(f"{failed} of {len(results)} entries failed.", file=sys.stderr)
        return EXIT_ERROR
    return EXIT_OK


# ============================================================================
# ENTRY POINT
# ============================================================================


def _add_server_options(parser: argparse.ArgumentParser, *, with_model: bool) -> None:
    parser.add_argument(
        "--url",
        type=str,
        help=f"Ollama base URL (default: {config.ollama.base_url}, or XCT_OLLAMA_URL env var)",
    )
    if with_model:
        parser.add_argument(
            "--model",
            "-m",
            type=str,
            help="Model tag to translate with (default: XCT_MODEL env var or config)",
        )


def _add_locale_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--source", "-s", required=True, help="Source locale, e.g. en")
    parser.add_argument("--target", "-t", required=True, help="Target locale, e.g. pt_BR")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="xcstrings-translate",
        description="Translate localization catalog strings with a local Ollama model",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # check command
    check_parser = subparsers.add_parser(
        "check",
        help="Check that the Ollama server is reachable",
    )
    _add_server_options(check_parser, with_model=False)
    check_parser.set_defaults(func=cmd_check)

    # models command
    models_parser = subparsers.add_parser(
        "models",
        help="List models installed on the Ollama server",
    )
    _add_server_options(models_parser, with_model=False)
    models_parser.set_defaults(func=cmd_models)

    # translate command
    translate_parser = subparsers.add_parser(
        "translate",
        help="Translate a single string",
    )
    translate_parser.add_argument("text", help="Text to translate")
    _add_locale_options(translate_parser)
    _add_server_options(translate_parser, with_model=True)
    translate_parser.add_argument(
        "--stream",
        action="store_true",
        help="Echo tokens to stderr as they are generated",
    )
    translate_parser.set_defaults(func=cmd_translate)

    # batch command
    batch_parser = subparsers.add_parser(
        "batch",
        help="Translate a JSON file of strings",
        description=(
            "Translate a JSON object of {key: text} or an array of "
            "{key, source_text, comment} objects. Results are written to stdout."
        ),
    )
    batch_parser.add_argument("file", help="Path to the JSON file")
    _add_locale_options(batch_parser)
    _add_server_options(batch_parser, with_model=True)
    batch_parser.set_defaults(func=cmd_batch)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    configure_logging()
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
