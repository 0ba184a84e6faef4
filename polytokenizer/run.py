"""CLI entry point: python -m polytokenizer.run

Usage:
    python -m polytokenizer.run count openai/gpt-4o "Hello world"
    python -m polytokenizer.run embed openai/text-embedding-3-small "Hello" --dimensions 256
    python -m polytokenizer.run split openai/gpt-4o 512 --file notes.txt
    python -m polytokenizer.run trim openai/gpt-4o 4096 --file chat.json --strategy late
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from polytokenizer._api import count_tokens, embed_text, split_text_max_tokens, trim_messages
from polytokenizer._models import SplitTextOptions, TrimOptions, TrimStrategy
from polytokenizer.providers import aclose_providers, configure
from polytokenizer.utils._exceptions import InvalidInputError, PolyTokenizerError
from polytokenizer.utils._logging import configure_logging, get_logger

_log = get_logger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="polytokenizer",
        description="Count tokens, embed text, and split or trim to a token budget.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to library config YAML (default: configs/polytokenizer.yaml).",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        help="Logging level (DEBUG, INFO, WARNING, ERROR).",
    )
    parser.add_argument(
        "--console-log",
        action="store_true",
        help="Use human-readable console logging instead of JSON.",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    count = sub.add_parser("count", help="Count tokens for a text.")
    count.add_argument("model", help='Model id, e.g. "openai/gpt-4o".')
    count.add_argument("text")

    embed = sub.add_parser("embed", help="Embed a text.")
    embed.add_argument("model", help='Embedding model id, e.g. "openai/text-embedding-3-small".')
    embed.add_argument("text")
    embed.add_argument("--dimensions", type=int, default=None)

    split = sub.add_parser("split", help="Split a text into max-token chunks.")
    split.add_argument("model")
    split.add_argument("max_tokens", type=int)
    split_src = split.add_mutually_exclusive_group(required=True)
    split_src.add_argument("text", nargs="?")
    split_src.add_argument("--file", type=Path, default=None)
    split.add_argument("--no-preserve-sentences", action="store_true")
    split.add_argument("--no-preserve-words", action="store_true")

    trim = sub.add_parser("trim", help="Trim a JSON message list to a token budget.")
    trim.add_argument("model")
    trim.add_argument("max_tokens", type=int)
    trim.add_argument("--file", type=Path, required=True, help="JSON array of messages.")
    trim.add_argument(
        "--strategy",
        choices=[s.value for s in TrimStrategy],
        default=TrimStrategy.EARLY.value,
    )
    trim.add_argument("--no-preserve-system", action="store_true")

    return parser


def _read_file(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Cannot read {path}: {exc}"
        raise InvalidInputError(msg) from exc


def _read_messages(path: Path) -> list[Any]:
    try:
        data = json.loads(_read_file(path))
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON in {path}: {exc}"
        raise InvalidInputError(msg) from exc
    if not isinstance(data, list):
        msg = f"Expected a JSON array of messages in {path}, got {type(data).__name__}"
        raise InvalidInputError(msg)
    return data


async def _dispatch(args: argparse.Namespace) -> Any:
    try:
        if args.command == "count":
            return {"model": args.model, "tokens": await count_tokens(args.model, args.text)}

        if args.command == "embed":
            result = await embed_text(args.model, args.text, args.dimensions)
            return result.model_dump()

        if args.command == "split":
            text = _read_file(args.file) if args.file else args.text
            options = SplitTextOptions(
                preserve_sentences=not args.no_preserve_sentences,
                preserve_words=not args.no_preserve_words,
            )
            return await split_text_max_tokens(text, args.model, args.max_tokens, options)

        messages = _read_messages(args.file)
        options = TrimOptions(
            strategy=TrimStrategy(args.strategy),
            preserve_system=not args.no_preserve_system,
        )
        trimmed = await trim_messages(messages, args.model, args.max_tokens, options)
        return [m.model_dump(exclude_none=True) for m in trimmed]
    finally:
        await aclose_providers()


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)

    configure_logging(log_level=args.log_level, json_output=not args.console_log)

    try:
        if args.config:
            configure(config_path=Path(args.config))
        output = asyncio.run(_dispatch(args))
    except PolyTokenizerError as exc:
        _log.error("command_failed", command=args.command, error=str(exc))
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(output, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
