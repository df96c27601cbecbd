import argparse
import json
import logging
import os
import random
import sys
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, TextColumn, TimeElapsedColumn

from .bits import BITS_PER_BYTE
from .charsets import CHARSET_NAMES
from .codec import (
    CodecConfig,
    CodecKey,
    decode_text_to_data,
    encode_data_to_text,
    load_codec_key,
    save_codec_key,
)
from .method import VARIANT_NAMES, cover_capacity
from .observer import DataWritten, EventNotifier, Finished, Observer
from .text import (
    LineSeparator,
    determine_pivot,
    graphemes_length,
    split_words,
    verify_pivot,
)

logger = logging.getLogger(__name__)

stderr_console = Console(stderr=True)

_VERBOSITY_LEVELS = [logging.ERROR, logging.WARNING, logging.INFO, logging.DEBUG]


def _read_bytes(path: str) -> bytes:
    if path == "-":
        return sys.stdin.buffer.read()
    with open(path, "rb") as f:
        return f.read()


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def _write_bytes(path: str, data: bytes) -> None:
    if path == "-":
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
    else:
        with open(path, "wb") as f:
            f.write(data)


def _write_text(path: str, text: str) -> None:
    if path == "-":
        sys.stdout.write(text)
        sys.stdout.flush()
    else:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(text)


def _emit_json(path: str, kind: str, result) -> None:
    _write_text(path, json.dumps({"type": kind, "result": result}) + "\n")


def configure_logging(verbosity: int) -> None:
    level = _VERBOSITY_LEVELS[min(verbosity, len(_VERBOSITY_LEVELS) - 1)]
    package_logger = logging.getLogger(__package__)
    for handler in list(package_logger.handlers):
        if isinstance(handler, RichHandler):
            package_logger.removeHandler(handler)
    package_logger.addHandler(RichHandler(console=stderr_console, show_path=False))
    package_logger.setLevel(level)


class ProgressObserver(Observer):
    """Drives a rich progress bar from conceal progress events."""

    def __init__(self, progress: Progress, total_bits: int):
        self._progress = progress
        self._total = total_bits
        self._task = progress.add_task("Concealing", total=total_bits)

    def on_notify(self, event) -> None:
        if isinstance(event, DataWritten):
            self._progress.advance(self._task, event.amount)
        elif isinstance(event, Finished):
            self._progress.update(self._task, completed=self._total)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Hide data in the line layout and whitespace of a cover text"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-o", "--output", default="-", help="Output path ('-' for stdout)"
    )
    common.add_argument(
        "--json", action="store_true", help="Emit a JSON object instead of raw output"
    )
    common.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v warning, -vv info, -vvv debug)",
    )

    method = argparse.ArgumentParser(add_help=False)
    method.add_argument("--pivot", type=int, default=None)
    method.add_argument("--variant", choices=VARIANT_NAMES, default=None)
    method.add_argument("--charset", choices=CHARSET_NAMES, default=None)
    method.add_argument(
        "--line-separator",
        choices=[member.value for member in LineSeparator],
        default=None,
    )

    enc = subparsers.add_parser("encode", parents=[common, method])
    enc.add_argument("--cover", required=True, help="Path to the cover text")
    enc.add_argument("--data", required=True, help="Path to the bytes to hide")
    enc.add_argument(
        "--key",
        help="Path to the codec key (loads existing values and writes updates)",
    )
    enc.add_argument("--seed", type=int, default=None)

    dec = subparsers.add_parser("decode", parents=[common, method])
    dec.add_argument("--text", required=True, help="Path to the stego text")
    dec.add_argument("--key", help="Path to the codec key written during encode")
    dec.add_argument(
        "--length",
        type=int,
        default=None,
        help="Number of bytes to keep (overrides the key)",
    )

    cap = subparsers.add_parser("capacity", parents=[common])
    cap.add_argument("--cover", required=True, help="Path to the cover text")
    cap.add_argument("--pivot", type=int, required=True)
    cap.add_argument("--charset", choices=CHARSET_NAMES, default="one_bit")

    return parser


def _pick(value, key: Optional[CodecKey], field: str, default=None):
    if value is not None:
        return value
    if key is not None:
        return getattr(key, field)
    return default


def run_encode(args) -> None:
    key_from_input = (
        load_codec_key(args.key) if args.key and os.path.exists(args.key) else None
    )
    cover = _read_text(args.cover)
    payload = _read_bytes(args.data)

    pivot = _pick(args.pivot, key_from_input, "pivot")
    if pivot is None:
        pivot = determine_pivot(cover)
        logger.warning("No pivot given, using %d derived from the cover", pivot)

    cfg = CodecConfig(
        pivot=pivot,
        variant=_pick(args.variant, key_from_input, "variant", "v1"),
        charset=_pick(args.charset, key_from_input, "charset", "one_bit"),
        line_separator=_pick(args.line_separator, key_from_input, "line_separator"),
        seed=args.seed,
    )
    rng = random.Random(args.seed) if args.seed is not None else random.SystemRandom()

    notifier = EventNotifier()
    if stderr_console.is_terminal and not args.json:
        with Progress(
            TextColumn("{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total} bits"),
            TimeElapsedColumn(),
            console=stderr_console,
            transient=True,
        ) as progress:
            notifier.subscribe(ProgressObserver(progress, len(payload) * BITS_PER_BYTE))
            text, key = encode_data_to_text(payload, cover, cfg, rng=rng, notifier=notifier)
    else:
        text, key = encode_data_to_text(payload, cover, cfg, rng=rng, notifier=notifier)

    if args.key:
        save_codec_key(key, args.key)
    if args.json:
        _emit_json(args.output, "success", text)
    else:
        _write_text(args.output, text)


def run_decode(args) -> None:
    key_from_input = None
    if args.key:
        if not os.path.exists(args.key):
            raise ValueError("--key file not found; create one during encode first")
        key_from_input = load_codec_key(args.key)

    pivot = _pick(args.pivot, key_from_input, "pivot")
    if pivot is None:
        raise ValueError("pivot is required unless present in --key")
    key = CodecKey(
        pivot=pivot,
        variant=_pick(args.variant, key_from_input, "variant", "v1"),
        charset=_pick(args.charset, key_from_input, "charset", "one_bit"),
        line_separator=_pick(
            args.line_separator, key_from_input, "line_separator", LineSeparator.UNIX.value
        ),
        payload_length=key_from_input.payload_length if key_from_input else None,
    )
    if args.length is not None and args.length < 0:
        raise ValueError("--length must be >= 0")

    encoded_text = _read_text(args.text)
    data = decode_text_to_data(encoded_text, key, length=args.length)
    if args.json:
        _emit_json(args.output, "success", data.decode("utf-8", errors="replace"))
    else:
        _write_bytes(args.output, data)


def run_capacity(args) -> None:
    cover = _read_text(args.cover)
    verify_pivot(cover, args.pivot)
    text_length = sum(graphemes_length(word) for word in split_words(cover))
    if args.pivot >= text_length:
        raise ValueError("Pivot is greater than the cover text length.")
    bits = cover_capacity(cover, args.pivot, args.charset)
    if args.json:
        _emit_json(args.output, "success", bits)
    else:
        _write_text(args.output, f"{bits}\n")


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        if args.command == "encode":
            run_encode(args)
        elif args.command == "decode":
            run_decode(args)
        elif args.command == "capacity":
            run_capacity(args)
        else:
            parser.error("Unknown command")
    except ValueError as exc:
        if args.json:
            _emit_json(args.output, "error", str(exc))
            sys.exit(1)
        parser.error(str(exc))


__all__ = [
    "ProgressObserver",
    "build_arg_parser",
    "configure_logging",
    "main",
    "run_capacity",
    "run_decode",
    "run_encode",
]
