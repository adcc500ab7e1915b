"""Argument parsing for the deepl-cli command."""

from __future__ import annotations

import argparse
import enum
from dataclasses import dataclass
from pathlib import Path
from typing import List, NoReturn, Optional, Sequence

FORMALITY_VALUES: tuple[str, ...] = (
    "less",
    "more",
    "default",
    "prefer_less",
    "prefer_more",
)

_USAGE_HINT = "Use --help for usage information."

_EXAMPLES = """\
Examples:
  deepl-cli -t de "Hello, world!"
  deepl-cli -t de -c "Email greeting" "Hello"
  echo "Hello" | deepl-cli -t de
  deepl-cli -t de -f more "How are you?"
"""


class ArgumentError(ValueError):
    """Raised when the command line cannot be turned into a request."""


class Mode(str, enum.Enum):
    TRANSLATE = "translate"
    HELP = "help"
    VERSION = "version"


@dataclass(frozen=True)
class ParsedRequest:
    target: str = ""
    source: Optional[str] = None
    context: Optional[str] = None
    formality: Optional[str] = None
    verbose: bool = False
    mode: Mode = Mode.TRANSLATE
    text: Optional[str] = None
    config_path: Optional[Path] = None
    debug: bool = False


class _RaisingParser(argparse.ArgumentParser):
    """``ArgumentParser`` that raises instead of printing usage and exiting."""

    def error(self, message: str) -> NoReturn:
        raise ArgumentError(f"{message}\n{_USAGE_HINT}")


def build_parser() -> argparse.ArgumentParser:
    parser = _RaisingParser(
        prog="deepl-cli",
        usage="%(prog)s [options] [text ...]",
        description="Translate text using the DeepL API.",
        epilog=_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument("text", nargs="*", help="Text to translate (or pipe via stdin)")
    parser.add_argument("-t", "--target", metavar="LANG", help='Target language code (required, e.g. "de", "en-US")')
    parser.add_argument("-s", "--source", metavar="LANG", help="Source language code (default: auto-detect)")
    parser.add_argument(
        "-c",
        "--context",
        metavar="TEXT",
        help="Additional context for translation (not translated, not billed)",
    )
    parser.add_argument(
        "-f",
        "--formality",
        metavar="LEVEL",
        help=f"Formality: {', '.join(FORMALITY_VALUES)}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show metadata (detected source language, billed characters)",
    )
    parser.add_argument("--config", metavar="PATH", default=None, help="Path to the JSON configuration file")
    parser.add_argument("--debug", action="store_true", help="Print diagnostic information to stderr")
    parser.add_argument("-h", "--help", action="store_true", help="Show this help")
    parser.add_argument("--version", action="store_true", help="Show version")
    return parser


def format_help() -> str:
    return build_parser().format_help()


def parse_cli_args(argv: Sequence[str]) -> ParsedRequest:
    """Turn ``argv`` (without the program name) into a :class:`ParsedRequest`.

    ``--help`` wins over every other option and ``--version`` over everything
    but ``--help``; neither requires ``--target``. An empty ``argv`` is treated
    as a request for help.
    """

    tokens: List[str] = list(argv)
    if not tokens:
        return ParsedRequest(mode=Mode.HELP)

    args = build_parser().parse_intermixed_args(tokens)

    if args.help:
        return ParsedRequest(mode=Mode.HELP)
    if args.version:
        return ParsedRequest(mode=Mode.VERSION)

    if not args.target:
        raise ArgumentError(f"Missing required option: --target (-t)\n{_USAGE_HINT}")

    if args.formality and args.formality not in FORMALITY_VALUES:
        raise ArgumentError(
            f'Invalid formality value: "{args.formality}"\n'
            f"Valid values: {', '.join(FORMALITY_VALUES)}"
        )

    return ParsedRequest(
        target=args.target,
        source=args.source or None,
        context=args.context,
        formality=args.formality or None,
        verbose=args.verbose,
        mode=Mode.TRANSLATE,
        text=" ".join(args.text) if args.text else None,
        config_path=Path(args.config).expanduser() if args.config else None,
        debug=args.debug,
    )


__all__ = [
    "ArgumentError",
    "FORMALITY_VALUES",
    "Mode",
    "ParsedRequest",
    "build_parser",
    "format_help",
    "parse_cli_args",
]
