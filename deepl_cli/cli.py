"""Command line interface for deepl-cli."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, List, Optional, TextIO

from . import __version__
from .args import ArgumentError, Mode, ParsedRequest, format_help, parse_cli_args
from .config import (
    CommandRunner,
    ConfigError,
    CredentialError,
    default_config_path,
    load_config,
    resolve_api_key,
    run_shell_command,
)
from .stdin import TextAcquisitionError, acquire_text
from .translate import TextTranslator, TranslationRequest, create_client, translate

ClientFactory = Callable[[str], TextTranslator]


def _fail(stderr: TextIO, exc: BaseException) -> int:
    print(f"Error: {exc}", file=stderr)
    return 1


def _debug(parsed: ParsedRequest, stderr: TextIO, message: str) -> None:
    if parsed.debug:
        print(f"[debug] {message}", file=stderr)


def run(
    argv: Optional[List[str]] = None,
    *,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
    config_path: Optional[Path] = None,
    client_factory: ClientFactory = create_client,
    runner: CommandRunner = run_shell_command,
) -> int:
    out = stdout if stdout is not None else sys.stdout
    err = stderr if stderr is not None else sys.stderr

    try:
        parsed = parse_cli_args(sys.argv[1:] if argv is None else argv)
    except ArgumentError as exc:
        return _fail(err, exc)

    if parsed.mode is Mode.HELP:
        out.write(format_help())
        return 0
    if parsed.mode is Mode.VERSION:
        print(__version__, file=out)
        return 0

    try:
        text = acquire_text(parsed, stdin)
    except TextAcquisitionError as exc:
        return _fail(err, exc)

    path = parsed.config_path or config_path or default_config_path()
    _debug(parsed, err, f"config={path}")
    try:
        config = load_config(path)
        api_key = resolve_api_key(config, runner=runner)
    except (ConfigError, CredentialError) as exc:
        return _fail(err, exc)
    _debug(parsed, err, f"api key from {'api_key_command' if config.api_key_command else 'api_key'}")

    request = TranslationRequest(
        text=text,
        source_lang=parsed.source,
        target_lang=parsed.target,
        context=parsed.context,
        formality=parsed.formality,
    )
    _debug(
        parsed,
        err,
        f"translate source={request.source_lang or 'auto'} target={request.target_lang}"
        f" context={'yes' if request.context else 'no'} formality={request.formality or '-'} chars={len(text)}",
    )

    try:
        client = client_factory(api_key)
        result = translate(client, request)
    except Exception as exc:
        return _fail(err, exc)

    print(result.text, file=out)

    if parsed.verbose:
        print(f"Detected source language: {result.detected_source_lang}", file=err)
        print(f"Billed characters: {result.billed_characters}", file=err)
    return 0


def main() -> None:
    sys.exit(run())


__all__ = ["main", "run"]
