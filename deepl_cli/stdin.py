"""Acquire the text to translate from the command line or standard input."""

from __future__ import annotations

import os
import queue
import sys
import threading
from typing import Optional, TextIO, Tuple, Union

from .args import ParsedRequest

DEFAULT_STDIN_TIMEOUT = 0.1
STDIN_TIMEOUT_ENV = "DEEPL_CLI_STDIN_TIMEOUT"

NO_TEXT_MESSAGE = (
    "No text provided. Pass text as an argument or pipe via stdin.\n"
    "Use --help for usage information."
)
EMPTY_TEXT_MESSAGE = "Empty text provided.\nUse --help for usage information."

_Outcome = Tuple[str, Union[str, Exception]]


class TextAcquisitionError(RuntimeError):
    """Raised when there is no usable text to translate."""


def stdin_timeout() -> float:
    """Return the first-chunk wait in seconds, honouring ``DEEPL_CLI_STDIN_TIMEOUT``."""

    raw = os.environ.get(STDIN_TIMEOUT_ENV)
    if raw in (None, ""):
        return DEFAULT_STDIN_TIMEOUT
    try:
        value = float(raw)  # type: ignore[arg-type]
    except ValueError:
        return DEFAULT_STDIN_TIMEOUT
    return value if value > 0 else DEFAULT_STDIN_TIMEOUT


def read_stdin(stream: TextIO, *, timeout: float = DEFAULT_STDIN_TIMEOUT) -> str:
    """Read ``stream`` to the end once its first chunk arrives within ``timeout``.

    A daemon thread blocks on the first read while the caller waits on a queue
    with a deadline. When the deadline passes first the reader is abandoned and
    :class:`TextAcquisitionError` is raised. End of stream before any data
    yields ``""``.
    """

    outcome: "queue.Queue[_Outcome]" = queue.Queue(maxsize=1)

    def _first_chunk() -> None:
        try:
            outcome.put(("data", stream.read(1)))
        except Exception as exc:  # noqa: BLE001 - re-raised by the waiting thread
            outcome.put(("error", exc))

    reader = threading.Thread(target=_first_chunk, name="deepl-cli-stdin", daemon=True)
    reader.start()

    try:
        _, payload = outcome.get(timeout=timeout)
    except queue.Empty:
        raise TextAcquisitionError(NO_TEXT_MESSAGE) from None

    if isinstance(payload, UnicodeDecodeError):
        raise TextAcquisitionError(f"Failed to decode stdin: {payload}") from payload
    if isinstance(payload, Exception):
        raise TextAcquisitionError(NO_TEXT_MESSAGE) from payload

    first = str(payload)
    if not first:
        return ""
    try:
        rest = stream.read()
    except UnicodeDecodeError as exc:
        raise TextAcquisitionError(f"Failed to decode stdin: {exc}") from exc
    except OSError as exc:
        raise TextAcquisitionError(NO_TEXT_MESSAGE) from exc
    return (first + rest).strip()


def acquire_text(
    request: ParsedRequest,
    stream: Optional[TextIO] = None,
    *,
    timeout: Optional[float] = None,
) -> str:
    if request.text:
        text = request.text
    else:
        source = stream if stream is not None else sys.stdin
        if source is None or source.isatty():
            raise TextAcquisitionError(NO_TEXT_MESSAGE)
        text = read_stdin(source, timeout=stdin_timeout() if timeout is None else timeout)

    if not text:
        raise TextAcquisitionError(EMPTY_TEXT_MESSAGE)
    return text


__all__ = [
    "DEFAULT_STDIN_TIMEOUT",
    "EMPTY_TEXT_MESSAGE",
    "NO_TEXT_MESSAGE",
    "TextAcquisitionError",
    "acquire_text",
    "read_stdin",
    "stdin_timeout",
]
