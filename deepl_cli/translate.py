"""Thin adapter around the DeepL SDK's ``translate_text`` call."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Sequence

import deepl

from . import __version__

APP_NAME = "deepl-cli"


class TextTranslator(Protocol):
    """The part of :class:`deepl.DeepLClient` this module relies on."""

    def translate_text(
        self,
        text: str,
        *,
        source_lang: Optional[str] = None,
        target_lang: str,
        **options: Any,
    ) -> Any:
        ...


@dataclass(frozen=True)
class TranslationRequest:
    text: str
    source_lang: Optional[str]
    target_lang: str
    context: Optional[str] = None
    formality: Optional[str] = None


@dataclass(frozen=True)
class TranslationResult:
    text: str
    detected_source_lang: str
    billed_characters: int


def create_client(api_key: str) -> deepl.DeepLClient:
    client = deepl.DeepLClient(api_key)
    client.set_app_info(APP_NAME, __version__)
    return client


def build_options(request: TranslationRequest) -> Dict[str, str]:
    """Collect the optional keyword arguments for ``translate_text``.

    Keys are left out entirely when the caller did not set them; DeepL treats
    an absent ``formality`` differently from an explicit ``"default"``.
    """

    options: Dict[str, str] = {}
    if request.context:
        options["context"] = request.context
    if request.formality:
        options["formality"] = request.formality
    return options


def translate(client: TextTranslator, request: TranslationRequest) -> TranslationResult:
    """Translate ``request.text`` with ``client``.

    Errors raised by the client (authorization, quota, connection problems)
    are not caught here.
    """

    response = client.translate_text(
        request.text,
        source_lang=request.source_lang,
        target_lang=request.target_lang,
        **build_options(request),
    )

    single = response[0] if isinstance(response, Sequence) and not isinstance(response, str) else response

    return TranslationResult(
        text=single.text,
        detected_source_lang=single.detected_source_lang,
        billed_characters=single.billed_characters,
    )


__all__ = [
    "TextTranslator",
    "TranslationRequest",
    "TranslationResult",
    "build_options",
    "create_client",
    "translate",
]
