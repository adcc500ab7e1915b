from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Union

import pytest


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[Union[dict, str]], Path]:
    """Write a ``config.json`` into a temporary directory and return its path."""

    def _write(content: Union[dict, str]) -> Path:
        path = tmp_path / "deepl-cli" / "config.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        raw = content if isinstance(content, str) else json.dumps(content)
        path.write_text(raw, encoding="utf-8")
        return path

    return _write
