"""Configuration file loading and API key resolution."""

from __future__ import annotations

import json
import os
import subprocess
from pathlib import Path
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

CONFIG_DIR_NAME = "deepl-cli"
CONFIG_FILE_NAME = "config.json"

CommandRunner = Callable[[str], str]


class ConfigError(RuntimeError):
    """Raised when the configuration file is missing or unusable."""


class CredentialError(RuntimeError):
    """Raised when no API key can be obtained from the configuration."""


class DeepLConfig(BaseModel):
    """Contents of ``config.json``. Unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    api_key: Optional[str] = None
    api_key_command: Optional[str] = None


def default_config_path() -> Path:
    """Return ``$XDG_CONFIG_HOME/deepl-cli/config.json`` (``~/.config`` when unset)."""

    base = os.environ.get("XDG_CONFIG_HOME")
    config_home = Path(base).expanduser() if base else Path.home() / ".config"
    return config_home / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def _missing_file_message(path: Path) -> str:
    return (
        f"Config file not found: {path}\n"
        "Create it with:\n"
        f"  mkdir -p {path.parent}\n"
        f"  echo '{{\"api_key\": \"your-deepl-api-key\"}}' > {path}\n"
        "\n"
        "Or use api_key_command to retrieve the key from a password manager:\n"
        f"  echo '{{\"api_key_command\": \"pass show deepl-api-key\"}}' > {path}"
    )


def load_config(path: Path) -> DeepLConfig:
    """Read and validate the JSON configuration stored at ``path``.

    Parameters
    ----------
    path:
        Location of the configuration file. The command line passes either the
        ``--config`` value or :func:`default_config_path`.
    """

    if not path.exists():
        raise ConfigError(_missing_file_message(path))

    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read config file: {path}: {exc}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in config file: {path}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a JSON object: {path}")

    try:
        config = DeepLConfig.model_validate(data)
    except ValidationError as exc:
        fields = ", ".join(str(err["loc"][0]) for err in exc.errors() if err.get("loc"))
        raise ConfigError(f"Invalid value for {fields} in config file: {path} (expected a string)") from exc

    if not config.api_key and not config.api_key_command:
        raise ConfigError(
            'Config must contain "api_key" or "api_key_command".\n'
            "  api_key: your DeepL API key as a string\n"
            '  api_key_command: a shell command that outputs your API key (e.g. "pass show deepl-api-key")'
        )

    return config


def run_shell_command(command: str) -> str:
    """Run ``command`` through the system shell and return its stdout."""

    completed = subprocess.run(
        command,
        shell=True,
        check=True,
        capture_output=True,
        text=True,
        stdin=subprocess.DEVNULL,
    )
    return completed.stdout


def resolve_api_key(config: DeepLConfig, *, runner: CommandRunner = run_shell_command) -> str:
    """Return the API key described by ``config``.

    ``api_key_command`` wins over ``api_key`` when both are set. A failing
    command is reported once and never retried.
    """

    command = config.api_key_command
    if command:
        try:
            output = runner(command)
        except subprocess.CalledProcessError as exc:
            detail = str(exc)
            if isinstance(exc.stderr, str) and exc.stderr.strip():
                detail = f"{detail}\n{exc.stderr.strip()}"
            raise CredentialError(f"Failed to execute api_key_command: {command}\n{detail}") from exc
        except (OSError, subprocess.SubprocessError) as exc:
            raise CredentialError(f"Failed to execute api_key_command: {command}\n{exc}") from exc

        key = output.strip()
        if not key:
            raise CredentialError(f"api_key_command produced no output: {command}")
        return key

    if config.api_key:
        return config.api_key

    raise CredentialError('No API key available. Set "api_key" or "api_key_command" in config.')


__all__ = [
    "CommandRunner",
    "ConfigError",
    "CredentialError",
    "DeepLConfig",
    "default_config_path",
    "load_config",
    "resolve_api_key",
    "run_shell_command",
]
