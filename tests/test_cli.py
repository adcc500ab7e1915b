import io
import subprocess
from types import SimpleNamespace

import pytest

from deepl_cli import __version__
from deepl_cli.cli import run


class Pipe(io.StringIO):
    def isatty(self) -> bool:
        return False


class Terminal(io.StringIO):
    def isatty(self) -> bool:
        return True


class StubClient:
    def __init__(self, result=None, error=None):
        self.result = result or SimpleNamespace(text="Hallo, Welt!", detected_source_lang="EN", billed_characters=13)
        self.error = error
        self.calls = []

    def translate_text(self, text, *, source_lang=None, target_lang, **options):
        self.calls.append((text, source_lang, target_lang, options))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def streams():
    return SimpleNamespace(stdout=io.StringIO(), stderr=io.StringIO())


def invoke(argv, streams, *, config_path, client=None, stdin=None, runner=None):
    created_with = []
    client = client or StubClient()

    def factory(api_key):
        created_with.append(api_key)
        return client

    kwargs = {}
    if runner is not None:
        kwargs["runner"] = runner
    code = run(
        argv,
        stdin=stdin if stdin is not None else Terminal(),
        stdout=streams.stdout,
        stderr=streams.stderr,
        config_path=config_path,
        client_factory=factory,
        **kwargs,
    )
    return code, client, created_with


def test_translates_positional_text(streams, write_config):
    config = write_config({"api_key": "secret"})
    code, client, keys = invoke(["-t", "de", "Hello,", "world!"], streams, config_path=config)

    assert code == 0
    assert streams.stdout.getvalue() == "Hallo, Welt!\n"
    assert streams.stderr.getvalue() == ""
    assert keys == ["secret"]
    assert client.calls == [("Hello, world!", None, "de", {})]


def test_verbose_metadata_goes_to_stderr(streams, write_config):
    config = write_config({"api_key": "secret"})
    code, _, _ = invoke(["-t", "de", "-v", "Hello"], streams, config_path=config)

    assert code == 0
    assert streams.stdout.getvalue() == "Hallo, Welt!\n"
    assert streams.stderr.getvalue() == "Detected source language: EN\nBilled characters: 13\n"


def test_reads_text_from_stdin(streams, write_config):
    config = write_config({"api_key": "secret"})
    code, client, _ = invoke(
        ["-t", "fr", "-f", "prefer_more", "-c", "Greeting"],
        streams,
        config_path=config,
        stdin=Pipe("Hello from stdin\n"),
    )

    assert code == 0
    assert client.calls == [("Hello from stdin", None, "fr", {"context": "Greeting", "formality": "prefer_more"})]


@pytest.mark.parametrize("argv", [[], ["--help"], ["-h", "-t", "de"]])
def test_help_is_printed_to_stdout(argv, streams, tmp_path):
    code, client, _ = invoke(argv, streams, config_path=tmp_path / "missing.json")
    assert code == 0
    assert "usage: deepl-cli" in streams.stdout.getvalue()
    assert client.calls == []


def test_version(streams, tmp_path):
    code, _, _ = invoke(["--version"], streams, config_path=tmp_path / "missing.json")
    assert code == 0
    assert streams.stdout.getvalue() == f"{__version__}\n"


def test_argument_error(streams, tmp_path):
    code, _, _ = invoke(["-t", "de", "-f", "rude", "Hi"], streams, config_path=tmp_path / "missing.json")
    assert code == 1
    assert streams.stdout.getvalue() == ""
    assert streams.stderr.getvalue().startswith('Error: Invalid formality value: "rude"')


def test_missing_target(streams, tmp_path):
    code, _, _ = invoke(["Hello"], streams, config_path=tmp_path / "missing.json")
    assert code == 1
    assert "Error: Missing required option: --target" in streams.stderr.getvalue()


def test_no_text_on_terminal(streams, write_config):
    code, client, _ = invoke(["-t", "de"], streams, config_path=write_config({"api_key": "k"}))
    assert code == 1
    assert streams.stderr.getvalue().startswith("Error: No text provided.")
    assert client.calls == []


def test_empty_stdin(streams, write_config):
    code, _, _ = invoke(["-t", "de"], streams, config_path=write_config({"api_key": "k"}), stdin=Pipe("   \n"))
    assert code == 1
    assert streams.stderr.getvalue().startswith("Error: Empty text provided.")


def test_missing_config(streams, tmp_path):
    code, _, keys = invoke(["-t", "de", "Hello"], streams, config_path=tmp_path / "missing.json")
    assert code == 1
    assert streams.stderr.getvalue().startswith("Error: Config file not found:")
    assert keys == []


def test_config_option_overrides_default_path(streams, tmp_path, write_config):
    explicit = write_config({"api_key": "from-option"})
    code, _, keys = invoke(
        ["-t", "de", "--config", str(explicit), "Hello"],
        streams,
        config_path=tmp_path / "missing.json",
    )
    assert code == 0
    assert keys == ["from-option"]


def test_credential_command_failure(streams, write_config):
    def runner(command):
        raise subprocess.CalledProcessError(1, command)

    config = write_config({"api_key_command": "pass show deepl"})
    code, _, keys = invoke(["-t", "de", "Hello"], streams, config_path=config, runner=runner)
    assert code == 1
    assert "Error: Failed to execute api_key_command: pass show deepl" in streams.stderr.getvalue()
    assert keys == []


def test_translation_error_is_reported_verbatim(streams, write_config):
    client = StubClient(error=RuntimeError("Quota for this billing period has been exceeded"))
    code, _, _ = invoke(["-t", "de", "Hello"], streams, config_path=write_config({"api_key": "k"}), client=client)
    assert code == 1
    assert streams.stdout.getvalue() == ""
    assert streams.stderr.getvalue() == "Error: Quota for this billing period has been exceeded\n"


def test_debug_never_prints_the_key(streams, write_config):
    config = write_config({"api_key_command": "get-key"})
    code, _, _ = invoke(
        ["-t", "de", "--debug", "Hello"],
        streams,
        config_path=config,
        runner=lambda command: "top-secret\n",
    )
    assert code == 0
    diagnostics = streams.stderr.getvalue()
    assert "[debug] api key from api_key_command" in diagnostics
    assert "top-secret" not in diagnostics
    assert streams.stdout.getvalue() == "Hallo, Welt!\n"


def test_undecodable_stdin_is_an_error_line(streams, write_config):
    stdin = io.TextIOWrapper(io.BytesIO(b"a" * 20000 + b"\xff"), encoding="utf-8", errors="strict")
    code, client, _ = invoke(["-t", "de"], streams, config_path=write_config({"api_key": "k"}), stdin=stdin)
    assert code == 1
    assert streams.stderr.getvalue().startswith("Error: Failed to decode stdin:")
    assert client.calls == []
