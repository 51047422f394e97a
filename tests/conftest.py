from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import httpx
import keyring
import pytest
from keyring.backend import KeyringBackend
from keyring.errors import PasswordDeleteError

import nanoscope_release.console as console
import nanoscope_release.constants as constants
from nanoscope_release.config import ReleaseSettings
from nanoscope_release.context import AppContext
from nanoscope_release.errors import CommandError


class MemoryKeyring(KeyringBackend):
    priority = 1

    def __init__(self) -> None:
        self._storage: Dict[tuple, str] = {}

    def get_password(self, service: str, username: str) -> Optional[str]:
        return self._storage.get((service, username))

    def set_password(self, service: str, username: str, password: str) -> None:
        self._storage[(service, username)] = password

    def delete_password(self, service: str, username: str) -> None:
        try:
            del self._storage[(service, username)]
        except KeyError as exc:
            raise PasswordDeleteError(str(exc)) from exc


@pytest.fixture(autouse=True)
def memory_keyring() -> None:
    original = keyring.get_keyring()
    keyring.set_keyring(MemoryKeyring())
    try:
        yield
    finally:
        keyring.set_keyring(original)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path) -> None:
    monkeypatch.delenv(constants.TOKEN_ENV_VAR, raising=False)
    monkeypatch.delenv(constants.CACHE_ENV_VAR, raising=False)
    monkeypatch.setenv(constants.CONFIG_ENV_VAR, str(tmp_path / "missing-config.toml"))
    monkeypatch.setattr(console, "_LOG_SILENCED", False)
    monkeypatch.setattr(console, "_LOG_TO_STDERR", False)


class FakeResponse:
    def __init__(
        self,
        url: str,
        *,
        method: str = "GET",
        status_code: int = 200,
        content: bytes = b"",
        json_data: Any = None,
        reason: str = "OK",
    ) -> None:
        self.url = url
        self.method = method
        self.status_code = status_code
        self.content = content
        self._json_data = json_data
        self.reason_phrase = reason
        self.headers: Dict[str, str] = {}
        self.text = (
            content.decode("utf-8", "replace") if isinstance(content, bytes) else str(content)
        )

    def json(self) -> Any:
        if self._json_data is not None:
            return self._json_data
        return json.loads(self.content.decode("utf-8"))

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            request = httpx.Request(self.method, self.url)
            raise httpx.HTTPStatusError(
                "error",
                request=request,
                response=self,
            )


class FakeClient:
    def __init__(self, responses: List[Any], calls: Optional[list] = None) -> None:
        self._responses = list(responses)
        self.calls = [] if calls is None else calls

    def __enter__(self) -> FakeClient:
        return self

    def __exit__(self, *exc: Any) -> bool:
        return False

    def request(
        self,
        method: str,
        url: Any,
        *,
        headers: Optional[Dict[str, str]] = None,
        json: Any = None,
        content: Optional[bytes] = None,
    ) -> FakeResponse:
        self.calls.append((method, str(url), headers or {}, json, content))
        if not self._responses:
            raise AssertionError(f"unexpected request {method} {url}")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        assert response.url == str(url)
        assert response.method == method
        return response


@pytest.fixture
def fake_response() -> type[FakeResponse]:
    return FakeResponse


@pytest.fixture
def fake_client() -> type[FakeClient]:
    return FakeClient


class FakeHandle:
    def __init__(self, argv: Sequence[str], stdout: str = "", returncode: int = 0) -> None:
        self.argv = list(argv)
        self._stdout = stdout
        self.returncode = returncode

    def read_stdout(self) -> str:
        return self._stdout

    def assert_success(self) -> None:
        if self.returncode != 0:
            raise CommandError(f"command failed with exit code {self.returncode}: {self.argv}")


class RecordingRunner:
    """Stands in for run_command; records every argv instead of spawning git."""

    def __init__(self) -> None:
        self.calls: List[Tuple[List[str], Optional[str]]] = []
        self.outputs: Dict[Tuple[str, ...], str] = {}
        self.failures: Dict[Tuple[str, ...], int] = {}
        self.side_effects: Dict[Tuple[str, ...], Callable[[List[str]], None]] = {}

    def __call__(self, argv: Sequence[str], *, cwd: Any = None) -> FakeHandle:
        cmd = [str(part) for part in argv]
        self.calls.append((cmd, str(cwd) if cwd is not None else None))
        key = self._match(cmd)
        if key in self.side_effects:
            self.side_effects[key](cmd)
        return FakeHandle(
            cmd,
            stdout=self.outputs.get(key, ""),
            returncode=self.failures.get(key, 0),
        )

    def _match(self, cmd: List[str]) -> Tuple[str, ...]:
        for registry in (self.outputs, self.failures, self.side_effects):
            for key in registry:
                if tuple(cmd[: len(key)]) == key or _git_subcommand(cmd)[: len(key)] == key:
                    return key
        return tuple(cmd)

    @property
    def argvs(self) -> List[List[str]]:
        return [argv for argv, _ in self.calls]

    def git_subcommands(self) -> List[Tuple[str, ...]]:
        return [_git_subcommand(argv) for argv in self.argvs]


def _git_subcommand(cmd: List[str]) -> Tuple[str, ...]:
    if len(cmd) >= 3 and cmd[0] == "git" and cmd[1] == "-C":
        return tuple(cmd[3:])
    if cmd and cmd[0] == "git":
        return tuple(cmd[1:])
    return tuple(cmd)


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


FORMULA_TEMPLATE = """class Nanoscope < Formula
  desc "An extremely accurate Android method tracing tool"
  homepage "https://github.com/uber/nanoscope"
  url "https://github.com/uber/nanoscope/releases/download/1.2.3/nanoscope-1.2.3.zip"
  version "1.2.3"
  sha256 "0000000000000000000000000000000000000000000000000000000000000000"

  depends_on "python"

  def install
    libexec.install Dir["*"]
    bin.install_symlink libexec/"bin/nanoscope"
  end
end
"""


@pytest.fixture
def formula_text() -> str:
    return FORMULA_TEMPLATE


@pytest.fixture
def tap_dir(tmp_path) -> Path:
    directory = tmp_path / "homebrew-cache"
    directory.mkdir()
    (directory / "nanoscope.rb").write_text(FORMULA_TEMPLATE, encoding="utf-8")
    return directory


@pytest.fixture
def settings(tmp_path, tap_dir) -> ReleaseSettings:
    return ReleaseSettings(
        api_base_url="https://api.github.com",
        owner="uber",
        repo="nanoscope",
        formula_remote="git@github.com:uber/homebrew-nanoscope.git",
        formula_branch="master",
        formula_name="nanoscope.rb",
        cache_dir=tap_dir,
        asset_name="nanoscope-{version}.zip",
        release_body="{version} release of Nanoscope",
        http_timeout=5.0,
        source_dir=tmp_path / "source",
    )


@pytest.fixture
def make_context(settings, runner):
    def _make(responses: List[Any], calls: Optional[list] = None) -> AppContext:
        clients = [FakeClient(list(group), calls) for group in responses]

        def factory(timeout: httpx.Timeout) -> FakeClient:
            if not clients:
                raise AssertionError("unexpected HTTP client")
            return clients.pop(0)

        return AppContext(settings=settings, http_client_factory=factory, runner=runner)

    return _make
