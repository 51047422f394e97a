"""Local clone of the Homebrew tap holding the Nanoscope formula."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional, Sequence

from .console import log
from .constants import DEFAULT_FORMULA_BRANCH, DEFAULT_FORMULA_NAME
from .errors import FormulaError
from .process import CommandRunner, run_command
from .semver import Version


def _field_pattern(key: str) -> "re.Pattern[str]":
    # Matches `key "value"` but not `other_key "value"`.
    return re.compile(rf'(?<!\w){re.escape(key)}[ \t]+"([^"\n]*)"')


def read_field(text: str, key: str) -> Optional[str]:
    match = _field_pattern(key).search(text)
    if not match:
        return None
    return match.group(1)


def set_field(text: str, key: str, value: object) -> str:
    """Replace the first ``key "..."`` occurrence; everything else is left as-is."""
    replacement = f'{key} "{value}"'
    return _field_pattern(key).sub(lambda _m: replacement, text, count=1)


class FormulaRepository:
    """Git working copy of the tap, reset to the remote tip before each release."""

    def __init__(
        self,
        directory: Path,
        remote_url: str,
        *,
        branch: str = DEFAULT_FORMULA_BRANCH,
        formula_name: str = DEFAULT_FORMULA_NAME,
        runner: CommandRunner = run_command,
    ) -> None:
        self.directory = Path(directory).expanduser()
        self.remote_url = remote_url
        self.branch = branch
        self.formula_path = self.directory / formula_name
        self._runner = runner

    def _git(self, *args: str) -> None:
        self._runner(["git", "-C", str(self.directory.absolute()), *args]).assert_success()

    def _run(self, argv: Sequence[str]) -> None:
        self._runner(list(argv)).assert_success()

    def ensure_clean(self) -> None:
        if not self.directory.exists():
            log(f"cloning {self.remote_url} into {self.directory}")
            self.directory.parent.mkdir(parents=True, exist_ok=True)
            self._run(["git", "clone", self.remote_url, str(self.directory.absolute())])

        self._git("fetch", "--all")
        self._git("reset", "--hard", f"origin/{self.branch}")
        self._git("checkout", self.branch)
        self._git("pull")

    def read_formula(self) -> str:
        try:
            with self.formula_path.open("r", encoding="utf-8", newline="") as handle:
                return handle.read()
        except OSError as exc:
            raise FormulaError(f"failed to read formula {self.formula_path}: {exc}") from exc

    def read_version(self) -> Version:
        raw = read_field(self.read_formula(), "version")
        if raw is None:
            raise FormulaError(f"no version field found in {self.formula_path}")
        return Version.parse(raw)

    def update(self, version: Version, url: str, sha256: str) -> None:
        formula = self.read_formula()
        formula = set_field(formula, "version", version)
        formula = set_field(formula, "url", url)
        formula = set_field(formula, "sha256", sha256)
        try:
            with self.formula_path.open("w", encoding="utf-8", newline="") as handle:
                handle.write(formula)
        except OSError as exc:
            raise FormulaError(f"failed to write formula {self.formula_path}: {exc}") from exc
        log(f"updated {self.formula_path.name} to {version}")

    def commit(self, message: str) -> None:
        self._git("commit", "-am", message)

    def push(self) -> None:
        self._git("push")
