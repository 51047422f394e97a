"""Thin wrapper around subprocess for the git invocations of a release run."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from .console import log
from .errors import CommandError
from .utils import format_cli_command, redact


class ProcessHandle:
    """A started child process whose exit status can be asserted."""

    def __init__(self, argv: Sequence[str], proc: subprocess.Popen) -> None:
        self.argv: List[str] = list(argv)
        self._proc = proc

    @property
    def command(self) -> str:
        return redact(format_cli_command(self.argv))

    def read_stdout(self) -> str:
        if self._proc.stdout is None:
            return ""
        text = self._proc.stdout.read()
        self._proc.stdout.close()
        return text

    def wait(self) -> int:
        try:
            stdout = self._proc.stdout
            if stdout is not None and not stdout.closed:
                # Unread output is discarded so a full pipe cannot block the child.
                self._proc.communicate()
            return self._proc.wait()
        except KeyboardInterrupt:
            self._proc.terminate()
            self._proc.wait()
            raise

    def assert_success(self) -> None:
        returncode = self.wait()
        if returncode != 0:
            raise CommandError(f"command failed with exit code {returncode}: {self.command}")


CommandRunner = Callable[..., ProcessHandle]


def run_command(
    argv: Sequence[str],
    *,
    cwd: Optional[Union[str, Path]] = None,
) -> ProcessHandle:
    """Start ``argv`` without a shell; stdout is piped for the caller to read."""
    cmd = [str(part) for part in argv]
    log(f"exec {redact(format_cli_command(cmd))}")
    try:
        proc = subprocess.Popen(
            cmd,
            cwd=str(cwd) if cwd is not None else None,
            stdout=subprocess.PIPE,
            text=True,
        )
    except OSError as exc:
        raise CommandError(f"failed to run {cmd[0]}: {exc}") from exc
    return ProcessHandle(cmd, proc)


def capture_output(
    argv: Sequence[str],
    *,
    cwd: Optional[Union[str, Path]] = None,
    runner: CommandRunner = run_command,
) -> str:
    handle = runner(argv, cwd=cwd)
    output = handle.read_stdout()
    handle.assert_success()
    return output.strip()
