"""Console helpers for nanoscope_release."""

from __future__ import annotations

import sys

from .constants import LOG_PREFIX

_LOG_TO_STDERR = False
_LOG_SILENCED = False


def configure_console(*, quiet: bool = False, stderr: bool = False) -> None:
    global _LOG_TO_STDERR, _LOG_SILENCED
    if stderr:
        _LOG_TO_STDERR = True
    if quiet:
        _LOG_SILENCED = True


def log(message: str) -> None:
    if _LOG_SILENCED:
        return
    stream = sys.stderr if _LOG_TO_STDERR else sys.stdout
    print(f"[{LOG_PREFIX}] {message}", file=stream)


def log_error(message: str) -> None:
    print(f"[{LOG_PREFIX}] {message}", file=sys.stderr)

