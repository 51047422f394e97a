"""Interactive prompt helpers for nanoscope_release."""

from __future__ import annotations

import questionary


class InteractionAborted(Exception):
    """Raised when the interactive session is cancelled."""


def prompt_confirm(prompt: str, *, default: bool) -> bool:
    result = questionary.confirm(prompt, default=default).ask()
    if result is None:
        raise InteractionAborted()
    return bool(result)


def prompt_password(prompt: str) -> str:
    result = questionary.password(prompt).ask()
    if result is None:
        raise InteractionAborted()
    return result.strip()
