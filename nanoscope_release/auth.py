"""GitHub token resolution and keyring storage."""

from __future__ import annotations

import os
from typing import Optional

import keyring
from keyring.errors import NoKeyringError, PasswordDeleteError

from .console import log, log_error
from .constants import KEYRING_SERVICE, KEYRING_USERNAME, TOKEN_ENV_VAR
from .errors import CLIError, MissingCredentialsError


def _load_keyring_token() -> Optional[str]:
    try:
        secret = keyring.get_password(KEYRING_SERVICE, KEYRING_USERNAME)
    except NoKeyringError:
        return None
    except Exception as exc:
        log_error(f"failed to read stored credentials from keyring: {exc}")
        return None
    if not secret:
        return None
    return secret.strip() or None


def resolve_token() -> Optional[str]:
    """Environment first, then the token saved by ``auth login``."""
    env_token = os.environ.get(TOKEN_ENV_VAR, "").strip()
    if env_token:
        return env_token
    return _load_keyring_token()


def token_source() -> Optional[str]:
    if os.environ.get(TOKEN_ENV_VAR, "").strip():
        return TOKEN_ENV_VAR
    if _load_keyring_token():
        return "keyring"
    return None


def require_token(token: Optional[str]) -> str:
    normalized = (token or "").strip()
    if not normalized:
        raise MissingCredentialsError(
            f"{TOKEN_ENV_VAR} not set; export it or run 'nanoscope-release auth login'"
        )
    return normalized


def persist_token(token: str) -> None:
    normalized = token.strip()
    if not normalized:
        raise CLIError("attempted to persist empty GitHub token")
    try:
        keyring.set_password(KEYRING_SERVICE, KEYRING_USERNAME, normalized)
    except NoKeyringError as exc:
        raise CLIError(
            f"no keyring backend available; set {TOKEN_ENV_VAR} for this session"
        ) from exc
    log(f"stored GitHub token ({mask_token(normalized)}) in system keyring")


def clear_token() -> bool:
    try:
        keyring.delete_password(KEYRING_SERVICE, KEYRING_USERNAME)
    except (NoKeyringError, PasswordDeleteError):
        return False
    return True


def mask_token(token: str) -> str:
    if len(token) <= 8:
        return "*" * len(token)
    return f"{token[:4]}...{token[-4:]}"
