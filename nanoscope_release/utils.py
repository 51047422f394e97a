"""Shared utility helpers for nanoscope_release."""

from __future__ import annotations

import hashlib
import re
import shlex
from typing import Any, Dict, Optional, Sequence


def format_cli_command(argv: Sequence[str]) -> str:
    return shlex.join(str(part) for part in argv)


_SENSITIVE_KV_PATTERN = re.compile(
    r"(?i)\b("
    r"token|access_token|password|passwd|secret|api_key|apikey"
    r")\b\s*([:=])\s*([^\s]+)"
)
_AUTH_HEADER_PATTERN = re.compile(r"(?i)\bAuthorization:\s*(Bearer|token)\s+([^\s]+)")
_GITHUB_TOKEN_PATTERN = re.compile(r"\b(?:gh[pousr]_[A-Za-z0-9]{20,}|github_pat_[A-Za-z0-9_]{20,})\b")
_URL_CREDENTIALS_PATTERN = re.compile(r"(?i)\b(https?://)[^/\s:@]+(?::[^/\s@]*)?@")


def redact(text: str) -> str:
    """Best-effort redaction for common secret patterns in logs."""
    value = str(text)
    value = _AUTH_HEADER_PATTERN.sub(lambda m: f"Authorization: {m.group(1)} ***", value)
    value = _SENSITIVE_KV_PATTERN.sub(lambda m: f"{m.group(1)}{m.group(2)}***", value)
    value = _GITHUB_TOKEN_PATTERN.sub("***", value)
    value = _URL_CREDENTIALS_PATTERN.sub(lambda m: f"{m.group(1)}***@", value)
    return value


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def fill_version(template: str, version: Any) -> str:
    """Substitute `{version}` in a user-supplied template, leaving other braces as-is."""
    return template.replace("{version}", str(version))


def safe_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return str(value)


def as_dict(value: Any) -> Dict[str, Any]:
    if isinstance(value, dict):
        return value
    return {}
