"""URL helpers for the GitHub releases API."""

from __future__ import annotations

import re

import httpx

from .errors import ReleaseAPIError

# RFC 6570 query expansion, e.g. "{?name,label}" on GitHub's upload_url.
_URI_TEMPLATE_QUERY = re.compile(r"\{\?[^}]*\}")


def normalize_base_url(value: str) -> str:
    normalized = (value or "").strip().rstrip("/")
    parsed = httpx.URL(normalized)
    if not parsed.scheme or not parsed.host:
        raise ReleaseAPIError(
            f"invalid API base URL '{value}'; include scheme and host (e.g. https://api.github.com)"
        )
    return normalized


def releases_url(base_url: str, owner: str, repo: str) -> str:
    return f"{normalize_base_url(base_url)}/repos/{owner}/{repo}/releases"


def expand_upload_url(upload_url: str, asset_name: str) -> str:
    base = _URI_TEMPLATE_QUERY.sub("", upload_url or "").strip()
    if not base:
        raise ReleaseAPIError("release response did not include an upload_url")
    return str(httpx.URL(base).copy_merge_params({"name": asset_name}))
