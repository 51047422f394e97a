"""Shared HTTP helpers for nanoscope_release."""

from __future__ import annotations

import json
from typing import Any, Dict, Optional, Union

import httpx

from .constants import GITHUB_ACCEPT, HTTP_TIMEOUT_SECONDS
from .errors import ReleaseAPIError
from .utils import safe_str
from .version import USER_AGENT


def http_timeout(seconds: Optional[float] = None) -> httpx.Timeout:
    value = HTTP_TIMEOUT_SECONDS if seconds is None else seconds
    return httpx.Timeout(value, connect=value)


def request_headers(
    token: str = "",
    *,
    content_type: Optional[str] = None,
) -> Dict[str, str]:
    headers = {
        "Accept": GITHUB_ACCEPT,
        "User-Agent": USER_AGENT,
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    if content_type:
        headers["Content-Type"] = content_type
    return headers


def describe_http_error(exc: httpx.HTTPError) -> str:
    detail = ""
    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        detail = f"{response.status_code} {response.reason_phrase}".strip()
        body = (getattr(response, "text", "") or "").strip()
        if body:
            extracted: Optional[str] = None
            try:
                data = response.json()
            except (json.JSONDecodeError, ValueError):
                data = None
            if isinstance(data, dict):
                extracted = safe_str(data.get("message") or data.get("error"))
            if extracted:
                suffix = extracted.strip()
            else:
                suffix = body.splitlines()[0].strip()
            if suffix:
                detail = f"{detail}: {suffix}" if detail else suffix
        return detail

    message = str(exc).strip()
    summary = message or exc.__class__.__name__
    if isinstance(exc, httpx.TimeoutException):
        summary = "request timed out"
        if message and "timed out" not in message.lower():
            summary = f"{summary}: {message}"
    elif isinstance(exc, httpx.ConnectError):
        summary = "failed to connect"
        if message and "connect" not in message.lower():
            summary = f"{summary}: {message}"
    elif isinstance(exc, httpx.RequestError):
        summary = "network error"
        if message and "network" not in message.lower():
            summary = f"{summary}: {message}"
    return summary


def send_request(
    client: httpx.Client,
    method: str,
    url: Union[str, httpx.URL],
    *,
    headers: Optional[Dict[str, str]] = None,
    json: Any = None,
    content: Optional[bytes] = None,
) -> httpx.Response:
    """Issue a single request; any failure becomes a ReleaseAPIError naming the URL."""
    method_upper = (method or "").upper().strip() or "GET"
    try:
        response = client.request(
            method_upper,
            url,
            headers=headers,
            json=json,
            content=content,
        )
        response.raise_for_status()
    except httpx.HTTPError as exc:
        detail = describe_http_error(exc)
        raise ReleaseAPIError(f"{method_upper} {url} failed: {detail}") from exc
    return response


def response_json(response: httpx.Response, url: Union[str, httpx.URL]) -> Any:
    try:
        return response.json()
    except (json.JSONDecodeError, ValueError) as exc:
        raise ReleaseAPIError(f"{url}: response was not valid JSON") from exc
