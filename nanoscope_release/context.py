"""Application context for injectable dependencies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import httpx

from .config import ReleaseSettings
from .process import CommandRunner, run_command

HttpClientFactory = Callable[[httpx.Timeout], httpx.Client]


def default_http_client_factory(timeout: httpx.Timeout) -> httpx.Client:
    return httpx.Client(timeout=timeout, follow_redirects=True)


@dataclass(frozen=True)
class AppContext:
    """Shared dependencies for release flows (settings, HTTP, subprocesses)."""

    settings: ReleaseSettings
    http_client_factory: HttpClientFactory = default_http_client_factory
    runner: CommandRunner = run_command
