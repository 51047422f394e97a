"""End-to-end release and draft cleanup flows.

Both flows are strictly sequential and fail fast: the first error aborts the
run and leaves whatever the completed steps produced (a pushed release, a
mutated but unpushed clone) in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from .auth import require_token
from .console import log
from .constants import COMMIT_MESSAGE
from .context import AppContext
from .errors import CLIError, ReleaseAPIError
from .formula import FormulaRepository
from .http import http_timeout
from .publisher import ReleasePublisher
from .semver import IncrementKind, Version
from .utils import sha256_hex


@dataclass(frozen=True)
class ReleaseResult:
    previous: Version
    version: Version
    download_url: str
    sha256: str


def formula_repository(ctx: AppContext) -> FormulaRepository:
    settings = ctx.settings
    return FormulaRepository(
        settings.cache_dir,
        settings.formula_remote,
        branch=settings.formula_branch,
        formula_name=settings.formula_name,
        runner=ctx.runner,
    )


def release_publisher(ctx: AppContext, token: str) -> ReleasePublisher:
    settings = ctx.settings
    return ReleasePublisher(
        token,
        api_base_url=settings.api_base_url,
        owner=settings.owner,
        repo=settings.repo,
        source_dir=settings.source_dir,
        asset_name=settings.asset_name,
        release_body=settings.release_body,
        timeout=http_timeout(settings.http_timeout),
        client_factory=ctx.http_client_factory,
        runner=ctx.runner,
    )


def plan_release(ctx: AppContext, kind: IncrementKind) -> Tuple[Version, Version]:
    """Sync the tap and return (current, next) without touching GitHub."""
    repo = formula_repository(ctx)
    repo.ensure_clean()
    current = repo.read_version()
    return current, current.increment(kind)


def release(
    ctx: AppContext,
    artifact: Path,
    kind: IncrementKind,
    *,
    token: Optional[str],
) -> ReleaseResult:
    access_token = require_token(token)
    artifact_path = Path(artifact)
    if not artifact_path.is_file():
        raise CLIError(f"artifact not found: {artifact_path}")

    repo = formula_repository(ctx)
    repo.ensure_clean()

    previous = repo.read_version()
    version = previous.increment(kind)
    log(f"releasing {version} (was {previous})")

    asset = release_publisher(ctx, access_token).publish(artifact_path, version)
    digest = sha256_hex(asset.content)
    log(f"sha256 {digest}")

    repo.update(version, asset.download_url, digest)
    repo.commit(COMMIT_MESSAGE.format(version=version))
    repo.push()
    return ReleaseResult(
        previous=previous,
        version=version,
        download_url=asset.download_url,
        sha256=digest,
    )


def delete_release_drafts(ctx: AppContext, *, token: Optional[str]) -> List[str]:
    """Delete every draft release; the first failed delete aborts the batch."""
    access_token = require_token(token)
    publisher = release_publisher(ctx, access_token)
    drafts = [entry for entry in publisher.list_releases() if entry.get("draft") is True]
    if not drafts:
        log("no draft releases found")
        return []

    deleted: List[str] = []
    for entry in drafts:
        url = str(entry.get("url") or "").strip()
        if not url:
            raise ReleaseAPIError(
                f"{publisher.releases_url}: draft release {entry.get('id')} has no url"
            )
        publisher.delete_release(url)
        deleted.append(url)
    return deleted
