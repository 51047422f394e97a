"""GitHub release creation, asset upload and draft cleanup."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

from .console import log
from .constants import ASSET_CONTENT_TYPE, DEFAULT_ASSET_NAME, DEFAULT_RELEASE_BODY
from .context import HttpClientFactory, default_http_client_factory
from .errors import CLIError, ReleaseAPIError
from .http import http_timeout, request_headers, response_json, send_request
from .process import CommandRunner, capture_output, run_command
from .semver import Version
from .urls import expand_upload_url, releases_url
from .utils import as_dict, fill_version, safe_str


@dataclass(frozen=True)
class ReleaseAsset:
    """Public download URL of an uploaded asset and the bytes that were sent."""

    download_url: str
    content: bytes


def _require_field(payload: Dict[str, Any], key: str, url: str) -> str:
    value = safe_str(payload.get(key))
    if not value:
        raise ReleaseAPIError(f"{url}: response did not include '{key}'")
    return value


class ReleasePublisher:
    def __init__(
        self,
        token: str,
        *,
        api_base_url: str,
        owner: str,
        repo: str,
        source_dir: Optional[Path] = None,
        asset_name: str = DEFAULT_ASSET_NAME,
        release_body: str = DEFAULT_RELEASE_BODY,
        timeout: Optional[httpx.Timeout] = None,
        client_factory: HttpClientFactory = default_http_client_factory,
        runner: CommandRunner = run_command,
    ) -> None:
        self.token = token
        self.releases_url = releases_url(api_base_url, owner, repo)
        self.source_dir = source_dir
        self.asset_name = asset_name
        self.release_body = release_body
        self._timeout = timeout or http_timeout()
        self._client_factory = client_factory
        self._runner = runner

    def _headers(self, content_type: Optional[str] = None) -> Dict[str, str]:
        return request_headers(self.token, content_type=content_type)

    def commit_hash(self) -> str:
        commit = capture_output(
            ["git", "rev-parse", "--verify", "HEAD"],
            cwd=self.source_dir,
            runner=self._runner,
        )
        if not commit:
            raise CLIError("git rev-parse did not return a commit hash")
        return commit

    def create_release(self, client: httpx.Client, version: Version, commit: str) -> Dict[str, Any]:
        body = {
            "tag_name": str(version),
            "target_commitish": commit,
            "name": str(version),
            "body": fill_version(self.release_body, version),
            "draft": False,
            "prerelease": version.is_prerelease,
        }
        response = send_request(
            client,
            "POST",
            self.releases_url,
            headers=self._headers(),
            json=body,
        )
        payload = response_json(response, self.releases_url)
        if not isinstance(payload, dict):
            raise ReleaseAPIError(f"{self.releases_url}: unexpected release payload structure")
        return payload

    def upload_asset(self, client: httpx.Client, upload_url: str, data: bytes) -> Dict[str, Any]:
        response = send_request(
            client,
            "POST",
            upload_url,
            headers=self._headers(ASSET_CONTENT_TYPE),
            content=data,
        )
        return as_dict(response_json(response, upload_url))

    def publish(self, artifact: Path, version: Version) -> ReleaseAsset:
        commit = self.commit_hash()
        try:
            data = Path(artifact).read_bytes()
        except OSError as exc:
            raise CLIError(f"failed to read artifact {artifact}: {exc}") from exc

        with self._client_factory(self._timeout) as client:
            release = self.create_release(client, version, commit)
            log(f"created release {version} at {commit[:12]}")
            template = _require_field(release, "upload_url", self.releases_url)
            upload_url = expand_upload_url(template, fill_version(self.asset_name, version))
            asset = self.upload_asset(client, upload_url, data)
        download_url = _require_field(asset, "browser_download_url", upload_url)
        log(f"uploaded {len(data)} bytes to {download_url}")
        return ReleaseAsset(download_url=download_url, content=data)

    def list_releases(self) -> List[Dict[str, Any]]:
        with self._client_factory(self._timeout) as client:
            response = send_request(client, "GET", self.releases_url, headers=self._headers())
        payload = response_json(response, self.releases_url)
        if not isinstance(payload, list):
            raise ReleaseAPIError(f"{self.releases_url}: unexpected release listing structure")
        return [as_dict(entry) for entry in payload]

    def delete_release(self, url: str) -> None:
        with self._client_factory(self._timeout) as client:
            send_request(client, "DELETE", url, headers=self._headers())
        log(f"deleted {url}")
