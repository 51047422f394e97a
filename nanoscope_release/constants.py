"""Shared constants for nanoscope_release."""

from __future__ import annotations

PACKAGE_NAME = "nanoscope-release"
LOG_PREFIX = "nanoscope-release"

TOKEN_ENV_VAR = "GITHUB_ACCESS_TOKEN"
CONFIG_ENV_VAR = "NANOSCOPE_RELEASE_CONFIG"
CACHE_ENV_VAR = "NANOSCOPE_RELEASE_CACHE_DIR"
DEFAULT_CONFIG_DIR_NAME = "nanoscope-release"

KEYRING_SERVICE = "nanoscope-release"
KEYRING_USERNAME = "github_token"

DEFAULT_API_BASE_URL = "https://api.github.com"
DEFAULT_OWNER = "uber"
DEFAULT_REPO = "nanoscope"

DEFAULT_FORMULA_REMOTE = "git@github.com:uber/homebrew-nanoscope.git"
DEFAULT_FORMULA_BRANCH = "master"
DEFAULT_FORMULA_NAME = "nanoscope.rb"
# Relative to the invoking user's home directory.
DEFAULT_CACHE_SUBDIR = ".nanoscope/homebrew-cache"

DEFAULT_ASSET_NAME = "nanoscope-{version}.zip"
DEFAULT_RELEASE_BODY = "{version} release of Nanoscope"
COMMIT_MESSAGE = "Update version to {version}."

ASSET_CONTENT_TYPE = "application/zip"
GITHUB_ACCEPT = "application/vnd.github+json"

HTTP_TIMEOUT_SECONDS = 60.0

EXIT_CODE_USAGE = 2
EXIT_CODE_INTERRUPT = 130
