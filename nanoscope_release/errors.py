"""Error types raised by nanoscope_release."""

from __future__ import annotations


class CLIError(Exception):
    """Raised for user-facing CLI errors."""


class MissingCredentialsError(CLIError):
    """Raised when no GitHub access token is available."""


class CommandError(CLIError):
    """Raised when an external command cannot start or exits nonzero."""


class ReleaseAPIError(CLIError):
    """Raised for GitHub API failures; messages name the requested URL."""


class FormulaError(CLIError):
    """Raised when the Homebrew formula cannot be read or understood."""


class VersionParseError(FormulaError):
    """Raised when a version string is not ``major.minor.patch``."""
