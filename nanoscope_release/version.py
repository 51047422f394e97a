"""Version helpers for nanoscope_release."""

from __future__ import annotations

from . import __version__
from .constants import PACKAGE_NAME

USER_AGENT = f"{PACKAGE_NAME}/{__version__}"
