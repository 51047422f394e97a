"""Semantic version value used for release numbering."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum

from .errors import VersionParseError

_COMPONENT = re.compile(r"[0-9]+")


class IncrementKind(str, Enum):
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"

    @classmethod
    def parse(cls, value: str) -> "IncrementKind":
        normalized = (value or "").strip().lower()
        for kind in cls:
            if kind.value == normalized:
                return kind
        choices = ", ".join(kind.value for kind in cls)
        raise ValueError(f"unknown increment kind {value!r}; expected one of {choices}")


@dataclass(frozen=True)
class Version:
    major: int
    minor: int
    patch: int

    def __post_init__(self) -> None:
        for part in (self.major, self.minor, self.patch):
            if part < 0:
                raise VersionParseError(f"version components must be non-negative: {self.render()}")

    @classmethod
    def parse(cls, text: str) -> "Version":
        raw = (text or "").strip()
        parts = raw.split(".")
        if len(parts) != 3:
            raise VersionParseError(f"invalid version {text!r}; expected major.minor.patch")
        if not all(_COMPONENT.fullmatch(part) for part in parts):
            raise VersionParseError(f"invalid version {text!r}; components must be integers")
        return cls(*(int(part) for part in parts))

    def increment(self, kind: IncrementKind) -> "Version":
        if kind is IncrementKind.MAJOR:
            return replace(self, major=self.major + 1, minor=0, patch=0)
        if kind is IncrementKind.MINOR:
            return replace(self, minor=self.minor + 1, patch=0)
        if kind is IncrementKind.PATCH:
            return replace(self, patch=self.patch + 1)
        raise ValueError(f"unexpected increment kind: {kind}")

    @property
    def is_prerelease(self) -> bool:
        return self.major == 0

    def render(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def __str__(self) -> str:
        return self.render()
