"""
Schema versions and level/version pairs.

A SchemaVersion identifies the Kubernetes minor release whose pod schema
a check implementation understands. Versions are compared by
(major, minor); the special "latest" version sorts after every concrete
release.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering

from podsecurity.errors import InvalidVersionError
from podsecurity.models.level import Level

_VERSION_RE = re.compile(r"^v?(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)$")


@total_ordering
@dataclass(frozen=True)
class SchemaVersion:
    """
    A (major, minor) schema version with total ordering.

    Attributes:
        major: Major version number
        minor: Minor version number
        latest: True for the open-ended "latest" version
    """

    major: int
    minor: int
    latest: bool = False

    def _sort_key(self) -> tuple[int, int, int]:
        if self.latest:
            return (1, 0, 0)
        return (0, self.major, self.minor)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SchemaVersion):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SchemaVersion):
            return NotImplemented
        return self._sort_key() == other._sort_key()

    def __hash__(self) -> int:
        return hash(self._sort_key())

    def __str__(self) -> str:
        if self.latest:
            return "latest"
        return f"v{self.major}.{self.minor}"

    @classmethod
    def major_minor(cls, major: int, minor: int) -> SchemaVersion:
        """Create a concrete version."""
        if major < 0 or minor < 0:
            raise InvalidVersionError(f"{major}.{minor}")
        return cls(major=major, minor=minor)

    @classmethod
    def latest_version(cls) -> SchemaVersion:
        """Create the open-ended latest version."""
        return cls(major=0, minor=0, latest=True)

    @classmethod
    def parse(cls, value: str | SchemaVersion) -> SchemaVersion:
        """
        Parse a version string.

        Args:
            value: "latest", "v1.25" or "1.25" (an existing SchemaVersion
                is returned unchanged)

        Returns:
            Parsed SchemaVersion

        Raises:
            InvalidVersionError: If value is not a valid version
        """
        if isinstance(value, SchemaVersion):
            return value
        if not isinstance(value, str):
            raise InvalidVersionError(value)

        text = value.strip()
        if text == "latest":
            return cls.latest_version()

        match = _VERSION_RE.match(text)
        if not match:
            raise InvalidVersionError(value)
        return cls(major=int(match.group(1)), minor=int(match.group(2)))


@dataclass(frozen=True)
class LevelVersion:
    """A level paired with the schema version it is enforced at."""

    level: Level
    version: SchemaVersion

    def __str__(self) -> str:
        return f"{self.level.value}:{self.version}"

    @classmethod
    def parse(cls, value: str) -> LevelVersion:
        """
        Parse "level" or "level:version" (e.g. "restricted:v1.27").

        A missing version means latest.
        """
        level_text, _, version_text = value.partition(":")
        level = Level.parse(level_text)
        version = SchemaVersion.parse(version_text) if version_text else SchemaVersion.latest_version()
        return cls(level=level, version=version)
