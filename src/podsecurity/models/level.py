"""
Pod Security Standards levels.

Levels are ordered by strictness:
- Privileged: Unrestricted policy
- Baseline: Minimally restrictive, prevents known privilege escalations
- Restricted: Heavily restricted, hardened pods

Reference: https://kubernetes.io/docs/concepts/security/pod-security-standards/
"""

from __future__ import annotations

from enum import Enum

from podsecurity.errors import InvalidLevelError


class Level(Enum):
    """Pod Security Standards levels, comparable by strictness."""

    PRIVILEGED = "privileged"  # Unrestricted
    BASELINE = "baseline"  # Minimal restrictions
    RESTRICTED = "restricted"  # Heavily restricted

    @property
    def rank(self) -> int:
        """Position of the level in strictness order (privileged is 0)."""
        return _RANKS[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Level):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Level):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Level):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Level):
            return NotImplemented
        return self.rank >= other.rank

    def weaker(self) -> Level:
        """
        Get the next less strict level.

        Returns:
            The level one step below this one (privileged stays privileged)
        """
        return _BY_RANK[max(self.rank - 1, 0)]

    @classmethod
    def parse(cls, value: str) -> Level:
        """
        Create Level from string value.

        Args:
            value: String representation (case-insensitive)

        Returns:
            Matching Level enum value

        Raises:
            InvalidLevelError: If value is not a valid level
        """
        if not isinstance(value, str):
            raise InvalidLevelError(value)
        value_lower = value.strip().lower()
        for level in cls:
            if level.value == value_lower:
                return level
        raise InvalidLevelError(value)


_RANKS = {
    Level.PRIVILEGED: 0,
    Level.BASELINE: 1,
    Level.RESTRICTED: 2,
}
_BY_RANK = {rank: level for level, rank in _RANKS.items()}
