"""
Data models for podsecurity.

- Level: Pod Security Standards levels ordered by strictness
- SchemaVersion: (major, minor) versions that check implementations target
- LevelVersion: a level enforced at a given schema version
"""

from podsecurity.models.level import Level
from podsecurity.models.version import LevelVersion, SchemaVersion

__all__ = [
    "Level",
    "LevelVersion",
    "SchemaVersion",
]
