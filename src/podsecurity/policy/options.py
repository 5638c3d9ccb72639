"""
Evaluation options passed to every check.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Options:
    """
    Options for a single evaluation.

    Attributes:
        with_field_errors: Build structured FieldErrors alongside the
            human-readable detail. Off by default since most callers only
            need the allow/deny decision and message.
    """

    with_field_errors: bool = False

    @classmethod
    def with_err_list(cls) -> Options:
        """Options with field errors enabled."""
        return cls(with_field_errors=True)
