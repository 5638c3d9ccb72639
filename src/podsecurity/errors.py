"""
Exceptions for podsecurity.

Only configuration and programming mistakes are raised as exceptions.
A pod that fails a check is ordinary data (see CheckResult), never an
exception.
"""

from __future__ import annotations

from typing import Any


class PolicyError(Exception):
    """Base class for all podsecurity errors."""


class CheckRegistrationError(PolicyError):
    """Exception raised when a check cannot be added to a registry."""

    def __init__(self, message: str, check_id: str | None = None):
        self.check_id = check_id
        prefix = f"check {check_id!r}: " if check_id else ""
        super().__init__(f"{prefix}{message}")


class VersionResolutionError(PolicyError):
    """Exception raised when no check implementation applies to a version."""

    def __init__(self, check_id: str | None, version: Any):
        self.check_id = check_id
        self.version = version
        if check_id:
            message = f"check {check_id!r} has no implementation for version {version}"
        else:
            message = f"no checks are defined for version {version}"
        super().__init__(message)


class InvalidVersionError(PolicyError, ValueError):
    """Exception raised when a schema version string cannot be parsed."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(
            f"invalid version {value!r}: expected 'latest' or 'v<major>.<minor>'"
        )


class InvalidLevelError(PolicyError, ValueError):
    """Exception raised when a level string cannot be parsed."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(
            f"invalid level {value!r}: expected privileged, baseline or restricted"
        )


class WorkloadError(PolicyError, ValueError):
    """Exception raised when a document cannot be interpreted as a pod."""

    def __init__(self, message: str, kind: str | None = None):
        self.kind = kind
        prefix = f"{kind}: " if kind else ""
        super().__init__(f"{prefix}{message}")


class ConfigError(PolicyError):
    """Exception raised when configuration cannot be loaded."""

    def __init__(self, message: str, source_path: str | None = None):
        self.message = message
        self.source_path = source_path
        prefix = f"{source_path}: " if source_path else ""
        super().__init__(f"{prefix}{message}")
