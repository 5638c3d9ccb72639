"""
Version resolution for checks.

For a target schema version, each check contributes its most recent
implementation whose minimum version does not exceed the target. The
selected implementations' override lists are then merged into a single
flat set of check IDs whose failures are superseded.
"""

from __future__ import annotations

from typing import Any, Iterable

from podsecurity.errors import VersionResolutionError
from podsecurity.models import SchemaVersion
from podsecurity.policy.registry import Check, VersionedCheck


def applicable(check: Check, version: SchemaVersion) -> VersionedCheck | None:
    """
    Select the implementation of check for version.

    Args:
        check: Check to resolve
        version: Target schema version

    Returns:
        The last implementation with minimum_version <= version, or None
        if the check did not exist yet at that version
    """
    selected: VersionedCheck | None = None
    for versioned in check.versions:
        if versioned.minimum_version <= version:
            selected = versioned
        else:
            break
    return selected


def resolve(check: Check, version: SchemaVersion) -> VersionedCheck:
    """
    Select the implementation of check for version.

    Raises:
        VersionResolutionError: If no implementation applies to version
    """
    selected = applicable(check, version)
    if selected is None:
        raise VersionResolutionError(check.id, version)
    return selected


def resolve_all(
    checks: Iterable[Check],
    version: SchemaVersion,
) -> list[tuple[Check, VersionedCheck]]:
    """
    Resolve every check for version, keeping the given order.

    Checks introduced after version are left out.

    Raises:
        VersionResolutionError: If version is older than every check
    """
    checks = list(checks)
    resolved: list[tuple[Check, VersionedCheck]] = []
    for check in checks:
        versioned = applicable(check, version)
        if versioned is not None:
            resolved.append((check, versioned))

    if checks and not resolved:
        raise VersionResolutionError(None, version)
    return resolved


def overridden_ids(resolved: Iterable[tuple[Any, VersionedCheck]]) -> frozenset[str]:
    """
    Collect the check IDs overridden by the selected implementations.

    Overrides are not transitive: C overriding B, which overrides A, does
    not make C override A.
    """
    ids: set[str] = set()
    for _, versioned in resolved:
        ids.update(versioned.override_check_ids)
    return frozenset(ids)
