"""
Check definitions and the check registry.

A Check is a named rule at one level with one or more version-gated
implementations. Checks are registered once at startup; after freeze()
the registry is read-only and can be shared by concurrent evaluations.
"""

from __future__ import annotations

import importlib
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Mapping

from podsecurity.errors import CheckRegistrationError
from podsecurity.models import Level, SchemaVersion
from podsecurity.policy.options import Options
from podsecurity.policy.violations import FieldError

logger = logging.getLogger(__name__)


@dataclass
class CheckResult:
    """
    Result of running one check implementation against a pod.

    Attributes:
        allowed: True if the pod satisfies the check
        forbidden_reason: Short machine-friendly reason, set when not allowed
        forbidden_detail: Human-readable description of the offending subjects
        errors: Structured field errors (only with field errors enabled)
    """

    allowed: bool
    forbidden_reason: str = ""
    forbidden_detail: str = ""
    errors: list[FieldError] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "allowed": self.allowed,
            "forbidden_reason": self.forbidden_reason,
            "forbidden_detail": self.forbidden_detail,
            "errors": [e.to_dict() for e in self.errors],
        }


CheckPodFn = Callable[[Mapping[str, Any], Mapping[str, Any], Options], CheckResult]


@dataclass(frozen=True)
class VersionedCheck:
    """
    One implementation of a check.

    Attributes:
        minimum_version: First schema version this implementation applies to
        check_pod: Function (metadata, spec, options) -> CheckResult
        override_check_ids: Checks whose failures this implementation replaces
    """

    minimum_version: SchemaVersion
    check_pod: CheckPodFn
    override_check_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class Check:
    """
    A named security rule.

    Attributes:
        id: Stable check identifier
        level: Level the check belongs to (baseline or restricted)
        versions: Implementations sorted by ascending minimum_version
    """

    id: str
    level: Level
    versions: tuple[VersionedCheck, ...]

    def validate(self) -> None:
        """
        Validate the check definition.

        Raises:
            CheckRegistrationError: If the definition is invalid
        """
        if not self.id:
            raise CheckRegistrationError("check ID must not be empty")
        if self.level not in (Level.BASELINE, Level.RESTRICTED):
            raise CheckRegistrationError(
                f"invalid level {self.level.value!r}, expected baseline or restricted",
                self.id,
            )
        if not self.versions:
            raise CheckRegistrationError("at least one version is required", self.id)
        for previous, current in zip(self.versions, self.versions[1:]):
            if current.minimum_version <= previous.minimum_version:
                raise CheckRegistrationError(
                    f"versions must be sorted ascending: {current.minimum_version} "
                    f"follows {previous.minimum_version}",
                    self.id,
                )
        for versioned in self.versions:
            if self.id in versioned.override_check_ids:
                raise CheckRegistrationError("a check cannot override itself", self.id)

    @property
    def minimum_version(self) -> SchemaVersion:
        """Oldest schema version any implementation applies to."""
        return self.versions[0].minimum_version


class CheckRegistry:
    """
    Ordered catalog of checks.

    Registration order is preserved and defines the order in which
    evaluation results are reported.

    Example:
        registry = CheckRegistry()
        registry.register(check_privileged())
        registry.freeze()
        for check in registry.all():
            ...
    """

    def __init__(self):
        """Initialize an empty, writable registry."""
        self._checks: dict[str, Check] = {}
        self._frozen = False
        self._lock = threading.Lock()

    def register(self, check: Check) -> Check:
        """
        Register a check.

        Args:
            check: Check to register

        Returns:
            The registered check

        Raises:
            CheckRegistrationError: If the registry is frozen, the ID is
                already registered or the check definition is invalid
        """
        check.validate()
        with self._lock:
            if self._frozen:
                raise CheckRegistrationError("registry is frozen", check.id)
            if check.id in self._checks:
                raise CheckRegistrationError("check is already registered", check.id)
            self._checks[check.id] = check

        logger.debug(
            f"Registered check {check.id} ({check.level.value}, "
            f"{len(check.versions)} versions)"
        )
        return check

    def freeze(self) -> CheckRegistry:
        """
        Make the registry read-only.

        Returns:
            self

        Raises:
            CheckRegistrationError: If an override names an unknown check
        """
        with self._lock:
            if self._frozen:
                return self
            for check in self._checks.values():
                for versioned in check.versions:
                    for override_id in versioned.override_check_ids:
                        if override_id not in self._checks:
                            raise CheckRegistrationError(
                                f"overrides unknown check {override_id!r}", check.id
                            )
            self._frozen = True

        logger.debug(f"Check registry frozen with {len(self._checks)} checks")
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def all(self) -> tuple[Check, ...]:
        """Get all checks in registration order."""
        return tuple(self._checks.values())

    def get(self, check_id: str) -> Check | None:
        return self._checks.get(check_id)

    def ids(self) -> list[str]:
        return list(self._checks)

    def minimum_version(self) -> SchemaVersion | None:
        """
        Oldest schema version supported by the catalog.

        Returns:
            Minimum version across all checks, or None if empty
        """
        if not self._checks:
            return None
        return min(check.minimum_version for check in self._checks.values())

    def __contains__(self, check_id: object) -> bool:
        return check_id in self._checks

    def __len__(self) -> int:
        return len(self._checks)

    def __iter__(self) -> Iterator[Check]:
        return iter(self.all())


# Process-wide registry of built-in checks
_default_registry = CheckRegistry()
_default_factories: list[Callable[[], Check]] = []
_default_lock = threading.Lock()
_default_loaded = False

CHECKS_PACKAGE = "podsecurity.policy.checks"


def add_check(factory: Callable[[], Check]) -> Callable[[], Check]:
    """
    Add a check factory to the default registry.

    Usable as a decorator on check factory functions. The factory is only
    called by default_registry(), once every check module is imported, so
    it may refer to version functions defined later in its module.
    """
    _default_factories.append(factory)
    return factory


def default_registry() -> CheckRegistry:
    """
    Get the frozen registry of built-in checks.

    The first call imports the checks package, builds every check added
    with add_check() in import order, then freezes the registry.

    Returns:
        Frozen CheckRegistry
    """
    global _default_loaded
    with _default_lock:
        if not _default_loaded:
            importlib.import_module(CHECKS_PACKAGE)
            for factory in _default_factories:
                _default_registry.register(factory())
            _default_registry.freeze()
            _default_loaded = True
        return _default_registry
