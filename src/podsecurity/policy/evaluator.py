"""
Pod evaluator for podsecurity.

Runs the registered checks against a pod at a target schema version and
folds the per-check results into a single decision: the strictest level
the pod satisfies, plus the ordered list of failed checks used to build
the human-readable message and the structured error list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from podsecurity.models import Level, LevelVersion, SchemaVersion
from podsecurity.policy.options import Options
from podsecurity.policy.registry import (
    CheckRegistry,
    CheckResult,
    VersionedCheck,
    default_registry,
)
from podsecurity.policy.resolver import overridden_ids, resolve_all
from podsecurity.policy.violations import FieldError
from podsecurity.workload import extract_pod

logger = logging.getLogger(__name__)


@dataclass
class CheckOutcome:
    """A failed check together with its identity."""

    check_id: str
    level: Level
    result: CheckResult

    @property
    def forbidden_reason(self) -> str:
        return self.result.forbidden_reason

    @property
    def forbidden_detail(self) -> str:
        return self.result.forbidden_detail

    @property
    def errors(self) -> list[FieldError]:
        return self.result.errors

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "check_id": self.check_id,
            "level": self.level.value,
            **self.result.to_dict(),
        }


@dataclass
class EvaluationResult:
    """
    Result of evaluating a pod against every registered check.

    Attributes:
        version: Schema version the checks were resolved against
        level: Strictest level the pod satisfies
        violations: Failed checks in registry order, after override suppression
        suppressed: Failed checks hidden from the message and errors because
            a failed check overrides them. They still count towards level.
        checks_evaluated: Number of checks that ran
    """

    version: SchemaVersion
    level: Level = Level.RESTRICTED
    violations: list[CheckOutcome] = field(default_factory=list)
    suppressed: list[CheckOutcome] = field(default_factory=list)
    checks_evaluated: int = 0

    @property
    def allowed(self) -> bool:
        """True if no check failed, i.e. the pod satisfies restricted."""
        return not self.violations

    def passes(self, level: Level) -> bool:
        """Check whether the pod may be admitted at level."""
        return self.level >= level

    def get_violations_by_level(self, level: Level) -> list[CheckOutcome]:
        """Get failed checks for a specific level."""
        return [v for v in self.violations if v.level == level]

    @property
    def forbidden_reasons(self) -> list[str]:
        return [v.forbidden_reason for v in self.violations]

    @property
    def forbidden_details(self) -> list[str]:
        return [v.forbidden_detail for v in self.violations]

    @property
    def forbidden_reason(self) -> str:
        return ", ".join(self.forbidden_reasons)

    @property
    def forbidden_detail(self) -> str:
        return "; ".join(self.forbidden_details)

    @property
    def errors(self) -> list[FieldError]:
        """Structured errors of all failed checks, in registry order."""
        errors: list[FieldError] = []
        for violation in self.violations:
            errors.extend(violation.errors)
        return errors

    def message(self) -> str:
        """
        Human-readable summary of all failed checks.

        Returns:
            e.g. 'privileged (container "app" must not set ...), hostPort (...)'
            or an empty string when nothing failed
        """
        parts = []
        for violation in self.violations:
            if violation.forbidden_detail:
                parts.append(f"{violation.forbidden_reason} ({violation.forbidden_detail})")
            else:
                parts.append(violation.forbidden_reason)
        return ", ".join(parts)

    def summary(self) -> dict[str, Any]:
        """Get evaluation summary."""
        return {
            "version": str(self.version),
            "level": self.level.value,
            "passes_baseline": self.passes(Level.BASELINE),
            "passes_restricted": self.passes(Level.RESTRICTED),
            "checks_evaluated": self.checks_evaluated,
            "violations": [v.check_id for v in self.violations],
            "suppressed": [v.check_id for v in self.suppressed],
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            **self.summary(),
            "message": self.message(),
            "results": [v.to_dict() for v in self.violations],
        }


@dataclass
class AggregateCheckResult:
    """
    Result of enforcing a single level on a pod.

    Attributes:
        allowed: True if every check at or below the level passed
        forbidden_reasons: Reasons of the failed checks, in registry order
        forbidden_details: Details of the failed checks, in registry order
        errors: Structured errors of the failed checks
    """

    allowed: bool = True
    forbidden_reasons: list[str] = field(default_factory=list)
    forbidden_details: list[str] = field(default_factory=list)
    errors: list[FieldError] = field(default_factory=list)

    def forbidden_reason(self) -> str:
        return ", ".join(self.forbidden_reasons)

    def forbidden_detail(self) -> str:
        return "; ".join(self.forbidden_details)


class Evaluator:
    """
    Evaluates pods against a frozen check registry.

    The evaluator holds no per-call state; one instance can serve
    concurrent evaluations.

    Example:
        evaluator = Evaluator()
        result = evaluator.evaluate(metadata, spec, "v1.30")
        if not result.passes(Level.BASELINE):
            print(result.message())
    """

    def __init__(self, registry: CheckRegistry | None = None):
        """
        Initialize the evaluator.

        Args:
            registry: Check registry to use. Defaults to the built-in
                checks. An unfrozen registry is frozen here.
        """
        if registry is None:
            registry = default_registry()
        self.registry = registry.freeze()

    def evaluate(
        self,
        metadata: Mapping[str, Any] | None,
        spec: Mapping[str, Any] | None,
        version: SchemaVersion | str,
        options: Options | None = None,
    ) -> EvaluationResult:
        """
        Evaluate a pod against every check.

        Args:
            metadata: Pod metadata mapping
            spec: Pod spec mapping
            version: Target schema version
            options: Evaluation options

        Returns:
            EvaluationResult with the strictest satisfied level

        Raises:
            VersionResolutionError: If version predates every check
        """
        version = SchemaVersion.parse(version)
        options = options or Options()
        metadata = metadata or {}
        spec = spec or {}

        resolved = resolve_all(self.registry.all(), version)

        failed: list[tuple[CheckOutcome, VersionedCheck]] = []
        for check, versioned in resolved:
            check_result = versioned.check_pod(metadata, spec, options)
            if not check_result.allowed:
                outcome = CheckOutcome(check_id=check.id, level=check.level, result=check_result)
                failed.append((outcome, versioned))

        # Only a failed check suppresses the checks it overrides
        overridden = overridden_ids(failed)

        result = EvaluationResult(version=version, checks_evaluated=len(resolved))
        for outcome, _ in failed:
            if outcome.check_id in overridden:
                result.suppressed.append(outcome)
            else:
                result.violations.append(outcome)

        # Suppressed checks still failed at their own level
        for outcome, _ in failed:
            result.level = min(result.level, outcome.level.weaker())

        logger.debug(
            f"Evaluated {len(resolved)} checks at {version}: level={result.level.value}, "
            f"{len(result.violations)} violations, {len(result.suppressed)} suppressed"
        )
        return result

    def evaluate_pod(
        self,
        pod: Any,
        version: SchemaVersion | str,
        options: Options | None = None,
    ) -> EvaluationResult:
        """
        Evaluate a pod or pod-templated workload document.

        Args:
            pod: Pod, Deployment, Job, CronJob, ... as a mapping or a
                kubernetes client object
            version: Target schema version
            options: Evaluation options

        Returns:
            EvaluationResult
        """
        document = extract_pod(pod)
        return self.evaluate(document.metadata, document.spec, version, options)

    def check_pod(
        self,
        level_version: LevelVersion | str,
        metadata: Mapping[str, Any] | None,
        spec: Mapping[str, Any] | None,
        options: Options | None = None,
    ) -> AggregateCheckResult:
        """
        Enforce a single level on a pod.

        Only checks at or below the level run. Checks overridden by one of
        those checks are skipped. The privileged level allows everything.

        Args:
            level_version: Level and version to enforce, e.g. "restricted:v1.30"
            metadata: Pod metadata mapping
            spec: Pod spec mapping
            options: Evaluation options

        Returns:
            AggregateCheckResult
        """
        if isinstance(level_version, str):
            level_version = LevelVersion.parse(level_version)
        options = options or Options()
        metadata = metadata or {}
        spec = spec or {}

        aggregate = AggregateCheckResult()
        if level_version.level == Level.PRIVILEGED:
            return aggregate

        checks = [c for c in self.registry.all() if c.level <= level_version.level]
        resolved = resolve_all(checks, level_version.version)
        overridden = overridden_ids(resolved)

        for check, versioned in resolved:
            if check.id in overridden:
                continue
            check_result = versioned.check_pod(metadata, spec, options)
            if check_result.allowed:
                continue
            aggregate.allowed = False
            aggregate.forbidden_reasons.append(check_result.forbidden_reason)
            aggregate.forbidden_details.append(check_result.forbidden_detail)
            aggregate.errors.extend(check_result.errors)

        return aggregate


def evaluate_pod(
    pod: Any,
    version: SchemaVersion | str = "latest",
    with_field_errors: bool = False,
) -> EvaluationResult:
    """
    Convenience function to evaluate a pod with the built-in checks.

    Args:
        pod: Pod or pod-templated workload
        version: Target schema version
        with_field_errors: Build structured field errors

    Returns:
        EvaluationResult

    Example:
        >>> result = evaluate_pod(pod, "v1.30")
        >>> print(f"Level: {result.level.value}")
    """
    evaluator = Evaluator()
    return evaluator.evaluate_pod(pod, version, Options(with_field_errors=with_field_errors))
