"""
Pod Security Standards policy engine.

This package provides:
- Lazy field paths and the violation accumulator used by checks
- The check registry and version resolver
- The evaluator that folds check results into a level decision
- The built-in baseline and restricted checks (policy.checks)
"""

from podsecurity.policy.evaluator import (
    AggregateCheckResult,
    CheckOutcome,
    EvaluationResult,
    Evaluator,
    evaluate_pod,
)
from podsecurity.policy.options import Options
from podsecurity.policy.paths import FieldPath, PathFn, with_path
from podsecurity.policy.registry import (
    Check,
    CheckRegistry,
    CheckResult,
    VersionedCheck,
    add_check,
    default_registry,
)
from podsecurity.policy.resolver import applicable, overridden_ids, resolve, resolve_all
from podsecurity.policy.violations import (
    ErrorType,
    FieldError,
    Violations,
    forbidden,
    required,
    with_bad_value,
)
from podsecurity.policy.visitor import visit_containers

__all__ = [
    # Evaluation
    "Evaluator",
    "EvaluationResult",
    "CheckOutcome",
    "AggregateCheckResult",
    "evaluate_pod",
    "Options",
    # Registry
    "Check",
    "CheckRegistry",
    "CheckResult",
    "VersionedCheck",
    "add_check",
    "default_registry",
    # Resolution
    "applicable",
    "resolve",
    "resolve_all",
    "overridden_ids",
    # Paths and violations
    "FieldPath",
    "PathFn",
    "with_path",
    "ErrorType",
    "FieldError",
    "Violations",
    "forbidden",
    "required",
    "with_bad_value",
    "visit_containers",
]
