"""
podsecurity - Pod Security Standards evaluation.

Evaluates Kubernetes pod specs against the baseline and restricted Pod
Security Standards at a chosen schema version, reporting the strictest
level a pod satisfies and why it fails the stricter ones.

Example:
    from podsecurity import Evaluator, Level

    result = Evaluator().evaluate(pod["metadata"], pod["spec"], "v1.30")
    if not result.passes(Level.BASELINE):
        print(result.message())
"""

__version__ = "0.1.0"

from podsecurity.errors import (
    CheckRegistrationError,
    ConfigError,
    InvalidLevelError,
    InvalidVersionError,
    PolicyError,
    VersionResolutionError,
    WorkloadError,
)
from podsecurity.models import Level, LevelVersion, SchemaVersion
from podsecurity.policy import (
    Check,
    CheckRegistry,
    CheckResult,
    EvaluationResult,
    Evaluator,
    Options,
    VersionedCheck,
    default_registry,
    evaluate_pod,
)
from podsecurity.workload import PodDocument, extract_pod, load_workloads

__all__ = [
    "__version__",
    # Models
    "Level",
    "LevelVersion",
    "SchemaVersion",
    # Evaluation
    "Evaluator",
    "EvaluationResult",
    "Options",
    "evaluate_pod",
    # Registry
    "Check",
    "CheckRegistry",
    "CheckResult",
    "VersionedCheck",
    "default_registry",
    # Workloads
    "PodDocument",
    "extract_pod",
    "load_workloads",
    # Errors
    "PolicyError",
    "CheckRegistrationError",
    "VersionResolutionError",
    "InvalidVersionError",
    "InvalidLevelError",
    "WorkloadError",
    "ConfigError",
]
