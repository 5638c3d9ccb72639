"""
Containers must not set runAsUser to 0.

Restricted fields:
    spec.securityContext.runAsUser
    spec.containers[*].securityContext.runAsUser
    spec.initContainers[*].securityContext.runAsUser
    spec.ephemeralContainers[*].securityContext.runAsUser

Allowed values: non-zero values, undefined/null
"""

from __future__ import annotations

from typing import Any, Mapping

from podsecurity.models import Level, SchemaVersion
from podsecurity.policy.helpers import (
    container_name,
    containers_label,
    scalar,
    security_context,
)
from podsecurity.policy.options import Options
from podsecurity.policy.paths import PathFn, run_as_user_path
from podsecurity.policy.registry import Check, CheckResult, VersionedCheck, add_check
from podsecurity.policy.violations import ErrFn, Violations, forbidden
from podsecurity.policy.visitor import visit_containers

CHECK_ID = "runAsUser"


@add_check
def check_run_as_user() -> Check:
    return Check(
        id=CHECK_ID,
        level=Level.RESTRICTED,
        versions=(
            VersionedCheck(
                minimum_version=SchemaVersion.major_minor(1, 23),
                check_pod=run_as_user_1_23,
            ),
        ),
    )


def _is_root(value: Any) -> bool:
    return value == 0 and not isinstance(value, bool)


def run_as_user_1_23(
    metadata: Mapping[str, Any],
    spec: Mapping[str, Any],
    options: Options,
) -> CheckResult:
    bad_setters = Violations[str](options.with_field_errors)

    if _is_root(scalar(security_context(spec), "runAsUser")):
        bad_setters.add("pod", forbidden(run_as_user_path, 0))

    explicitly_bad = Violations[str](options.with_field_errors)
    explicit_err_fns: list[ErrFn | None] = []

    def visit(container: Mapping[str, Any], path_fn: PathFn) -> None:
        if _is_root(scalar(security_context(container), "runAsUser")):
            explicitly_bad.add(container_name(container))
            explicit_err_fns.append(forbidden(path_fn.child("securityContext", "runAsUser"), 0))

    visit_containers(spec, options, visit)

    if explicitly_bad:
        bad_setters.add(containers_label(explicitly_bad.data()), *explicit_err_fns)

    if bad_setters:
        return CheckResult(
            allowed=False,
            forbidden_reason="runAsUser=0",
            forbidden_detail=f"{' and '.join(bad_setters.data())} must not set runAsUser=0",
            errors=bad_setters.errors(),
        )
    return CheckResult(allowed=True)
