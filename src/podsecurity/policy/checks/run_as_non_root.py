"""
Containers must be required to run as non-root users.

Restricted fields:
    spec.securityContext.runAsNonRoot
    spec.containers[*].securityContext.runAsNonRoot
    spec.initContainers[*].securityContext.runAsNonRoot
    spec.ephemeralContainers[*].securityContext.runAsNonRoot

Allowed values: true. Containers may leave the field unset when the pod
sets it to true.
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
from podsecurity.policy.paths import PathFn, run_as_non_root_path
from podsecurity.policy.registry import Check, CheckResult, VersionedCheck, add_check
from podsecurity.policy.violations import ErrFn, Violations, forbidden, required
from podsecurity.policy.visitor import visit_containers

CHECK_ID = "runAsNonRoot"


@add_check
def check_run_as_non_root() -> Check:
    return Check(
        id=CHECK_ID,
        level=Level.RESTRICTED,
        versions=(
            VersionedCheck(
                minimum_version=SchemaVersion.major_minor(1, 0),
                check_pod=run_as_non_root_1_0,
            ),
        ),
    )


def run_as_non_root_1_0(
    metadata: Mapping[str, Any],
    spec: Mapping[str, Any],
    options: Options,
) -> CheckResult:
    bad_setters = Violations[str](options.with_field_errors)

    pod_run_as_non_root = False
    pod_value = scalar(security_context(spec), "runAsNonRoot")
    if pod_value is not None:
        if pod_value is True:
            pod_run_as_non_root = True
        else:
            bad_setters.add("pod", forbidden(run_as_non_root_path, False))

    explicitly_bad = Violations[str](options.with_field_errors)
    explicit_err_fns: list[ErrFn | None] = []
    implicitly_bad = Violations[str](options.with_field_errors)

    def visit(container: Mapping[str, Any], path_fn: PathFn) -> None:
        value = scalar(security_context(container), "runAsNonRoot")
        if value is not None:
            if value is not True:
                explicitly_bad.add(container_name(container))
                explicit_err_fns.append(
                    forbidden(path_fn.child("securityContext", "runAsNonRoot"), False)
                )
        elif not pod_run_as_non_root:
            implicitly_bad.add(container_name(container), required(run_as_non_root_path))

    visit_containers(spec, options, visit)

    if explicitly_bad:
        bad_setters.add(containers_label(explicitly_bad.data()), *explicit_err_fns)

    if bad_setters:
        return CheckResult(
            allowed=False,
            forbidden_reason="runAsNonRoot != true",
            forbidden_detail=(
                f"{' and '.join(bad_setters.data())} must not set "
                "securityContext.runAsNonRoot=false"
            ),
            errors=bad_setters.errors(),
        )

    if implicitly_bad:
        return CheckResult(
            allowed=False,
            forbidden_reason="runAsNonRoot != true",
            forbidden_detail=(
                f"pod or {containers_label(implicitly_bad.data())} must set "
                "securityContext.runAsNonRoot=true"
            ),
            errors=implicitly_bad.errors(),
        )

    return CheckResult(allowed=True)
