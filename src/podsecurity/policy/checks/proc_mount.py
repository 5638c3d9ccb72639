"""
The default /proc masks are set up to reduce attack surface, and should
be required.

Restricted fields:
    spec.containers[*].securityContext.procMount
    spec.initContainers[*].securityContext.procMount
    spec.ephemeralContainers[*].securityContext.procMount

Allowed values: undefined, "Default"
"""

from __future__ import annotations

from typing import Any, Mapping

from podsecurity.models import Level, SchemaVersion
from podsecurity.policy.helpers import (
    container_name,
    containers_label,
    join_quote,
    scalar,
    security_context,
)
from podsecurity.policy.options import Options
from podsecurity.policy.paths import PathFn
from podsecurity.policy.registry import Check, CheckResult, VersionedCheck, add_check
from podsecurity.policy.violations import Violations, forbidden
from podsecurity.policy.visitor import visit_containers

CHECK_ID = "procMount"

PROC_MOUNT_DEFAULT = "Default"


@add_check
def check_proc_mount() -> Check:
    return Check(
        id=CHECK_ID,
        level=Level.BASELINE,
        versions=(
            VersionedCheck(
                minimum_version=SchemaVersion.major_minor(1, 0),
                check_pod=proc_mount_1_0,
            ),
        ),
    )


def proc_mount_1_0(
    metadata: Mapping[str, Any],
    spec: Mapping[str, Any],
    options: Options,
) -> CheckResult:
    bad_containers = Violations[str](options.with_field_errors)
    bad_values: set[str] = set()

    def visit(container: Mapping[str, Any], path_fn: PathFn) -> None:
        proc_mount = scalar(security_context(container), "procMount")
        if proc_mount is None or proc_mount == PROC_MOUNT_DEFAULT:
            return
        bad_values.add(str(proc_mount))
        bad_containers.add(
            container_name(container),
            forbidden(path_fn.child("securityContext", "procMount"), proc_mount),
        )

    visit_containers(spec, options, visit)

    if bad_containers:
        return CheckResult(
            allowed=False,
            forbidden_reason="procMount",
            forbidden_detail=(
                f"{containers_label(bad_containers.data())} must not set "
                f"securityContext.procMount to {join_quote(sorted(bad_values))}"
            ),
            errors=bad_containers.errors(),
        )
    return CheckResult(allowed=True)
