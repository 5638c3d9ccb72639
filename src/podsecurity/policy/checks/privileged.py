"""
Privileged pods disable most security mechanisms and must be disallowed.

Restricted fields:
    spec.containers[*].securityContext.privileged
    spec.initContainers[*].securityContext.privileged
    spec.ephemeralContainers[*].securityContext.privileged

Allowed values: undefined, false
"""

from __future__ import annotations

from typing import Any, Mapping

from podsecurity.models import Level, SchemaVersion
from podsecurity.policy.helpers import container_name, containers_label, scalar, security_context
from podsecurity.policy.options import Options
from podsecurity.policy.paths import PathFn
from podsecurity.policy.registry import Check, CheckResult, VersionedCheck, add_check
from podsecurity.policy.violations import Violations, forbidden
from podsecurity.policy.visitor import visit_containers

CHECK_ID = "privileged"


@add_check
def check_privileged() -> Check:
    return Check(
        id=CHECK_ID,
        level=Level.BASELINE,
        versions=(
            VersionedCheck(
                minimum_version=SchemaVersion.major_minor(1, 0),
                check_pod=privileged_1_0,
            ),
        ),
    )


def privileged_1_0(
    metadata: Mapping[str, Any],
    spec: Mapping[str, Any],
    options: Options,
) -> CheckResult:
    bad_containers = Violations[str](options.with_field_errors)

    def visit(container: Mapping[str, Any], path_fn: PathFn) -> None:
        if scalar(security_context(container), "privileged") is True:
            bad_containers.add(
                container_name(container),
                forbidden(path_fn.child("securityContext", "privileged"), True),
            )

    visit_containers(spec, options, visit)

    if bad_containers:
        return CheckResult(
            allowed=False,
            forbidden_reason="privileged",
            forbidden_detail=(
                f"{containers_label(bad_containers.data())} must not set "
                "securityContext.privileged=true"
            ),
            errors=bad_containers.errors(),
        )
    return CheckResult(allowed=True)
