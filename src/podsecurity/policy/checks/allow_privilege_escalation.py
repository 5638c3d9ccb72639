"""
Privilege escalation (such as via set-user-ID or set-group-ID file mode)
should not be allowed.

Restricted fields:
    spec.containers[*].securityContext.allowPrivilegeEscalation
    spec.initContainers[*].securityContext.allowPrivilegeEscalation
    spec.ephemeralContainers[*].securityContext.allowPrivilegeEscalation

Allowed values: false

Since v1.25 pods with spec.os.name=windows are exempt.
"""

from __future__ import annotations

from typing import Any, Mapping

from podsecurity.models import Level, SchemaVersion
from podsecurity.policy.helpers import (
    container_name,
    is_windows,
    join_quote,
    pluralize,
    security_context,
)
from podsecurity.policy.options import Options
from podsecurity.policy.paths import PathFn
from podsecurity.policy.registry import Check, CheckResult, VersionedCheck, add_check
from podsecurity.policy.violations import Violations, forbidden, required
from podsecurity.policy.visitor import visit_containers

CHECK_ID = "allowPrivilegeEscalation"


@add_check
def check_allow_privilege_escalation() -> Check:
    return Check(
        id=CHECK_ID,
        level=Level.RESTRICTED,
        versions=(
            VersionedCheck(
                minimum_version=SchemaVersion.major_minor(1, 8),
                check_pod=allow_privilege_escalation_1_8,
            ),
            VersionedCheck(
                minimum_version=SchemaVersion.major_minor(1, 25),
                check_pod=allow_privilege_escalation_1_25,
            ),
        ),
    )


def allow_privilege_escalation_1_8(
    metadata: Mapping[str, Any],
    spec: Mapping[str, Any],
    options: Options,
) -> CheckResult:
    bad_containers = Violations[str](options.with_field_errors)

    def visit(container: Mapping[str, Any], path_fn: PathFn) -> None:
        sc = security_context(container)
        value = sc.get("allowPrivilegeEscalation") if sc else None
        field_path = path_fn.child("securityContext", "allowPrivilegeEscalation")
        if value is None:
            bad_containers.add(container_name(container), required(field_path))
        elif value is not False:
            bad_containers.add(container_name(container), forbidden(field_path, value))

    visit_containers(spec, options, visit)

    if bad_containers:
        return CheckResult(
            allowed=False,
            forbidden_reason="allowPrivilegeEscalation != false",
            forbidden_detail=(
                f"{pluralize('container', 'containers', len(bad_containers))} "
                f"{join_quote(bad_containers.data())} must set "
                "securityContext.allowPrivilegeEscalation=false"
            ),
            errors=bad_containers.errors(),
        )
    return CheckResult(allowed=True)


def allow_privilege_escalation_1_25(
    metadata: Mapping[str, Any],
    spec: Mapping[str, Any],
    options: Options,
) -> CheckResult:
    # Windows pods cannot set allowPrivilegeEscalation
    if is_windows(spec):
        return CheckResult(allowed=True)
    return allow_privilege_escalation_1_8(metadata, spec, options)
