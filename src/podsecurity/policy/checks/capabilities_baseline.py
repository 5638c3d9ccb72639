"""
Adding capabilities beyond the default set must be disallowed.

Restricted fields:
    spec.containers[*].securityContext.capabilities.add
    spec.initContainers[*].securityContext.capabilities.add
    spec.ephemeralContainers[*].securityContext.capabilities.add

Allowed values: undefined/empty, or a subset of the container runtime's
default capability set.
"""

from __future__ import annotations

from typing import Any, Mapping

from podsecurity.models import Level, SchemaVersion
from podsecurity.policy.helpers import (
    container_name,
    containers_label,
    join_quote,
    mapping,
    security_context,
    sequence,
)
from podsecurity.policy.options import Options
from podsecurity.policy.paths import PathFn
from podsecurity.policy.registry import Check, CheckResult, VersionedCheck, add_check
from podsecurity.policy.violations import Violations, forbidden
from podsecurity.policy.visitor import visit_containers

CHECK_ID = "capabilities_baseline"

# Default capabilities of the common container runtimes
DEFAULT_CAPABILITIES = frozenset({
    "AUDIT_WRITE",
    "CHOWN",
    "DAC_OVERRIDE",
    "FOWNER",
    "FSETID",
    "KILL",
    "MKNOD",
    "NET_BIND_SERVICE",
    "SETFCAP",
    "SETGID",
    "SETPCAP",
    "SETUID",
    "SYS_CHROOT",
})


@add_check
def check_capabilities_baseline() -> Check:
    return Check(
        id=CHECK_ID,
        level=Level.BASELINE,
        versions=(
            VersionedCheck(
                minimum_version=SchemaVersion.major_minor(1, 0),
                check_pod=capabilities_baseline_1_0,
            ),
        ),
    )


def capabilities_baseline_1_0(
    metadata: Mapping[str, Any],
    spec: Mapping[str, Any],
    options: Options,
) -> CheckResult:
    bad_containers = Violations[str](options.with_field_errors)
    non_default: set[str] = set()

    def visit(container: Mapping[str, Any], path_fn: PathFn) -> None:
        capabilities = mapping(security_context(container), "capabilities")
        added = [str(c) for c in sequence(capabilities, "add")]
        bad = sorted({c for c in added if c not in DEFAULT_CAPABILITIES})
        if bad:
            non_default.update(bad)
            bad_containers.add(
                container_name(container),
                forbidden(path_fn.child("securityContext", "capabilities", "add"), bad),
            )

    visit_containers(spec, options, visit)

    if bad_containers:
        return CheckResult(
            allowed=False,
            forbidden_reason="non-default capabilities",
            forbidden_detail=(
                f"{containers_label(bad_containers.data())} must not include "
                f"{join_quote(sorted(non_default))} in securityContext.capabilities.add"
            ),
            errors=bad_containers.errors(),
        )
    return CheckResult(allowed=True)
