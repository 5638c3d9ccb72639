"""
Containers must drop ALL capabilities, and may only add back
NET_BIND_SERVICE.

Restricted fields:
    spec.containers[*].securityContext.capabilities.drop
    spec.initContainers[*].securityContext.capabilities.drop
    spec.ephemeralContainers[*].securityContext.capabilities.drop

Allowed values: must include "ALL"

Restricted fields:
    spec.containers[*].securityContext.capabilities.add
    spec.initContainers[*].securityContext.capabilities.add
    spec.ephemeralContainers[*].securityContext.capabilities.add

Allowed values: undefined/empty, "NET_BIND_SERVICE"

Supersedes capabilities_baseline. Since v1.25 pods with
spec.os.name=windows are exempt.
"""

from __future__ import annotations

from typing import Any, Mapping

from podsecurity.models import Level, SchemaVersion
from podsecurity.policy.checks.capabilities_baseline import CHECK_ID as BASELINE_CHECK_ID
from podsecurity.policy.helpers import (
    container_name,
    containers_label,
    is_windows,
    join_quote,
    mapping,
    security_context,
    sequence,
)
from podsecurity.policy.options import Options
from podsecurity.policy.paths import PathFn
from podsecurity.policy.registry import Check, CheckResult, VersionedCheck, add_check
from podsecurity.policy.violations import Violations, forbidden, required
from podsecurity.policy.visitor import visit_containers

CHECK_ID = "capabilities_restricted"

CAPABILITY_ALL = "ALL"
CAPABILITY_NET_BIND_SERVICE = "NET_BIND_SERVICE"


@add_check
def check_capabilities_restricted() -> Check:
    return Check(
        id=CHECK_ID,
        level=Level.RESTRICTED,
        versions=(
            VersionedCheck(
                minimum_version=SchemaVersion.major_minor(1, 22),
                check_pod=capabilities_restricted_1_22,
                override_check_ids=(BASELINE_CHECK_ID,),
            ),
            VersionedCheck(
                minimum_version=SchemaVersion.major_minor(1, 25),
                check_pod=capabilities_restricted_1_25,
                override_check_ids=(BASELINE_CHECK_ID,),
            ),
        ),
    )


def capabilities_restricted_1_22(
    metadata: Mapping[str, Any],
    spec: Mapping[str, Any],
    options: Options,
) -> CheckResult:
    missing_drop_all = Violations[str](options.with_field_errors)
    adding_forbidden = Violations[str](options.with_field_errors)
    forbidden_capabilities: set[str] = set()

    def visit(container: Mapping[str, Any], path_fn: PathFn) -> None:
        name = container_name(container)
        capabilities_path = path_fn.child("securityContext", "capabilities")
        capabilities = mapping(security_context(container), "capabilities")
        if capabilities is None:
            missing_drop_all.add(name, required(capabilities_path.child("drop")))
            return

        dropped = [str(c) for c in sequence(capabilities, "drop")]
        if CAPABILITY_ALL not in dropped:
            missing_drop_all.add(name, forbidden(capabilities_path.child("drop"), dropped))

        added = [str(c) for c in sequence(capabilities, "add")]
        bad = sorted({c for c in added if c != CAPABILITY_NET_BIND_SERVICE})
        if bad:
            forbidden_capabilities.update(bad)
            adding_forbidden.add(name, forbidden(capabilities_path.child("add"), bad))

    visit_containers(spec, options, visit)

    details = []
    if missing_drop_all:
        details.append(
            f"{containers_label(missing_drop_all.data())} must set "
            'securityContext.capabilities.drop=["ALL"]'
        )
    if adding_forbidden:
        details.append(
            f"{containers_label(adding_forbidden.data())} must not include "
            f"{join_quote(sorted(forbidden_capabilities))} in securityContext.capabilities.add"
        )

    if details:
        return CheckResult(
            allowed=False,
            forbidden_reason="unrestricted capabilities",
            forbidden_detail="; ".join(details),
            errors=missing_drop_all.errors() + adding_forbidden.errors(),
        )
    return CheckResult(allowed=True)


def capabilities_restricted_1_25(
    metadata: Mapping[str, Any],
    spec: Mapping[str, Any],
    options: Options,
) -> CheckResult:
    if is_windows(spec):
        return CheckResult(allowed=True)
    return capabilities_restricted_1_22(metadata, spec, options)
