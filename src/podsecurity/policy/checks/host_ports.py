"""
HostPort ports must be forbidden.

Restricted fields:
    spec.containers[*].ports[*].hostPort
    spec.initContainers[*].ports[*].hostPort
    spec.ephemeralContainers[*].ports[*].hostPort

Allowed values: undefined, 0
"""

from __future__ import annotations

from typing import Any, Mapping

from podsecurity.models import Level, SchemaVersion
from podsecurity.policy.helpers import container_name, containers_label, pluralize, sequence
from podsecurity.policy.options import Options
from podsecurity.policy.paths import PathFn
from podsecurity.policy.registry import Check, CheckResult, VersionedCheck, add_check
from podsecurity.policy.violations import Violations, forbidden
from podsecurity.policy.visitor import visit_containers

CHECK_ID = "hostPorts"


@add_check
def check_host_ports() -> Check:
    return Check(
        id=CHECK_ID,
        level=Level.BASELINE,
        versions=(
            VersionedCheck(
                minimum_version=SchemaVersion.major_minor(1, 0),
                check_pod=host_ports_1_0,
            ),
        ),
    )


def host_ports_1_0(
    metadata: Mapping[str, Any],
    spec: Mapping[str, Any],
    options: Options,
) -> CheckResult:
    bad_containers = Violations[str](options.with_field_errors)
    host_ports: set[str] = set()

    def visit(container: Mapping[str, Any], path_fn: PathFn) -> None:
        err_fns = []
        for i, port in enumerate(sequence(container, "ports")):
            host_port = port.get("hostPort") if isinstance(port, Mapping) else None
            if not host_port:
                continue
            host_ports.add(str(host_port))
            err_fns.append(forbidden(path_fn.child("ports").index(i).child("hostPort"), host_port))
        if err_fns:
            bad_containers.add(container_name(container), *err_fns)

    visit_containers(spec, options, visit)

    if bad_containers:
        return CheckResult(
            allowed=False,
            forbidden_reason="hostPort",
            forbidden_detail=(
                f"{containers_label(bad_containers.data())} "
                f"{pluralize('uses', 'use', len(bad_containers))} "
                f"{pluralize('hostPort', 'hostPorts', len(host_ports))} "
                f"{', '.join(sorted(host_ports))}"
            ),
            errors=bad_containers.errors(),
        )
    return CheckResult(allowed=True)
