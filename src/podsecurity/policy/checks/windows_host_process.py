"""
Windows pods offer the ability to run HostProcess containers, which give
privileged access to the Windows node. Privileged access to the host is
disallowed in the baseline policy.

Restricted fields:
    spec.securityContext.windowsOptions.hostProcess
    spec.containers[*].securityContext.windowsOptions.hostProcess
    spec.initContainers[*].securityContext.windowsOptions.hostProcess
    spec.ephemeralContainers[*].securityContext.windowsOptions.hostProcess

Allowed values: undefined, false
"""

from __future__ import annotations

from typing import Any, Mapping

from podsecurity.models import Level, SchemaVersion
from podsecurity.policy.helpers import (
    container_name,
    containers_label,
    mapping,
    scalar,
    security_context,
)
from podsecurity.policy.options import Options
from podsecurity.policy.paths import PathFn, host_process_path
from podsecurity.policy.registry import Check, CheckResult, VersionedCheck, add_check
from podsecurity.policy.violations import Violations, forbidden
from podsecurity.policy.visitor import visit_containers

CHECK_ID = "windowsHostProcess"


@add_check
def check_windows_host_process() -> Check:
    return Check(
        id=CHECK_ID,
        level=Level.BASELINE,
        versions=(
            VersionedCheck(
                minimum_version=SchemaVersion.major_minor(1, 0),
                check_pod=windows_host_process_1_0,
            ),
        ),
    )


def _host_process(obj: Any) -> bool:
    return scalar(mapping(security_context(obj), "windowsOptions"), "hostProcess") is True


def windows_host_process_1_0(
    metadata: Mapping[str, Any],
    spec: Mapping[str, Any],
    options: Options,
) -> CheckResult:
    bad_setters = Violations[str](options.with_field_errors)

    if _host_process(spec):
        bad_setters.add("pod", forbidden(host_process_path, True))

    bad_containers = Violations[str](options.with_field_errors)

    def visit(container: Mapping[str, Any], path_fn: PathFn) -> None:
        if _host_process(container):
            bad_containers.add(
                container_name(container),
                forbidden(path_fn.child("securityContext", "windowsOptions", "hostProcess"), True),
            )

    visit_containers(spec, options, visit)

    if bad_containers:
        bad_setters.add(containers_label(bad_containers.data()))

    if bad_setters:
        return CheckResult(
            allowed=False,
            forbidden_reason="hostProcess",
            forbidden_detail=(
                f"{' and '.join(bad_setters.data())} must not set "
                "securityContext.windowsOptions.hostProcess=true"
            ),
            errors=bad_setters.errors() + bad_containers.errors(),
        )
    return CheckResult(allowed=True)
