"""
Sharing the host namespaces must be disallowed.

Restricted fields:
    spec.hostNetwork
    spec.hostPID
    spec.hostIPC

Allowed values: undefined, false
"""

from __future__ import annotations

from typing import Any, Mapping

from podsecurity.models import Level, SchemaVersion
from podsecurity.policy.helpers import scalar
from podsecurity.policy.options import Options
from podsecurity.policy.paths import host_ipc_path, host_network_path, host_pid_path
from podsecurity.policy.registry import Check, CheckResult, VersionedCheck, add_check
from podsecurity.policy.violations import Violations, forbidden

CHECK_ID = "hostNamespaces"

HOST_NAMESPACE_FIELDS = (
    ("hostNetwork", host_network_path),
    ("hostPID", host_pid_path),
    ("hostIPC", host_ipc_path),
)


@add_check
def check_host_namespaces() -> Check:
    return Check(
        id=CHECK_ID,
        level=Level.BASELINE,
        versions=(
            VersionedCheck(
                minimum_version=SchemaVersion.major_minor(1, 0),
                check_pod=host_namespaces_1_0,
            ),
        ),
    )


def host_namespaces_1_0(
    metadata: Mapping[str, Any],
    spec: Mapping[str, Any],
    options: Options,
) -> CheckResult:
    host_namespaces = Violations[str](options.with_field_errors)

    for field_name, path_fn in HOST_NAMESPACE_FIELDS:
        if scalar(spec, field_name) is True:
            host_namespaces.add(f"{field_name}=true", forbidden(path_fn, True))

    if host_namespaces:
        return CheckResult(
            allowed=False,
            forbidden_reason="host namespaces",
            forbidden_detail=", ".join(host_namespaces.data()),
            errors=host_namespaces.errors(),
        )
    return CheckResult(allowed=True)
