"""
Sysctls can disable security mechanisms or affect all containers on a
host, and should be disallowed except for an allowed "safe" subset. A
sysctl is considered safe if it is namespaced in the container or the
pod, and it is isolated from other pods or processes on the same node.

Restricted fields:
    spec.securityContext.sysctls[*].name

Allowed values grow with the schema version; see SAFE_SYSCTLS_*.
"""

from __future__ import annotations

from typing import AbstractSet, Any, Mapping

from podsecurity.models import Level, SchemaVersion
from podsecurity.policy.helpers import security_context, sequence
from podsecurity.policy.options import Options
from podsecurity.policy.paths import sysctls_path
from podsecurity.policy.registry import Check, CheckResult, VersionedCheck, add_check
from podsecurity.policy.violations import Violations, forbidden

CHECK_ID = "sysctls"

SAFE_SYSCTLS_1_0 = frozenset({
    "kernel.shm_rmid_forced",
    "net.ipv4.ip_local_port_range",
    "net.ipv4.tcp_syncookies",
    "net.ipv4.ping_group_range",
    "net.ipv4.ip_unprivileged_port_start",
})

SAFE_SYSCTLS_1_27 = SAFE_SYSCTLS_1_0 | {
    "net.ipv4.ip_local_reserved_ports",
}

SAFE_SYSCTLS_1_29 = SAFE_SYSCTLS_1_27 | {
    "net.ipv4.tcp_keepalive_time",
    "net.ipv4.tcp_fin_timeout",
    "net.ipv4.tcp_keepalive_intvl",
    "net.ipv4.tcp_keepalive_probes",
}


@add_check
def check_sysctls() -> Check:
    return Check(
        id=CHECK_ID,
        level=Level.BASELINE,
        versions=(
            VersionedCheck(
                minimum_version=SchemaVersion.major_minor(1, 0),
                check_pod=sysctls_1_0,
            ),
            VersionedCheck(
                minimum_version=SchemaVersion.major_minor(1, 27),
                check_pod=sysctls_1_27,
            ),
            VersionedCheck(
                minimum_version=SchemaVersion.major_minor(1, 29),
                check_pod=sysctls_1_29,
            ),
        ),
    )


def sysctls_1_0(metadata: Mapping[str, Any], spec: Mapping[str, Any], options: Options) -> CheckResult:
    return sysctls(spec, options, SAFE_SYSCTLS_1_0)


def sysctls_1_27(metadata: Mapping[str, Any], spec: Mapping[str, Any], options: Options) -> CheckResult:
    return sysctls(spec, options, SAFE_SYSCTLS_1_27)


def sysctls_1_29(metadata: Mapping[str, Any], spec: Mapping[str, Any], options: Options) -> CheckResult:
    return sysctls(spec, options, SAFE_SYSCTLS_1_29)


def sysctls(
    spec: Mapping[str, Any],
    options: Options,
    allowed: AbstractSet[str],
) -> CheckResult:
    forbidden_sysctls = Violations[str](options.with_field_errors)

    for i, sysctl in enumerate(sequence(security_context(spec), "sysctls")):
        name = sysctl.get("name") if isinstance(sysctl, Mapping) else None
        name = "" if name is None else str(name)
        if name not in allowed:
            forbidden_sysctls.add(name, forbidden(sysctls_path.index(i).child("name"), name))

    if forbidden_sysctls:
        return CheckResult(
            allowed=False,
            forbidden_reason="forbidden sysctls",
            forbidden_detail=", ".join(forbidden_sysctls.data()),
            errors=forbidden_sysctls.errors(),
        )
    return CheckResult(allowed=True)
