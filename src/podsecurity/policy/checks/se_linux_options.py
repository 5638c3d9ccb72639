"""
Setting a custom SELinux user or role option is forbidden, and the type
is restricted to the container types.

Restricted fields:
    spec.securityContext.seLinuxOptions.type
    spec.containers[*].securityContext.seLinuxOptions.type
    spec.initContainers[*].securityContext.seLinuxOptions.type
    spec.ephemeralContainers[*].securityContext.seLinuxOptions.type

Allowed values: undefined/"", container_t, container_init_t,
container_kvm_t, and since v1.31 container_engine_t

Restricted fields:
    spec.securityContext.seLinuxOptions.user and .role
    spec.*Containers[*].securityContext.seLinuxOptions.user and .role

Allowed values: undefined/""
"""

from __future__ import annotations

from typing import AbstractSet, Any, Mapping

from podsecurity.models import Level, SchemaVersion
from podsecurity.policy.helpers import (
    container_name,
    containers_label,
    join_quote,
    mapping,
    pluralize,
    security_context,
)
from podsecurity.policy.options import Options
from podsecurity.policy.paths import (
    PathFn,
    selinux_options_role_path,
    selinux_options_type_path,
    selinux_options_user_path,
)
from podsecurity.policy.registry import Check, CheckResult, VersionedCheck, add_check
from podsecurity.policy.violations import ErrFn, Violations, forbidden
from podsecurity.policy.visitor import visit_containers

CHECK_ID = "seLinuxOptions"

ALLOWED_TYPES_1_0 = frozenset({"", "container_t", "container_init_t", "container_kvm_t"})
ALLOWED_TYPES_1_31 = ALLOWED_TYPES_1_0 | {"container_engine_t"}


@add_check
def check_se_linux_options() -> Check:
    return Check(
        id=CHECK_ID,
        level=Level.BASELINE,
        versions=(
            VersionedCheck(
                minimum_version=SchemaVersion.major_minor(1, 0),
                check_pod=se_linux_options_1_0,
            ),
            VersionedCheck(
                minimum_version=SchemaVersion.major_minor(1, 31),
                check_pod=se_linux_options_1_31,
            ),
        ),
    )


def se_linux_options_1_0(
    metadata: Mapping[str, Any],
    spec: Mapping[str, Any],
    options: Options,
) -> CheckResult:
    return se_linux_options(spec, options, ALLOWED_TYPES_1_0)


def se_linux_options_1_31(
    metadata: Mapping[str, Any],
    spec: Mapping[str, Any],
    options: Options,
) -> CheckResult:
    return se_linux_options(spec, options, ALLOWED_TYPES_1_31)


def se_linux_options(
    spec: Mapping[str, Any],
    options: Options,
    allowed_types: AbstractSet[str],
) -> CheckResult:
    bad_setters = Violations[str](options.with_field_errors)
    err_fns: list[ErrFn | None] = []
    bad_types: set[str] = set()
    flags = {"user": False, "role": False}

    def valid(
        selinux: Mapping[str, Any],
        type_path: PathFn,
        user_path: PathFn,
        role_path: PathFn,
    ) -> bool:
        ok = True
        selinux_type = selinux.get("type") or ""
        if selinux_type not in allowed_types:
            ok = False
            bad_types.add(str(selinux_type))
            err_fns.append(forbidden(type_path, selinux_type))
        for option, path_fn in (("user", user_path), ("role", role_path)):
            value = selinux.get(option)
            if value:
                ok = False
                flags[option] = True
                err_fns.append(forbidden(path_fn, value))
        return ok

    pod_selinux = mapping(security_context(spec), "seLinuxOptions")
    if pod_selinux is not None and not valid(
        pod_selinux,
        selinux_options_type_path,
        selinux_options_user_path,
        selinux_options_role_path,
    ):
        bad_setters.add("pod")

    bad_containers = Violations[str](options.with_field_errors)

    def visit(container: Mapping[str, Any], path_fn: PathFn) -> None:
        selinux = mapping(security_context(container), "seLinuxOptions")
        if selinux is None:
            return
        selinux_path = path_fn.child("securityContext", "seLinuxOptions")
        if not valid(
            selinux,
            selinux_path.child("type"),
            selinux_path.child("user"),
            selinux_path.child("role"),
        ):
            bad_containers.add(container_name(container))

    visit_containers(spec, options, visit)

    bad_setters.add_errs(*err_fns)
    if bad_containers:
        bad_setters.add(containers_label(bad_containers.data()))

    if not bad_setters:
        return CheckResult(allowed=True)

    bad_data = []
    if bad_types:
        bad_data.append(
            f"{pluralize('type', 'types', len(bad_types))} {join_quote(sorted(bad_types))}"
        )
    if flags["user"]:
        bad_data.append("user may not be set")
    if flags["role"]:
        bad_data.append("role may not be set")

    return CheckResult(
        allowed=False,
        forbidden_reason="seLinuxOptions",
        forbidden_detail=(
            f"{' and '.join(bad_setters.data())} set forbidden "
            f"securityContext.seLinuxOptions: {'; '.join(bad_data)}"
        ),
        errors=bad_setters.errors(),
    )
