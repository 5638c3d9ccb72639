"""
Seccomp profile must be explicitly set to one of the allowed values.
Both the Unconfined profile and the absence of a profile are prohibited.

Restricted fields:
    spec.securityContext.seccompProfile.type
    spec.containers[*].securityContext.seccompProfile.type
    spec.initContainers[*].securityContext.seccompProfile.type
    spec.ephemeralContainers[*].securityContext.seccompProfile.type

Allowed values: RuntimeDefault, Localhost. Containers may leave the
field unset when the pod sets an allowed value.

Supersedes seccompProfile_baseline. Since v1.25 pods with
spec.os.name=windows are exempt.
"""

from __future__ import annotations

from typing import Any, Mapping

from podsecurity.models import Level, SchemaVersion
from podsecurity.policy.checks.seccomp_profile_baseline import (
    CHECK_ID as BASELINE_CHECK_ID,
    valid_seccomp_type,
)
from podsecurity.policy.helpers import (
    container_name,
    containers_label,
    is_windows,
    join_quote,
    mapping,
    security_context,
)
from podsecurity.policy.options import Options
from podsecurity.policy.paths import PathFn, seccomp_profile_type_path
from podsecurity.policy.registry import Check, CheckResult, VersionedCheck, add_check
from podsecurity.policy.violations import ErrFn, Violations, forbidden, required
from podsecurity.policy.visitor import visit_containers

CHECK_ID = "seccompProfile_restricted"


@add_check
def check_seccomp_profile_restricted() -> Check:
    return Check(
        id=CHECK_ID,
        level=Level.RESTRICTED,
        versions=(
            VersionedCheck(
                minimum_version=SchemaVersion.major_minor(1, 19),
                check_pod=seccomp_profile_restricted_1_19,
                override_check_ids=(BASELINE_CHECK_ID,),
            ),
            VersionedCheck(
                minimum_version=SchemaVersion.major_minor(1, 25),
                check_pod=seccomp_profile_restricted_1_25,
                override_check_ids=(BASELINE_CHECK_ID,),
            ),
        ),
    )


def seccomp_profile_restricted_1_19(
    metadata: Mapping[str, Any],
    spec: Mapping[str, Any],
    options: Options,
) -> CheckResult:
    bad_setters = Violations[str](options.with_field_errors)
    bad_values: set[str] = set()

    pod_seccomp_set = False
    pod_profile = mapping(security_context(spec), "seccompProfile")
    if pod_profile is not None:
        pod_type = pod_profile.get("type")
        if valid_seccomp_type(pod_type):
            pod_seccomp_set = True
        else:
            bad_values.add(str(pod_type))
            bad_setters.add("pod", forbidden(seccomp_profile_type_path, pod_type))

    explicitly_bad = Violations[str](options.with_field_errors)
    explicit_err_fns: list[ErrFn | None] = []
    implicitly_bad = Violations[str](options.with_field_errors)

    def visit(container: Mapping[str, Any], path_fn: PathFn) -> None:
        profile = mapping(security_context(container), "seccompProfile")
        if profile is not None:
            profile_type = profile.get("type")
            if not valid_seccomp_type(profile_type):
                bad_values.add(str(profile_type))
                explicitly_bad.add(container_name(container))
                explicit_err_fns.append(
                    forbidden(
                        path_fn.child("securityContext", "seccompProfile", "type"),
                        profile_type,
                    )
                )
        elif not pod_seccomp_set:
            implicitly_bad.add(container_name(container), required(seccomp_profile_type_path))

    visit_containers(spec, options, visit)

    if explicitly_bad:
        bad_setters.add(containers_label(explicitly_bad.data()), *explicit_err_fns)

    details = []
    if bad_setters:
        details.append(
            f"{' and '.join(bad_setters.data())} must not set "
            f"securityContext.seccompProfile.type to {join_quote(sorted(bad_values))}"
        )
    if implicitly_bad:
        details.append(
            f"pod or {containers_label(implicitly_bad.data())} must set "
            'securityContext.seccompProfile.type to "RuntimeDefault" or "Localhost"'
        )

    if details:
        return CheckResult(
            allowed=False,
            forbidden_reason="seccompProfile",
            forbidden_detail="; ".join(details),
            errors=bad_setters.errors() + implicitly_bad.errors(),
        )
    return CheckResult(allowed=True)


def seccomp_profile_restricted_1_25(
    metadata: Mapping[str, Any],
    spec: Mapping[str, Any],
    options: Options,
) -> CheckResult:
    if is_windows(spec):
        return CheckResult(allowed=True)
    return seccomp_profile_restricted_1_19(metadata, spec, options)
