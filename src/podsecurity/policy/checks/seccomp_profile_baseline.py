"""
Seccomp profiles must not be explicitly set to Unconfined.

Before v1.19 profiles are set with annotations:
    metadata.annotations['seccomp.security.alpha.kubernetes.io/pod']
    metadata.annotations['container.seccomp.security.alpha.kubernetes.io/*']

Allowed annotation values: undefined, runtime/default, docker/default,
localhost/*

Since v1.19 profiles are set with fields:
    spec.securityContext.seccompProfile.type
    spec.*Containers[*].securityContext.seccompProfile.type

Allowed field values: undefined, RuntimeDefault, Localhost
"""

from __future__ import annotations

from typing import Any, Mapping

from podsecurity.models import Level, SchemaVersion
from podsecurity.policy.helpers import (
    container_name,
    containers_label,
    join_quote,
    mapping,
    pluralize,
    scalar,
    security_context,
)
from podsecurity.policy.options import Options
from podsecurity.policy.paths import PathFn, annotations_path, seccomp_profile_type_path
from podsecurity.policy.registry import Check, CheckResult, VersionedCheck, add_check
from podsecurity.policy.violations import Violations, forbidden
from podsecurity.policy.visitor import visit_containers

CHECK_ID = "seccompProfile_baseline"

ANNOTATION_KEY_POD = "seccomp.security.alpha.kubernetes.io/pod"
ANNOTATION_KEY_CONTAINER_PREFIX = "container.seccomp.security.alpha.kubernetes.io/"

PROFILE_RUNTIME_DEFAULT = "runtime/default"
PROFILE_DOCKER_DEFAULT = "docker/default"
PROFILE_LOCALHOST_PREFIX = "localhost/"

ALLOWED_PROFILE_TYPES = frozenset({"RuntimeDefault", "Localhost"})


@add_check
def check_seccomp_profile_baseline() -> Check:
    return Check(
        id=CHECK_ID,
        level=Level.BASELINE,
        versions=(
            VersionedCheck(
                minimum_version=SchemaVersion.major_minor(1, 0),
                check_pod=seccomp_profile_baseline_1_0,
            ),
            VersionedCheck(
                minimum_version=SchemaVersion.major_minor(1, 19),
                check_pod=seccomp_profile_baseline_1_19,
            ),
        ),
    )


def valid_seccomp_type(profile_type: Any) -> bool:
    return profile_type in ALLOWED_PROFILE_TYPES


def valid_annotation_value(value: Any) -> bool:
    return (
        value == PROFILE_RUNTIME_DEFAULT
        or value == PROFILE_DOCKER_DEFAULT
        or (isinstance(value, str) and value.startswith(PROFILE_LOCALHOST_PREFIX))
    )


def seccomp_profile_baseline_1_0(
    metadata: Mapping[str, Any],
    spec: Mapping[str, Any],
    options: Options,
) -> CheckResult:
    annotations = mapping(metadata, "annotations") or {}
    bad_annotations = Violations[str](options.with_field_errors)

    def check_annotation(key: str) -> None:
        if key not in annotations:
            return
        value = annotations[key]
        if not valid_annotation_value(value):
            bad_annotations.add(f'{key}="{value}"', forbidden(annotations_path.key(key), value))

    check_annotation(ANNOTATION_KEY_POD)

    def visit(container: Mapping[str, Any], path_fn: PathFn) -> None:
        check_annotation(ANNOTATION_KEY_CONTAINER_PREFIX + container_name(container))

    visit_containers(spec, options, visit)

    if bad_annotations:
        forbidden_annotations = sorted(set(bad_annotations.data()))
        return CheckResult(
            allowed=False,
            forbidden_reason="seccompProfile",
            forbidden_detail=(
                f"forbidden {pluralize('annotation', 'annotations', len(forbidden_annotations))} "
                f"{', '.join(forbidden_annotations)}"
            ),
            errors=bad_annotations.errors(),
        )
    return CheckResult(allowed=True)


def seccomp_profile_baseline_1_19(
    metadata: Mapping[str, Any],
    spec: Mapping[str, Any],
    options: Options,
) -> CheckResult:
    bad_setters = Violations[str](options.with_field_errors)
    bad_values: set[str] = set()

    pod_type = scalar(mapping(security_context(spec), "seccompProfile"), "type")
    if pod_type is not None and not valid_seccomp_type(pod_type):
        bad_values.add(str(pod_type))
        bad_setters.add("pod", forbidden(seccomp_profile_type_path, pod_type))

    bad_containers = Violations[str](options.with_field_errors)

    def visit(container: Mapping[str, Any], path_fn: PathFn) -> None:
        profile = mapping(security_context(container), "seccompProfile")
        if profile is None:
            return
        profile_type = profile.get("type")
        if not valid_seccomp_type(profile_type):
            bad_values.add(str(profile_type))
            bad_containers.add(
                container_name(container),
                forbidden(path_fn.child("securityContext", "seccompProfile", "type"), profile_type),
            )

    visit_containers(spec, options, visit)

    if bad_containers:
        bad_setters.add(containers_label(bad_containers.data()))

    if bad_setters:
        return CheckResult(
            allowed=False,
            forbidden_reason="seccompProfile",
            forbidden_detail=(
                f"{' and '.join(bad_setters.data())} must not set "
                f"securityContext.seccompProfile.type to {join_quote(sorted(bad_values))}"
            ),
            errors=bad_setters.errors() + bad_containers.errors(),
        )
    return CheckResult(allowed=True)
