"""
On supported hosts, the runtime/default AppArmor profile is applied by
default. The baseline policy prevents overriding or disabling the default
profile, and restricts overrides to an allowed set of profiles.

Restricted fields:
    metadata.annotations['container.apparmor.security.beta.kubernetes.io/*']
    spec.securityContext.appArmorProfile.type (since v1.30)
    spec.containers[*].securityContext.appArmorProfile.type (since v1.30)
    spec.initContainers[*].securityContext.appArmorProfile.type (since v1.30)
    spec.ephemeralContainers[*].securityContext.appArmorProfile.type (since v1.30)

Allowed annotation values: undefined, "", runtime/default, localhost/*
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
from podsecurity.policy.paths import PathFn, annotations_path, apparmor_profile_type_path
from podsecurity.policy.registry import Check, CheckResult, VersionedCheck, add_check
from podsecurity.policy.violations import Violations, forbidden
from podsecurity.policy.visitor import visit_containers

CHECK_ID = "appArmorProfile"

ANNOTATION_KEY_PREFIX = "container.apparmor.security.beta.kubernetes.io/"

PROFILE_RUNTIME_DEFAULT = "runtime/default"
PROFILE_NAME_PREFIX = "localhost/"

ALLOWED_PROFILE_TYPES = frozenset({"RuntimeDefault", "Localhost"})


@add_check
def check_app_armor_profile() -> Check:
    return Check(
        id=CHECK_ID,
        level=Level.BASELINE,
        versions=(
            VersionedCheck(
                minimum_version=SchemaVersion.major_minor(1, 0),
                check_pod=app_armor_profile_1_0,
            ),
            VersionedCheck(
                minimum_version=SchemaVersion.major_minor(1, 30),
                check_pod=app_armor_profile_1_30,
            ),
        ),
    )


def allowed_annotation_value(profile: Any) -> bool:
    return (
        profile == ""
        or profile == PROFILE_RUNTIME_DEFAULT
        or (isinstance(profile, str) and profile.startswith(PROFILE_NAME_PREFIX))
    )


def _forbidden_annotations(
    metadata: Mapping[str, Any],
    options: Options,
) -> Violations[str]:
    bad_annotations = Violations[str](options.with_field_errors)
    annotations = mapping(metadata, "annotations") or {}
    for key in sorted(annotations):
        value = annotations[key]
        if not str(key).startswith(ANNOTATION_KEY_PREFIX):
            continue
        if not allowed_annotation_value(value):
            bad_annotations.add(
                f'{key}="{value}"',
                forbidden(annotations_path.key(key), value),
            )
    return bad_annotations


def app_armor_profile_1_0(
    metadata: Mapping[str, Any],
    spec: Mapping[str, Any],
    options: Options,
) -> CheckResult:
    bad_annotations = _forbidden_annotations(metadata, options)

    if bad_annotations:
        return CheckResult(
            allowed=False,
            forbidden_reason=pluralize(
                "forbidden AppArmor profile",
                "forbidden AppArmor profiles",
                len(bad_annotations),
            ),
            forbidden_detail=", ".join(bad_annotations.data()),
            errors=bad_annotations.errors(),
        )
    return CheckResult(allowed=True)


def app_armor_profile_1_30(
    metadata: Mapping[str, Any],
    spec: Mapping[str, Any],
    options: Options,
) -> CheckResult:
    bad_annotations = _forbidden_annotations(metadata, options)
    bad_setters = Violations[str](options.with_field_errors)
    bad_values: set[str] = set()

    pod_type = scalar(mapping(security_context(spec), "appArmorProfile"), "type")
    if pod_type is not None and pod_type not in ALLOWED_PROFILE_TYPES:
        bad_values.add(str(pod_type))
        bad_setters.add("pod", forbidden(apparmor_profile_type_path, pod_type))

    bad_containers = Violations[str](options.with_field_errors)

    def visit(container: Mapping[str, Any], path_fn: PathFn) -> None:
        profile_type = scalar(mapping(security_context(container), "appArmorProfile"), "type")
        if profile_type is not None and profile_type not in ALLOWED_PROFILE_TYPES:
            bad_values.add(str(profile_type))
            bad_containers.add(
                container_name(container),
                forbidden(
                    path_fn.child("securityContext", "appArmorProfile", "type"),
                    profile_type,
                ),
            )

    visit_containers(spec, options, visit)

    if bad_containers:
        bad_setters.add(containers_label(bad_containers.data()))

    if not bad_annotations and not bad_setters:
        return CheckResult(allowed=True)

    details = []
    if bad_annotations:
        details.append(", ".join(bad_annotations.data()))
    if bad_setters:
        details.append(
            f"{' and '.join(bad_setters.data())} must not set "
            f"securityContext.appArmorProfile.type to {join_quote(sorted(bad_values))}"
        )

    return CheckResult(
        allowed=False,
        forbidden_reason=pluralize(
            "forbidden AppArmor profile",
            "forbidden AppArmor profiles",
            len(bad_annotations) + len(bad_values),
        ),
        forbidden_detail="; ".join(details),
        errors=bad_annotations.errors() + bad_setters.errors() + bad_containers.errors(),
    )
