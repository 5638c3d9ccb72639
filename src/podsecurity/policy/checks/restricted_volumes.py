"""
In addition to restricting hostPath volumes, the restricted profile
limits usage of inline pod volume sources to configMap, csi, downwardAPI,
emptyDir, ephemeral, persistentVolumeClaim, projected and secret.

Restricted fields:
    spec.volumes[*] (any volume source not in the allowed list)

Supersedes hostPathVolumes.
"""

from __future__ import annotations

from typing import Any, Mapping

from podsecurity.models import Level, SchemaVersion
from podsecurity.policy.checks.host_path_volumes import CHECK_ID as HOST_PATH_CHECK_ID
from podsecurity.policy.helpers import join_quote, pluralize, sequence, volume_name
from podsecurity.policy.options import Options
from podsecurity.policy.paths import volumes_path
from podsecurity.policy.registry import Check, CheckResult, VersionedCheck, add_check
from podsecurity.policy.violations import Violations, forbidden

CHECK_ID = "restrictedVolumes"

ALLOWED_VOLUME_TYPES = (
    "configMap",
    "csi",
    "downwardAPI",
    "emptyDir",
    "ephemeral",
    "persistentVolumeClaim",
    "projected",
    "secret",
)

# Known inline volume sources, in reporting precedence
RESTRICTED_VOLUME_TYPES = (
    "hostPath",
    "gcePersistentDisk",
    "awsElasticBlockStore",
    "gitRepo",
    "nfs",
    "iscsi",
    "glusterfs",
    "rbd",
    "flexVolume",
    "cinder",
    "cephfs",
    "flocker",
    "fc",
    "azureFile",
    "vsphereVolume",
    "quobyte",
    "azureDisk",
    "photonPersistentDisk",
    "portworxVolume",
    "scaleIO",
    "storageos",
)

UNKNOWN_VOLUME_TYPE = "unknown"


@add_check
def check_restricted_volumes() -> Check:
    return Check(
        id=CHECK_ID,
        level=Level.RESTRICTED,
        versions=(
            VersionedCheck(
                minimum_version=SchemaVersion.major_minor(1, 0),
                check_pod=restricted_volumes_1_0,
                override_check_ids=(HOST_PATH_CHECK_ID,),
            ),
        ),
    )


def volume_type(volume: Mapping[str, Any]) -> str | None:
    """
    Classify a volume by its source.

    Returns:
        None for an allowed source, otherwise the restricted source name
        or "unknown"
    """
    for source in ALLOWED_VOLUME_TYPES:
        if volume.get(source) is not None:
            return None
    for source in RESTRICTED_VOLUME_TYPES:
        if volume.get(source) is not None:
            return source
    return UNKNOWN_VOLUME_TYPE


def restricted_volumes_1_0(
    metadata: Mapping[str, Any],
    spec: Mapping[str, Any],
    options: Options,
) -> CheckResult:
    bad_volumes = Violations[str](options.with_field_errors)
    bad_types: set[str] = set()

    for i, volume in enumerate(sequence(spec, "volumes")):
        if not isinstance(volume, Mapping):
            continue
        source = volume_type(volume)
        if source is None:
            continue
        bad_types.add(source)
        index_path = volumes_path.index(i)
        bad_volumes.add(
            volume_name(volume),
            forbidden(index_path, f"spec.volumes[{i}].{source}"),
        )

    if bad_volumes:
        return CheckResult(
            allowed=False,
            forbidden_reason="restricted volume types",
            forbidden_detail=(
                f"{pluralize('volume', 'volumes', len(bad_volumes))} "
                f"{join_quote(bad_volumes.data())} "
                f"{pluralize('uses', 'use', len(bad_volumes))} "
                f"{pluralize('restricted volume type', 'restricted volume types', len(bad_types))} "
                f"{join_quote(sorted(bad_types))}"
            ),
            errors=bad_volumes.errors(),
        )
    return CheckResult(allowed=True)
