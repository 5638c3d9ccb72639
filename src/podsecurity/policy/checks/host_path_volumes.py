"""
HostPath volumes must be forbidden.

Restricted fields:
    spec.volumes[*].hostPath

Allowed values: undefined/null
"""

from __future__ import annotations

from typing import Any, Mapping

from podsecurity.models import Level, SchemaVersion
from podsecurity.policy.helpers import join_quote, pluralize, sequence, volume_name
from podsecurity.policy.options import Options
from podsecurity.policy.paths import volumes_path
from podsecurity.policy.registry import Check, CheckResult, VersionedCheck, add_check
from podsecurity.policy.violations import Violations, forbidden

CHECK_ID = "hostPathVolumes"


@add_check
def check_host_path_volumes() -> Check:
    return Check(
        id=CHECK_ID,
        level=Level.BASELINE,
        versions=(
            VersionedCheck(
                minimum_version=SchemaVersion.major_minor(1, 0),
                check_pod=host_path_volumes_1_0,
            ),
        ),
    )


def host_path_volumes_1_0(
    metadata: Mapping[str, Any],
    spec: Mapping[str, Any],
    options: Options,
) -> CheckResult:
    bad_volumes = Violations[str](options.with_field_errors)

    for i, volume in enumerate(sequence(spec, "volumes")):
        if not isinstance(volume, Mapping) or volume.get("hostPath") is None:
            continue
        bad_volumes.add(
            volume_name(volume),
            forbidden(volumes_path.index(i).child("hostPath")),
        )

    if bad_volumes:
        return CheckResult(
            allowed=False,
            forbidden_reason="hostPath volumes",
            forbidden_detail=(
                f"{pluralize('volume', 'volumes', len(bad_volumes))} "
                f"{join_quote(bad_volumes.data())}"
            ),
            errors=bad_volumes.errors(),
        )
    return CheckResult(allowed=True)
