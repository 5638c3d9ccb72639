"""
Built-in Pod Security Standards checks.

Importing this package registers every check with the default registry,
in alphabetical order of check ID.
"""

from podsecurity.policy.checks import (  # noqa: F401
    allow_privilege_escalation,
    app_armor_profile,
    capabilities_baseline,
    capabilities_restricted,
    host_namespaces,
    host_path_volumes,
    host_ports,
    privileged,
    proc_mount,
    restricted_volumes,
    run_as_non_root,
    run_as_user,
    se_linux_options,
    seccomp_profile_baseline,
    seccomp_profile_restricted,
    sysctls,
    windows_host_process,
)
