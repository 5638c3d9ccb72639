"""
Unit tests for the restricted checks.

Each check function is called directly with (metadata, spec, options).
"""

from podsecurity.policy.checks.allow_privilege_escalation import (
    allow_privilege_escalation_1_8,
    allow_privilege_escalation_1_25,
)
from podsecurity.policy.checks.capabilities_restricted import (
    capabilities_restricted_1_22,
    capabilities_restricted_1_25,
)
from podsecurity.policy.checks.restricted_volumes import restricted_volumes_1_0, volume_type
from podsecurity.policy.checks.run_as_non_root import run_as_non_root_1_0
from podsecurity.policy.checks.run_as_user import run_as_user_1_23
from podsecurity.policy.checks.seccomp_profile_restricted import (
    seccomp_profile_restricted_1_19,
    seccomp_profile_restricted_1_25,
)
from podsecurity.policy.violations import ErrorType


def _fields(result):
    return [(e.type, e.field, e.bad_value) for e in result.errors]


class TestAllowPrivilegeEscalation:
    """Tests for the allowPrivilegeEscalation check."""

    def test_containers(self, container, field_errors):
        """Test unset and true values fail, false passes."""
        spec = {
            "containers": [
                container("a"),
                container("b", allowPrivilegeEscalation=True),
                container("c", allowPrivilegeEscalation=False),
            ]
        }
        result = allow_privilege_escalation_1_8({}, spec, field_errors)

        assert result.forbidden_reason == "allowPrivilegeEscalation != false"
        assert result.forbidden_detail == (
            'containers "a", "b" must set securityContext.allowPrivilegeEscalation=false'
        )
        assert _fields(result) == [
            (ErrorType.REQUIRED, "spec.containers[0].securityContext.allowPrivilegeEscalation", []),
            (ErrorType.FORBIDDEN, "spec.containers[1].securityContext.allowPrivilegeEscalation", ["true"]),
        ]

    def test_windows_exemption(self, container, no_field_errors):
        """Test Windows pods are exempt since v1.25."""
        spec = {"os": {"name": "windows"}, "containers": [container("a")]}
        assert not allow_privilege_escalation_1_8({}, spec, no_field_errors).allowed
        assert allow_privilege_escalation_1_25({}, spec, no_field_errors).allowed

    def test_linux_not_exempt(self, container, no_field_errors):
        """Test other operating systems are checked."""
        spec = {"os": {"name": "linux"}, "containers": [container("a")]}
        assert not allow_privilege_escalation_1_25({}, spec, no_field_errors).allowed


class TestCapabilitiesRestricted:
    """Tests for the capabilities_restricted check."""

    def test_drop_and_add(self, container, field_errors):
        """Test missing drop ALL and forbidden adds."""
        spec = {
            "containers": [
                container("a"),
                container("b", capabilities={"drop": ["NET_RAW"], "add": ["NET_BIND_SERVICE"]}),
                container("c", capabilities={"drop": ["ALL"], "add": ["SYS_ADMIN", "NET_BIND_SERVICE"]}),
            ]
        }
        result = capabilities_restricted_1_22({}, spec, field_errors)

        assert result.forbidden_reason == "unrestricted capabilities"
        assert result.forbidden_detail == (
            'containers "a", "b" must set securityContext.capabilities.drop=["ALL"]; '
            'container "c" must not include "SYS_ADMIN" in securityContext.capabilities.add'
        )
        assert _fields(result) == [
            (ErrorType.REQUIRED, "spec.containers[0].securityContext.capabilities.drop", []),
            (ErrorType.FORBIDDEN, "spec.containers[1].securityContext.capabilities.drop", ["NET_RAW"]),
            (ErrorType.FORBIDDEN, "spec.containers[2].securityContext.capabilities.add", ["SYS_ADMIN"]),
        ]

    def test_compliant(self, container, no_field_errors):
        """Test drop ALL with NET_BIND_SERVICE passes."""
        spec = {"containers": [container("a", capabilities={"drop": ["ALL"], "add": ["NET_BIND_SERVICE"]})]}
        assert capabilities_restricted_1_22({}, spec, no_field_errors).allowed

    def test_windows_exemption(self, container, no_field_errors):
        """Test Windows pods are exempt since v1.25."""
        spec = {"os": {"name": "windows"}, "containers": [container("a")]}
        assert not capabilities_restricted_1_22({}, spec, no_field_errors).allowed
        assert capabilities_restricted_1_25({}, spec, no_field_errors).allowed


class TestRestrictedVolumes:
    """Tests for the restrictedVolumes check."""

    def test_host_path_at_index_one(self, field_errors):
        """Test a hostPath volume among allowed volumes."""
        spec = {
            "volumes": [
                {"name": "a", "configMap": {"name": "cfg"}},
                {"name": "b", "hostPath": {"path": "/var/run"}},
                {"name": "c", "secret": {"secretName": "s"}},
            ]
        }
        result = restricted_volumes_1_0({}, spec, field_errors)

        assert not result.allowed
        assert result.forbidden_reason == "restricted volume types"
        assert result.forbidden_detail == 'volume "b" uses restricted volume type "hostPath"'
        assert _fields(result) == [
            (ErrorType.FORBIDDEN, "spec.volumes[1]", ["spec.volumes[1].hostPath"]),
        ]

    def test_multiple_types(self, no_field_errors):
        """Test plural phrasing with sorted types."""
        spec = {
            "volumes": [
                {"name": "n", "nfs": {"server": "x", "path": "/"}},
                {"name": "g", "gitRepo": {"repository": "r"}},
            ]
        }
        result = restricted_volumes_1_0({}, spec, no_field_errors)
        assert result.forbidden_detail == 'volumes "n", "g" use restricted volume types "gitRepo", "nfs"'

    def test_unnamed_volume(self, no_field_errors):
        """Test a volume with a null name is reported with an empty name."""
        spec = {"volumes": [{"name": None, "nfs": {"server": "nfs", "path": "/"}}]}
        result = restricted_volumes_1_0({}, spec, no_field_errors)
        assert result.forbidden_detail == 'volume "" uses restricted volume type "nfs"'

    def test_allowed_volumes(self, no_field_errors):
        """Test every allowed volume source passes."""
        spec = {
            "volumes": [
                {"name": "a", "configMap": {}},
                {"name": "b", "csi": {"driver": "d"}},
                {"name": "c", "downwardAPI": {}},
                {"name": "d", "emptyDir": {}},
                {"name": "e", "ephemeral": {}},
                {"name": "f", "persistentVolumeClaim": {"claimName": "x"}},
                {"name": "g", "projected": {}},
                {"name": "h", "secret": {}},
            ]
        }
        assert restricted_volumes_1_0({}, spec, no_field_errors).allowed

    def test_volume_type(self):
        """Test volume classification."""
        assert volume_type({"name": "a", "emptyDir": {}}) is None
        assert volume_type({"name": "a", "awsElasticBlockStore": {}}) == "awsElasticBlockStore"
        assert volume_type({"name": "a"}) == "unknown"
        assert volume_type({"name": "a", "someFutureSource": {}}) == "unknown"


class TestRunAsNonRoot:
    """Tests for the runAsNonRoot check."""

    def test_container_overrides_pod(self, container, field_errors):
        """Test a container setting false despite the pod setting true."""
        spec = {
            "securityContext": {"runAsNonRoot": True},
            "containers": [container("A", runAsNonRoot=False), container("B")],
        }
        result = run_as_non_root_1_0({}, spec, field_errors)

        assert not result.allowed
        assert result.forbidden_reason == "runAsNonRoot != true"
        assert result.forbidden_detail == 'container "A" must not set securityContext.runAsNonRoot=false'
        assert _fields(result) == [
            (ErrorType.FORBIDDEN, "spec.containers[0].securityContext.runAsNonRoot", ["false"]),
        ]

    def test_pod_and_containers_explicit(self, container, field_errors):
        """Test pod and containers setting false."""
        spec = {
            "securityContext": {"runAsNonRoot": False},
            "containers": [container("a", runAsNonRoot=False), container("b", runAsNonRoot=True)],
            "initContainers": [container("i", runAsNonRoot=False)],
        }
        result = run_as_non_root_1_0({}, spec, field_errors)

        assert result.forbidden_detail == (
            'pod and containers "i", "a" must not set securityContext.runAsNonRoot=false'
        )
        assert [e.field for e in result.errors] == [
            "spec.securityContext.runAsNonRoot",
            "spec.initContainers[0].securityContext.runAsNonRoot",
            "spec.containers[0].securityContext.runAsNonRoot",
        ]

    def test_implicit(self, container, field_errors):
        """Test containers without any runAsNonRoot setting."""
        spec = {"containers": [container("a"), container("b")]}
        result = run_as_non_root_1_0({}, spec, field_errors)

        assert result.forbidden_reason == "runAsNonRoot != true"
        assert result.forbidden_detail == (
            'pod or containers "a", "b" must set securityContext.runAsNonRoot=true'
        )
        assert _fields(result) == [
            (ErrorType.REQUIRED, "spec.securityContext.runAsNonRoot", []),
            (ErrorType.REQUIRED, "spec.securityContext.runAsNonRoot", []),
        ]

    def test_explicit_reported_before_implicit(self, container, no_field_errors):
        """Test explicit violations take precedence in the detail."""
        spec = {"containers": [container("a", runAsNonRoot=False), container("b")]}
        result = run_as_non_root_1_0({}, spec, no_field_errors)
        assert result.forbidden_detail == 'container "a" must not set securityContext.runAsNonRoot=false'

    def test_containers_set_true(self, container, no_field_errors):
        """Test every container setting true without a pod value passes."""
        spec = {"containers": [container("a", runAsNonRoot=True)]}
        assert run_as_non_root_1_0({}, spec, no_field_errors).allowed


class TestRunAsUser:
    """Tests for the runAsUser check."""

    def test_root(self, container, field_errors):
        """Test runAsUser=0 at pod and container level."""
        spec = {
            "securityContext": {"runAsUser": 0},
            "containers": [container("c", runAsUser=0), container("d", runAsUser=1000)],
        }
        result = run_as_user_1_23({}, spec, field_errors)

        assert result.forbidden_reason == "runAsUser=0"
        assert result.forbidden_detail == 'pod and container "c" must not set runAsUser=0'
        assert _fields(result) == [
            (ErrorType.FORBIDDEN, "spec.securityContext.runAsUser", ["0"]),
            (ErrorType.FORBIDDEN, "spec.containers[0].securityContext.runAsUser", ["0"]),
        ]

    def test_non_root(self, container, no_field_errors):
        """Test non-zero users pass."""
        spec = {"securityContext": {"runAsUser": 1000}, "containers": [container("a")]}
        assert run_as_user_1_23({}, spec, no_field_errors).allowed


class TestSeccompProfileRestricted:
    """Tests for the seccompProfile_restricted check."""

    def test_explicit_and_implicit(self, container, field_errors):
        """Test unset and Unconfined profiles."""
        spec = {
            "containers": [
                container("a"),
                container("b", seccompProfile={"type": "Unconfined"}),
            ]
        }
        result = seccomp_profile_restricted_1_19({}, spec, field_errors)

        assert result.forbidden_reason == "seccompProfile"
        assert result.forbidden_detail == (
            'container "b" must not set securityContext.seccompProfile.type to "Unconfined"; '
            'pod or container "a" must set securityContext.seccompProfile.type to '
            '"RuntimeDefault" or "Localhost"'
        )
        assert _fields(result) == [
            (ErrorType.FORBIDDEN, "spec.containers[1].securityContext.seccompProfile.type", ["Unconfined"]),
            (ErrorType.REQUIRED, "spec.securityContext.seccompProfile.type", []),
        ]

    def test_pod_profile_inherited(self, container, no_field_errors):
        """Test containers inherit an allowed pod profile."""
        spec = {
            "securityContext": {"seccompProfile": {"type": "Localhost", "localhostProfile": "p.json"}},
            "containers": [container("a")],
        }
        assert seccomp_profile_restricted_1_19({}, spec, no_field_errors).allowed

    def test_bad_pod_profile(self, container, no_field_errors):
        """Test an Unconfined pod profile does not cover containers."""
        spec = {
            "securityContext": {"seccompProfile": {"type": "Unconfined"}},
            "containers": [container("a")],
        }
        result = seccomp_profile_restricted_1_19({}, spec, no_field_errors)
        assert result.forbidden_detail == (
            'pod must not set securityContext.seccompProfile.type to "Unconfined"; '
            'pod or container "a" must set securityContext.seccompProfile.type to '
            '"RuntimeDefault" or "Localhost"'
        )

    def test_windows_exemption(self, container, no_field_errors):
        """Test Windows pods are exempt since v1.25."""
        spec = {"os": {"name": "windows"}, "containers": [container("a")]}
        assert not seccomp_profile_restricted_1_19({}, spec, no_field_errors).allowed
        assert seccomp_profile_restricted_1_25({}, spec, no_field_errors).allowed
