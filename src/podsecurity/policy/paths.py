"""
Field paths into a pod document.

FieldPath is a realized location such as
``spec.containers[2].securityContext.runAsUser``. PathFn is the lazy form
that checks pass around while inspecting a pod: composing a PathFn costs
one small object and realizing it only happens when a field error is
actually produced. When field errors are disabled every check receives the
disabled PathFn, which absorbs any further composition and realizes to
None.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class FieldPath:
    """
    A realized path from the pod root.

    Attributes:
        segments: Rendered path segments, e.g. ("spec", "containers", "[0]")
    """

    segments: tuple[str, ...]

    @classmethod
    def new(cls, *names: str) -> FieldPath:
        """Create a root path from one or more field names."""
        return cls(tuple(names))

    def child(self, *names: str) -> FieldPath:
        """Path of a named field below this one."""
        return FieldPath(self.segments + tuple(names))

    def index(self, i: int) -> FieldPath:
        """Path of a list element below this one."""
        return FieldPath(self.segments + (f"[{i}]",))

    def key(self, key: str) -> FieldPath:
        """Path of a map entry below this one."""
        return FieldPath(self.segments + (f"[{key}]",))

    def __str__(self) -> str:
        parts: list[str] = []
        for segment in self.segments:
            if segment.startswith("[") or not parts:
                parts.append(segment)
            else:
                parts.append("." + segment)
        return "".join(parts)


class PathFn:
    """
    Lazily realized field path.

    A PathFn is either a root (wrapping a FieldPath), a parent PathFn plus
    one segment, or the shared disabled instance. Composition on the
    disabled instance returns the disabled instance itself.
    """

    __slots__ = ("_parent", "_root", "_kind", "_segment", "_realized")

    _disabled: Optional[PathFn] = None

    def __init__(
        self,
        parent: PathFn | None = None,
        kind: str = "",
        segment: object = None,
        root: FieldPath | None = None,
    ):
        self._parent = parent
        self._root = root
        self._kind = kind
        self._segment = segment
        self._realized: FieldPath | None = None

    @classmethod
    def disabled(cls) -> PathFn:
        """Get the shared PathFn used when field errors are turned off."""
        if cls._disabled is None:
            cls._disabled = cls()
        return cls._disabled

    @property
    def enabled(self) -> bool:
        """True unless this is the disabled PathFn."""
        return self is not PathFn._disabled

    def __bool__(self) -> bool:
        return self.enabled

    def child(self, *names: str) -> PathFn:
        """Lazy path of one or more nested fields below this one."""
        if not self.enabled:
            return self
        path = self
        for name in names:
            path = PathFn(parent=path, kind="child", segment=name)
        return path

    def index(self, i: int) -> PathFn:
        """Lazy path of a list element below this one."""
        if not self.enabled:
            return self
        return PathFn(parent=self, kind="index", segment=i)

    def key(self, key: str) -> PathFn:
        """Lazy path of a map entry below this one."""
        if not self.enabled:
            return self
        return PathFn(parent=self, kind="key", segment=key)

    def realize(self) -> FieldPath | None:
        """
        Build the concrete path.

        Returns:
            The FieldPath, or None for the disabled PathFn
        """
        if not self.enabled:
            return None
        if self._realized is not None:
            return self._realized

        if self._root is not None:
            realized: FieldPath | None = self._root
        else:
            parent = self._parent.realize() if self._parent is not None else None
            if parent is None:
                return None
            if self._kind == "index":
                realized = parent.index(self._segment)  # type: ignore[arg-type]
            elif self._kind == "key":
                realized = parent.key(self._segment)  # type: ignore[arg-type]
            else:
                realized = parent.child(self._segment)  # type: ignore[arg-type]

        self._realized = realized
        return realized

    def __call__(self) -> FieldPath | None:
        return self.realize()

    def __repr__(self) -> str:
        if not self.enabled:
            return "PathFn(disabled)"
        return f"PathFn({self.realize()})"


def with_path(path: FieldPath | None) -> PathFn:
    """
    Wrap a realized path as a lazy root.

    Args:
        path: Root path, or None for the disabled PathFn

    Returns:
        PathFn rooted at path
    """
    if path is None:
        return PathFn.disabled()
    return PathFn(root=path)


# Fixed locations in a pod document
annotations_path = with_path(FieldPath.new("metadata", "annotations"))
spec_path = with_path(FieldPath.new("spec"))
init_containers_path = spec_path.child("initContainers")
containers_path = spec_path.child("containers")
ephemeral_containers_path = spec_path.child("ephemeralContainers")
security_context_path = spec_path.child("securityContext")
host_network_path = spec_path.child("hostNetwork")
host_pid_path = spec_path.child("hostPID")
host_ipc_path = spec_path.child("hostIPC")
volumes_path = spec_path.child("volumes")
run_as_non_root_path = security_context_path.child("runAsNonRoot")
run_as_user_path = security_context_path.child("runAsUser")
seccomp_profile_type_path = security_context_path.child("seccompProfile", "type")
apparmor_profile_type_path = security_context_path.child("appArmorProfile", "type")
selinux_options_type_path = security_context_path.child("seLinuxOptions", "type")
selinux_options_user_path = security_context_path.child("seLinuxOptions", "user")
selinux_options_role_path = security_context_path.child("seLinuxOptions", "role")
sysctls_path = security_context_path.child("sysctls")
host_process_path = security_context_path.child("windowsOptions", "hostProcess")
