"""
Uniform iteration over the containers of a pod spec.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from podsecurity.policy.options import Options
from podsecurity.policy.paths import (
    PathFn,
    containers_path,
    ephemeral_containers_path,
    init_containers_path,
)

ContainerVisitor = Callable[[Mapping[str, Any], PathFn], None]

# Traversal order shared by every check
CONTAINER_LISTS: tuple[tuple[str, PathFn], ...] = (
    ("initContainers", init_containers_path),
    ("containers", containers_path),
    ("ephemeralContainers", ephemeral_containers_path),
)


def visit_containers(
    spec: Mapping[str, Any] | None,
    options: Options,
    visitor: ContainerVisitor,
) -> None:
    """
    Invoke visitor once per container of the pod spec.

    Init containers are visited first, then regular containers, then
    ephemeral containers, each list in source order. The visitor receives
    the container mapping and its lazy path (spec.containers[i] and so
    on), or the disabled path when field errors are off.

    Args:
        spec: Pod spec mapping
        options: Evaluation options
        visitor: Callable taking (container, path_fn)
    """
    if not isinstance(spec, Mapping):
        return

    for list_name, list_path in CONTAINER_LISTS:
        containers = spec.get(list_name)
        if not isinstance(containers, (list, tuple)):
            continue
        for i, container in enumerate(containers):
            if not isinstance(container, Mapping):
                continue
            if options.with_field_errors:
                visitor(container, list_path.index(i))
            else:
                visitor(container, PathFn.disabled())
