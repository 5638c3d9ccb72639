"""
Workload input handling.

Turns Kubernetes manifests (Pods and pod-templated workloads such as
Deployments, Jobs and CronJobs) into the pod metadata and spec mappings
that checks read. Manifests may be plain mappings, YAML/JSON text or
objects from the kubernetes Python client.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

import yaml

from podsecurity.errors import WorkloadError

logger = logging.getLogger(__name__)

# Kinds whose pod template lives at spec.template
POD_TEMPLATE_KINDS = frozenset({
    "DaemonSet",
    "Deployment",
    "Job",
    "ReplicaSet",
    "ReplicationController",
    "StatefulSet",
})


@dataclass
class PodDocument:
    """
    Pod metadata and spec extracted from a workload.

    Attributes:
        kind: Kind of the source workload
        name: Name of the source workload
        namespace: Namespace of the source workload
        metadata: Pod metadata (the template metadata for templated kinds)
        spec: Pod spec
    """

    kind: str
    name: str
    namespace: str
    metadata: Mapping[str, Any] = field(default_factory=dict)
    spec: Mapping[str, Any] = field(default_factory=dict)

    @property
    def annotations(self) -> Mapping[str, Any]:
        annotations = self.metadata.get("annotations")
        return annotations if isinstance(annotations, Mapping) else {}


def to_manifest(obj: Any) -> Mapping[str, Any]:
    """
    Convert obj to a manifest mapping.

    Args:
        obj: Mapping, or a kubernetes client model (V1Pod, V1Deployment, ...)

    Returns:
        Manifest mapping with API field names (camelCase)

    Raises:
        WorkloadError: If obj cannot be converted
    """
    if isinstance(obj, Mapping):
        return obj

    if hasattr(obj, "openapi_types") and hasattr(obj, "attribute_map"):
        from kubernetes.client import ApiClient

        serialized = ApiClient().sanitize_for_serialization(obj)
        if isinstance(serialized, Mapping):
            return serialized

    raise WorkloadError(f"expected a mapping, got {type(obj).__name__}")


def _template(manifest: Mapping[str, Any], kind: str) -> Mapping[str, Any]:
    spec = manifest.get("spec")
    if kind == "PodTemplate":
        template = manifest.get("template")
    elif kind == "CronJob":
        job_template = spec.get("jobTemplate") if isinstance(spec, Mapping) else None
        job_spec = job_template.get("spec") if isinstance(job_template, Mapping) else None
        template = job_spec.get("template") if isinstance(job_spec, Mapping) else None
    else:
        template = spec.get("template") if isinstance(spec, Mapping) else None

    if not isinstance(template, Mapping):
        raise WorkloadError("missing pod template", kind)
    return template


def extract_pod(workload: Any) -> PodDocument:
    """
    Extract the pod metadata and spec from a workload.

    Args:
        workload: Pod or pod-templated workload manifest. A manifest
            without a kind is treated as a Pod.

    Returns:
        PodDocument

    Raises:
        WorkloadError: If the workload is not a mapping or its kind has
            no pod template
    """
    manifest = to_manifest(workload)
    kind = str(manifest.get("kind") or "Pod")
    metadata = manifest.get("metadata")
    if not isinstance(metadata, Mapping):
        metadata = {}
    name = str(metadata.get("name") or "unknown")
    namespace = str(metadata.get("namespace") or "default")

    if kind == "Pod":
        pod_metadata: Any = metadata
        pod_spec = manifest.get("spec")
    elif kind in POD_TEMPLATE_KINDS or kind in ("CronJob", "PodTemplate"):
        template = _template(manifest, kind)
        pod_metadata = template.get("metadata")
        pod_spec = template.get("spec")
    else:
        raise WorkloadError("unsupported kind, expected a Pod or a pod-templated workload", kind)

    return PodDocument(
        kind=kind,
        name=name,
        namespace=namespace,
        metadata=pod_metadata if isinstance(pod_metadata, Mapping) else {},
        spec=pod_spec if isinstance(pod_spec, Mapping) else {},
    )


def load_workloads(text: str) -> list[Mapping[str, Any]]:
    """
    Parse YAML or JSON text into workload manifests.

    Multi-document YAML is supported, empty documents are skipped and
    "kind: List" documents are expanded into their items.

    Args:
        text: YAML or JSON text

    Returns:
        List of manifest mappings

    Raises:
        WorkloadError: If the text is not valid YAML or a document is
            not a mapping
    """
    try:
        documents = list(yaml.safe_load_all(text))
    except yaml.YAMLError as e:
        raise WorkloadError(f"invalid YAML: {e}")

    manifests: list[Mapping[str, Any]] = []
    for document in documents:
        if document is None:
            continue
        if not isinstance(document, Mapping):
            raise WorkloadError(f"expected a mapping, got {type(document).__name__}")
        if document.get("kind") == "List":
            for item in document.get("items") or []:
                if not isinstance(item, Mapping):
                    raise WorkloadError("list item is not a mapping", "List")
                manifests.append(item)
        else:
            manifests.append(document)

    logger.debug(f"Loaded {len(manifests)} workloads")
    return manifests
