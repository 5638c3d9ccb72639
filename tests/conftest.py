"""
Pytest configuration and fixtures for podsecurity tests.

This module provides pod builders used across the unit tests.
"""

from __future__ import annotations

import copy
from typing import Any, Callable

import pytest

from podsecurity.policy import Evaluator, Options


RESTRICTED_CONTAINER_SECURITY_CONTEXT: dict[str, Any] = {
    "allowPrivilegeEscalation": False,
    "capabilities": {"drop": ["ALL"]},
}

RESTRICTED_POD: dict[str, Any] = {
    "apiVersion": "v1",
    "kind": "Pod",
    "metadata": {"name": "web", "namespace": "default"},
    "spec": {
        "securityContext": {
            "runAsNonRoot": True,
            "seccompProfile": {"type": "RuntimeDefault"},
        },
        "containers": [
            {
                "name": "app",
                "image": "nginx:1.25",
                "securityContext": copy.deepcopy(RESTRICTED_CONTAINER_SECURITY_CONTEXT),
            },
        ],
    },
}


def make_container(name: str, **security_context: Any) -> dict[str, Any]:
    """Build a container with the given securityContext fields."""
    container: dict[str, Any] = {"name": name, "image": "busybox"}
    if security_context:
        container["securityContext"] = security_context
    return container


def restricted_container(name: str, **overrides: Any) -> dict[str, Any]:
    """Build a container that satisfies the restricted level."""
    security_context = copy.deepcopy(RESTRICTED_CONTAINER_SECURITY_CONTEXT)
    security_context.update(overrides)
    return {"name": name, "image": "busybox", "securityContext": security_context}


@pytest.fixture
def restricted_pod() -> dict[str, Any]:
    """Return a fresh pod manifest that satisfies the restricted level."""
    return copy.deepcopy(RESTRICTED_POD)


@pytest.fixture
def container() -> Callable[..., dict[str, Any]]:
    """Return the container builder."""
    return make_container


@pytest.fixture
def hardened_container() -> Callable[..., dict[str, Any]]:
    """Return the restricted container builder."""
    return restricted_container


@pytest.fixture
def evaluator() -> Evaluator:
    """Return an evaluator over the built-in checks."""
    return Evaluator()


@pytest.fixture
def field_errors() -> Options:
    """Return options with field errors enabled."""
    return Options.with_err_list()


@pytest.fixture
def no_field_errors() -> Options:
    """Return options with field errors disabled."""
    return Options()
