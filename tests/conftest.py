"""
Pytest configuration and Kubernetes object factories for NodeEvac tests.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from kubernetes import client as k8s

# Add src directory to Python path for imports
project_root = Path(__file__).parent.parent
src_path = project_root / "src"
sys.path.insert(0, str(src_path))


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Set up test environment variables."""
    # Ensure tests run in safe mode
    os.environ["DRY_RUN"] = "true"
    os.environ["LOG_LEVEL"] = "DEBUG"
    os.environ["ENABLE_JSON_LOGS"] = "false"


@pytest.fixture
def make_node():
    """Factory for V1Node objects."""

    def _make_node(name="node-1", unschedulable=True, labels=None, api_version=None):
        return k8s.V1Node(
            api_version=api_version,
            metadata=k8s.V1ObjectMeta(name=name, labels=labels),
            spec=k8s.V1NodeSpec(unschedulable=unschedulable),
        )

    return _make_node


@pytest.fixture
def make_pod():
    """Factory for V1Pod objects."""

    def _make_pod(name, labels=None, node_name="node-1", namespace="default", age_seconds=120):
        return k8s.V1Pod(
            metadata=k8s.V1ObjectMeta(
                name=name,
                namespace=namespace,
                labels=labels,
                creation_timestamp=datetime.now(timezone.utc) - timedelta(seconds=age_seconds),
            ),
            spec=k8s.V1PodSpec(node_name=node_name, containers=[k8s.V1Container(name="app")]),
            status=k8s.V1PodStatus(
                phase="Running",
                pod_ip="10.0.0.12",
                container_statuses=[
                    k8s.V1ContainerStatus(
                        name="app", image="nginx", image_id="", ready=True, restart_count=2
                    )
                ],
            ),
        )

    return _make_pod


@pytest.fixture
def make_rc():
    """Factory for V1ReplicationController objects."""

    def _make_rc(name, selector, namespace="default"):
        return k8s.V1ReplicationController(
            metadata=k8s.V1ObjectMeta(name=name, namespace=namespace),
            spec=k8s.V1ReplicationControllerSpec(selector=selector),
        )

    return _make_rc


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (requires Kubernetes cluster)"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically."""
    for item in items:
        # Add integration marker to tests in integration directory
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
