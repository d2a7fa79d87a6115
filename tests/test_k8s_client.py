"""
Unit tests for Kubernetes API client initialization, listing and pod deletion.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

from unittest.mock import Mock, patch

import pytest
from kubernetes import config as k8s_config
from kubernetes.client import ApiException

from nodeevac.k8s.client import KubernetesClient
from nodeevac.k8s.exception import KubernetesException


class TestKubernetesClientInitialization:
    """Test KubernetesClient initialization."""

    @patch("nodeevac.k8s.client.k8s_config.load_incluster_config")
    @patch("nodeevac.k8s.client.k8s.CoreV1Api")
    def test_initialization_in_cluster(self, mock_core_v1_api, mock_load_incluster):
        """Test initialization with in-cluster config."""
        mock_api_instance = Mock()
        mock_core_v1_api.return_value = mock_api_instance

        client = KubernetesClient()

        mock_load_incluster.assert_called_once()
        assert client.v1 is mock_api_instance

    @pytest.mark.parametrize("context_name", ["kind-nodeevac-test", "prod-admin"])
    @patch("nodeevac.k8s.client.k8s_config.load_incluster_config")
    @patch("nodeevac.k8s.client.k8s_config.load_kube_config")
    @patch("nodeevac.k8s.client.k8s_config.list_kube_config_contexts")
    @patch("nodeevac.k8s.client.k8s.CoreV1Api")
    def test_initialization_local_config_any_context(
        self,
        mock_core_v1_api,
        mock_list_contexts,
        mock_load_kube_config,
        mock_load_incluster,
        context_name,
    ):
        """Test any current kubeconfig context is accepted outside the cluster."""
        mock_load_incluster.side_effect = k8s_config.ConfigException("Not in cluster")
        mock_list_contexts.return_value = ([], {"name": context_name})

        client = KubernetesClient()

        mock_load_kube_config.assert_called_once()
        assert client.v1 is mock_core_v1_api.return_value

    @patch("nodeevac.k8s.client.k8s_config.load_incluster_config")
    @patch("nodeevac.k8s.client.k8s_config.load_kube_config")
    def test_initialization_config_failure(self, mock_load_kube_config, mock_load_incluster):
        """Test initialization fails when both configs fail."""
        mock_load_incluster.side_effect = k8s_config.ConfigException("Not in cluster")
        mock_load_kube_config.side_effect = k8s_config.ConfigException("No kubeconfig")

        with pytest.raises(KubernetesException) as exc_info:
            KubernetesClient()

        assert "Failed to load Kubernetes config" in str(exc_info.value)

    @patch("nodeevac.k8s.client.k8s_config.load_incluster_config")
    @patch("nodeevac.k8s.client.k8s_config.load_kube_config")
    def test_initialization_unexpected_error(self, mock_load_kube_config, mock_load_incluster):
        """Test initialization handles unexpected errors."""
        mock_load_incluster.side_effect = k8s_config.ConfigException("Not in cluster")
        mock_load_kube_config.side_effect = RuntimeError("Unexpected error")

        with pytest.raises(KubernetesException) as exc_info:
            KubernetesClient()

        assert "Unexpected error loading kube config" in str(exc_info.value)


class TestKubernetesClientMethods:
    """Test KubernetesClient methods."""

    def setup_method(self):
        """Set up test environment."""
        with patch("nodeevac.k8s.client.k8s_config.load_incluster_config"), patch(
            "nodeevac.k8s.client.k8s.CoreV1Api"
        ) as mock_core_v1_api:
            self.mock_v1_api = Mock()
            mock_core_v1_api.return_value = self.mock_v1_api
            self.client = KubernetesClient()

    def test_list_nodes_no_selector(self):
        """Test listing nodes without label selector."""
        self.mock_v1_api.list_node.return_value = Mock(items=["node1", "node2"])

        result = self.client.list_nodes("")

        self.mock_v1_api.list_node.assert_called_once_with(label_selector=None)
        assert result == ["node1", "node2"]

    def test_list_nodes_with_selector(self):
        """Test listing nodes with label selector."""
        self.mock_v1_api.list_node.return_value = Mock(items=["node1"])

        result = self.client.list_nodes("pool=old")

        self.mock_v1_api.list_node.assert_called_once_with(label_selector="pool=old")
        assert result == ["node1"]

    def test_get_node(self):
        """Test reading a node by name."""
        result = self.client.get_node("node-1")

        self.mock_v1_api.read_node.assert_called_once_with(name="node-1")
        assert result is self.mock_v1_api.read_node.return_value

    def test_get_node_not_found(self):
        """Test reading a missing node raises KubernetesException."""
        self.mock_v1_api.read_node.side_effect = ApiException(status=404, reason="Not Found")

        with pytest.raises(KubernetesException) as exc_info:
            self.client.get_node("missing")

        assert exc_info.value.status == 404

    def test_list_pods_with_selectors(self):
        """Test listing pods passes both selectors."""
        self.mock_v1_api.list_pod_for_all_namespaces.return_value = Mock(items=["pod1"])

        result = self.client.list_pods(
            label_selector="app=web", field_selector="spec.nodeName=node-1"
        )

        self.mock_v1_api.list_pod_for_all_namespaces.assert_called_once_with(
            label_selector="app=web", field_selector="spec.nodeName=node-1"
        )
        assert result == ["pod1"]

    def test_list_pods_empty_selectors_are_omitted(self):
        """Test empty selectors are sent as None."""
        self.mock_v1_api.list_pod_for_all_namespaces.return_value = Mock(items=[])

        self.client.list_pods()

        self.mock_v1_api.list_pod_for_all_namespaces.assert_called_once_with(
            label_selector=None, field_selector=None
        )

    def test_list_pods_api_exception(self):
        """Test list_pods translates API exceptions."""
        self.mock_v1_api.list_pod_for_all_namespaces.side_effect = ApiException(
            status=403, reason="Forbidden"
        )

        with pytest.raises(KubernetesException):
            self.client.list_pods(field_selector="spec.nodeName=node-1")

    def test_list_replication_controllers(self):
        """Test listing replication controllers across namespaces."""
        self.mock_v1_api.list_replication_controller_for_all_namespaces.return_value = Mock(
            items=["rc1"]
        )

        result = self.client.list_replication_controllers()

        self.mock_v1_api.list_replication_controller_for_all_namespaces.assert_called_once_with()
        assert result == ["rc1"]

    def test_list_replication_controllers_api_exception(self):
        """Test listing replication controllers translates API exceptions."""
        self.mock_v1_api.list_replication_controller_for_all_namespaces.side_effect = (
            ApiException(status=500, reason="Internal Server Error")
        )

        with pytest.raises(KubernetesException) as exc_info:
            self.client.list_replication_controllers()

        assert "HTTP 500 - Internal Server Error" in str(exc_info.value)

    def test_delete_pod_success(self):
        """Test deleting a pod with a grace period."""
        self.client.delete_pod(namespace="default", name="web-1", grace_period_seconds=30)

        self.mock_v1_api.delete_namespaced_pod.assert_called_once_with(
            name="web-1", namespace="default", grace_period_seconds=30
        )

    def test_delete_pod_already_deleted(self):
        """Test deleting a pod that is already gone does not raise."""
        self.mock_v1_api.delete_namespaced_pod.side_effect = ApiException(
            status=404, reason="Not Found"
        )

        self.client.delete_pod(namespace="default", name="web-1", grace_period_seconds=30)

        self.mock_v1_api.delete_namespaced_pod.assert_called_once()

    def test_delete_pod_other_api_exception(self):
        """Test delete_pod translates other API exceptions."""
        self.mock_v1_api.delete_namespaced_pod.side_effect = ApiException(
            status=403, reason="Forbidden"
        )

        with pytest.raises(KubernetesException) as exc_info:
            self.client.delete_pod(namespace="default", name="web-1", grace_period_seconds=30)

        assert "'Unauthorized' error when running delete_pod" in str(exc_info.value)
        assert exc_info.value.status == 403
