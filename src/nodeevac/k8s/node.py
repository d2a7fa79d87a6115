"""
Node safety gate and target pod selection for evacuation.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import logging

from kubernetes import client as k8s

from nodeevac.errors import NodeNotUnschedulableError
from nodeevac.k8s.client import KubernetesClient
from nodeevac.k8s.selector import LabelSelector
from nodeevac.settings import CLUSTER_NAME

logger = logging.getLogger(__name__)


class NodeAnalyzer:
    """Checks evacuation preconditions on nodes and selects the pods hosted on them."""

    def __init__(self, cluster_name: str = None) -> None:
        """Initialize node analyzer.

        :param cluster_name: Name of the cluster for notifications
        """
        self.cluster_name = CLUSTER_NAME if cluster_name is None else cluster_name

    def get_node_info(self, node: k8s.V1Node) -> dict[str, str]:
        """Get node information for logging and notifications.

        :param node: Kubernetes node object
        :return: Dictionary with node information
        """
        labels = node.metadata.labels or {}
        return {
            "name": node.metadata.name,
            "cluster": self.cluster_name,
            "instance_type": labels.get("node.kubernetes.io/instance-type", "unknown"),
            "zone": labels.get("topology.kubernetes.io/zone", "unknown"),
        }

    @staticmethod
    def is_unschedulable(node: k8s.V1Node) -> bool:
        """Check if node is marked unschedulable (cordoned).

        :param node: Kubernetes node object
        :return: True if spec.unschedulable is set
        """
        return bool(node.spec and node.spec.unschedulable)

    def check_schedulable(self, node: k8s.V1Node) -> None:
        """Refuse evacuation of nodes that still accept new pods.

        The node is never cordoned on the caller's behalf: an interrupted evacuation
        would otherwise leave it unschedulable with nobody to restore it.

        :param node: Kubernetes node object
        :raises NodeNotUnschedulableError: If the node is schedulable
        """
        if not self.is_unschedulable(node):
            raise NodeNotUnschedulableError(node.metadata.name)

    @staticmethod
    def host_field_key(api_version: str | None) -> str:
        """Get the pod field selector key that binds a pod to a node.

        :param api_version: API version the node object was served with
        :return: Field selector key
        """
        match api_version:
            case "v1beta1" | "v1beta2":
                return "DesiredState.Host"
            case "v1beta3":
                return "spec.host"
            case _:
                return "spec.nodeName"

    def select_target_pods(
        self, k8s_client: KubernetesClient, pod_selector: str, node: k8s.V1Node
    ) -> list[k8s.V1Pod]:
        """Select the pods on the node that match the pod selector.

        :param k8s_client: Client used to list pods
        :param pod_selector: Label selector expression for pods, empty for all pods
        :param node: Kubernetes node object
        :return: Matching pods, in listing order
        :raises InvalidSelectorError: If the selector is malformed, before anything is listed
        """
        node_name = node.metadata.name
        selector = LabelSelector.parse(pod_selector)
        field_selector = f"{self.host_field_key(node.api_version)}={node_name}"

        pods = k8s_client.list_pods(label_selector=str(selector), field_selector=field_selector)
        targets = [
            pod
            for pod in pods
            if pod.spec is not None
            and pod.spec.node_name == node_name
            and selector.matches(pod.metadata.labels)
        ]
        logger.debug(f"Selected {len(targets)} of {len(pods)} listed pods on node {node_name}")
        return targets
