"""
Kubernetes API client wrapper with the listing and deletion operations used during evacuation.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import logging

from kubernetes import client as k8s
from kubernetes import config as k8s_config
from kubernetes.client import ApiException

from nodeevac.k8s.exception import KubernetesException, handle_k8s_api_exception

logger = logging.getLogger(__name__)


class KubernetesClient:
    """Wrapper for Kubernetes API operations."""

    def __init__(self) -> None:
        """Initialize Kubernetes client."""
        try:
            k8s_config.load_incluster_config()
            logger.info("Loaded in-cluster Kubernetes config")
        except k8s_config.ConfigException:
            try:
                k8s_config.load_kube_config()
                _, current_context = k8s_config.list_kube_config_contexts()
                logger.info(f"Loaded local Kubernetes config (context: {current_context['name']})")
            except k8s_config.ConfigException as e:
                raise KubernetesException(
                    f"Failed to load Kubernetes config: {e}. Ensure you have a valid "
                    f"kubeconfig file or are running in a Kubernetes cluster"
                ) from e
            except Exception as e:
                raise KubernetesException(f"Unexpected error loading kube config: {e}") from e

        self.v1: k8s.CoreV1Api = k8s.CoreV1Api()
        logger.info("Kubernetes client initialized")

    @handle_k8s_api_exception
    def list_nodes(self, label_selector: str = "") -> list[k8s.V1Node]:
        """List nodes in the cluster, optionally filtered by labels.

        :param label_selector: Kubernetes label selector string (e.g., "key1=value1,key2=value2")
        :return: List of V1Node objects matching the criteria
        """
        selector_str: str | None = label_selector or None
        nodes: k8s.V1NodeList = self.v1.list_node(label_selector=selector_str)

        filter_msg = f" matching '{label_selector}'" if label_selector else ""
        logger.info(f"Found {len(nodes.items)} nodes{filter_msg}")

        return nodes.items

    @handle_k8s_api_exception
    def get_node(self, node_name: str) -> k8s.V1Node:
        """Read a single node by name.

        :param node_name: Name of the node
        :return: V1Node object
        """
        return self.v1.read_node(name=node_name)

    @handle_k8s_api_exception
    def list_pods(self, label_selector: str = "", field_selector: str = "") -> list[k8s.V1Pod]:
        """List pods across all namespaces.

        :param label_selector: Label selector string, empty for all pods
        :param field_selector: Field selector string (e.g., "spec.nodeName=node-1")
        :return: List of pods matching both selectors
        """
        pods: k8s.V1PodList = self.v1.list_pod_for_all_namespaces(
            label_selector=label_selector or None,
            field_selector=field_selector or None,
        )
        logger.debug(
            f"Found {len(pods.items)} pods (label_selector='{label_selector}', "
            f"field_selector='{field_selector}')"
        )
        return pods.items

    @handle_k8s_api_exception
    def list_replication_controllers(self) -> list[k8s.V1ReplicationController]:
        """List replication controllers across all namespaces.

        :return: List of V1ReplicationController objects
        """
        rcs: k8s.V1ReplicationControllerList = (
            self.v1.list_replication_controller_for_all_namespaces()
        )
        return rcs.items

    @handle_k8s_api_exception
    def delete_pod(self, namespace: str, name: str, grace_period_seconds: int) -> None:
        """Delete a pod, giving it the requested time to terminate.

        A pod that no longer exists is treated as deleted.

        :param namespace: Namespace of the pod
        :param name: Name of the pod
        :param grace_period_seconds: Seconds the pod may take to shut down
        """
        try:
            self.v1.delete_namespaced_pod(
                name=name, namespace=namespace, grace_period_seconds=grace_period_seconds
            )
            logger.info(f"Deleted pod {namespace}/{name}")
        except ApiException as e:
            if e.status == 404:
                logger.info(f"Pod {namespace}/{name} already deleted")
            else:
                raise e
