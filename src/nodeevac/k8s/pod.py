"""
Pod classification by replication controller coverage.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

from kubernetes import client as k8s

from nodeevac.k8s.selector import LabelSelector


class PodClassifier:
    """Splits pods into those a replication controller would recreate and standalone ones."""

    @staticmethod
    def is_backed(pod: k8s.V1Pod, controllers: list[k8s.V1ReplicationController]) -> bool:
        """Check if any replication controller's selector matches the pod's labels.

        :param pod: Kubernetes pod object
        :param controllers: Replication controllers to match against
        :return: True if at least one controller selects the pod
        """
        labels = pod.metadata.labels or {}
        return any(
            LabelSelector.from_set(rc.spec.selector if rc.spec else None).matches(labels)
            for rc in controllers
        )

    @classmethod
    def classify(
        cls, pods: list[k8s.V1Pod], controllers: list[k8s.V1ReplicationController]
    ) -> tuple[list[k8s.V1Pod], list[k8s.V1Pod]]:
        """Partition pods into controller-backed and standalone.

        :param pods: Pods to classify
        :param controllers: Replication controllers to match against
        :return: Tuple of (backed, standalone), each in input order
        """
        backed: list[k8s.V1Pod] = []
        standalone: list[k8s.V1Pod] = []
        for pod in pods:
            (backed if cls.is_backed(pod, controllers) else standalone).append(pod)
        return backed, standalone
