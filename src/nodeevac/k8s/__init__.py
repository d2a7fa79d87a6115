"""
Kubernetes module exports for client, safety gate, classifier, selector and printer classes.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

from nodeevac.k8s.client import KubernetesClient
from nodeevac.k8s.exception import KubernetesException
from nodeevac.k8s.node import NodeAnalyzer
from nodeevac.k8s.pod import PodClassifier
from nodeevac.k8s.printer import PodPrinter, Sink
from nodeevac.k8s.selector import LabelSelector

__all__ = [
    "KubernetesClient",
    "KubernetesException",
    "LabelSelector",
    "NodeAnalyzer",
    "PodClassifier",
    "PodPrinter",
    "Sink",
]
