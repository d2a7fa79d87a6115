"""
NodeEvacuator orchestration class for removing workloads from unschedulable nodes.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import logging
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from kubernetes import client as k8s

from nodeevac.errors import (
    AggregateError,
    DeleteError,
    EvacuationError,
    ListError,
    UnsafePodsRemainError,
    aggregate_errors,
)
from nodeevac.k8s import KubernetesClient, NodeAnalyzer, PodClassifier, PodPrinter, Sink
from nodeevac.k8s.exception import KubernetesException
from nodeevac.notification import send_notification
from nodeevac.settings import DRY_RUN, FORCE, GRACE_PERIOD_SECONDS, OUTPUT_FORMAT, POD_SELECTOR

logger = logging.getLogger(__name__)

MIGRATING_BANNER = "Migrating these pods on node"
LISTING_BANNER = "Listing matched pods on node"


class EvacuationState(str, Enum):
    """Terminal state of a node evacuation."""

    SUCCESS = "Success"
    PARTIAL_FAILURE = "PartialFailure"
    ABORTED = "Aborted"


@dataclass
class NodeOutcome:
    """Result of evacuating a single node."""

    node_name: str
    dry_run: bool = False
    state: EvacuationState = EvacuationState.SUCCESS
    deleted: int = 0
    skipped_unsafe: int = 0
    printed: list[str] = field(default_factory=list)
    errors: list[Exception] = field(default_factory=list)

    @property
    def error(self) -> AggregateError | None:
        return aggregate_errors(self.errors)


class NodeEvacuator:
    """Evacuates pods from nodes, deleting only those a replication controller will recreate."""

    def __init__(
        self,
        pod_selector: str = None,
        dry_run: bool = None,
        force: bool = None,
        grace_period_seconds: int = None,
        output_format: str = None,
        k8s_client: KubernetesClient = None,
        output: Sink = None,
        diagnostics: Sink = None,
    ) -> None:
        """Initialize NodeEvacuator.

        :param pod_selector: Label selector restricting which pods are evacuated
        :param dry_run: Only list the pods that would be evacuated
        :param force: Also delete pods not backed by a replication controller
        :param grace_period_seconds: Grace period for pod deletion
        :param output_format: Pod output format (table, wide, json, yaml)
        :param k8s_client: Kubernetes client, created from the environment if omitted
        :param output: Stream pods are printed to, defaults to stdout
        :param diagnostics: Stream banners are written to, defaults to stderr
        """
        self.pod_selector = POD_SELECTOR if pod_selector is None else pod_selector
        self.dry_run = DRY_RUN if dry_run is None else dry_run
        self.force = FORCE if force is None else force
        self.grace_period_seconds = (
            GRACE_PERIOD_SECONDS if grace_period_seconds is None else grace_period_seconds
        )
        self.output = sys.stdout if output is None else output
        self.diagnostics = sys.stderr if diagnostics is None else diagnostics
        # Initialize components
        self.printer = PodPrinter(OUTPUT_FORMAT if output_format is None else output_format)
        self.k8s_client = KubernetesClient() if k8s_client is None else k8s_client
        self.node_analyzer = NodeAnalyzer()
        self.pod_classifier = PodClassifier()
        logger.info(
            f"NodeEvacuator initialized with dry_run: {self.dry_run}, force: {self.force}, "
            f"grace_period_seconds: {self.grace_period_seconds}, "
            f"pod_selector: '{self.pod_selector}'"
        )

    def run(self, nodes: Iterable[k8s.V1Node]) -> AggregateError | None:
        """Evacuate every node and combine all failures.

        :param nodes: Nodes to evacuate, processed in order
        :return: AggregateError with every node and pod failure, or None if all nodes succeeded
        """
        logger.info("Starting NodeEvacuator run...")
        outcomes = self.process_nodes(nodes)
        error = aggregate_errors(e for outcome in outcomes for e in outcome.errors)
        failed = sum(1 for outcome in outcomes if outcome.state is not EvacuationState.SUCCESS)
        logger.info(f"Finished NodeEvacuator run: {len(outcomes)} nodes, {failed} with errors.")
        return error

    def process_nodes(self, nodes: Iterable[k8s.V1Node]) -> list[NodeOutcome]:
        """Evacuate nodes one after another. A failing node never stops the batch.

        :param nodes: Nodes to evacuate
        :return: One outcome per node, in input order
        """
        outcomes = []
        for node in nodes:
            logger.debug(f"Processing node: {node.metadata.name}")
            outcome = self.evacuate_node(node)
            send_notification(self._format_message(node, outcome))
            outcomes.append(outcome)
        return outcomes

    def evacuate_node(self, node: k8s.V1Node) -> NodeOutcome:
        """Evacuate a single node.

        :param node: Kubernetes node object
        :return: Outcome with counters and collected errors
        """
        node_name = node.metadata.name
        outcome = NodeOutcome(node_name=node_name, dry_run=self.dry_run)

        try:
            self.node_analyzer.check_schedulable(node)
            pods = self._list_target_pods(node)
            controllers = self._list_replication_controllers(node_name)
        except EvacuationError as e:
            e.node_name = e.node_name or node_name
            logger.error(f"Evacuation of node {node_name} aborted: {e}", extra={"node": node_name})
            outcome.errors.append(e)
            outcome.state = EvacuationState.ABORTED
            return outcome

        if self.dry_run:
            self._print_pods(node_name, pods, outcome, LISTING_BANNER)
            logger.info(f"Dry run: {len(pods)} pods would be evacuated from node {node_name}")
            return outcome

        backed, _ = self.pod_classifier.classify(pods, controllers)
        backed_ids = {id(pod) for pod in backed}

        for pod in pods:
            namespace, name = pod.metadata.namespace, pod.metadata.name
            self._print_pod(node_name, pod, outcome, MIGRATING_BANNER)

            if id(pod) in backed_ids or self.force:
                try:
                    self.k8s_client.delete_pod(
                        namespace=namespace,
                        name=name,
                        grace_period_seconds=self.grace_period_seconds,
                    )
                except KubernetesException as e:
                    logger.error(
                        f"Unable to delete pod {namespace}/{name}: {e}",
                        extra={"node": node_name, "pod": f"{namespace}/{name}"},
                    )
                    outcome.errors.append(DeleteError(namespace, name, node_name, e))
                    continue
                outcome.deleted += 1
            else:
                logger.warning(
                    f"Skipping pod {namespace}/{name}: not backed by a replication controller",
                    extra={"node": node_name, "pod": f"{namespace}/{name}"},
                )
                outcome.skipped_unsafe += 1

        if outcome.skipped_unsafe:
            outcome.errors.append(UnsafePodsRemainError(node_name, outcome.skipped_unsafe))
        if outcome.errors:
            outcome.state = EvacuationState.PARTIAL_FAILURE

        logger.info(
            f"Node {node_name} evacuation finished with state {outcome.state.value}: "
            f"{outcome.deleted} deleted, {outcome.skipped_unsafe} skipped"
        )
        return outcome

    def list_pods(self, nodes: Iterable[k8s.V1Node]) -> AggregateError | None:
        """Print the pods the evacuation would target, without checking or deleting anything.

        :param nodes: Nodes to list pods for
        :return: AggregateError with listing failures, or None
        """
        errors: list[Exception] = []
        for node in nodes:
            node_name = node.metadata.name
            outcome = NodeOutcome(node_name=node_name, dry_run=True)
            try:
                pods = self._list_target_pods(node)
            except EvacuationError as e:
                e.node_name = e.node_name or node_name
                logger.error(f"Unable to list pods on node {node_name}: {e}")
                errors.append(e)
                continue
            self._print_pods(node_name, pods, outcome, LISTING_BANNER)
        return aggregate_errors(errors)

    def _list_target_pods(self, node: k8s.V1Node) -> list[k8s.V1Pod]:
        node_name = node.metadata.name
        try:
            return self.node_analyzer.select_target_pods(self.k8s_client, self.pod_selector, node)
        except KubernetesException as e:
            raise ListError(f"Unable to list pods on node '{node_name}': {e}", node_name) from e

    def _list_replication_controllers(self, node_name: str) -> list[k8s.V1ReplicationController]:
        try:
            return self.k8s_client.list_replication_controllers()
        except KubernetesException as e:
            raise ListError(f"Unable to list replication controllers: {e}", node_name) from e

    def _print_pods(
        self, node_name: str, pods: list[k8s.V1Pod], outcome: NodeOutcome, banner: str
    ) -> None:
        for pod in pods:
            self._print_pod(node_name, pod, outcome, banner)

    def _print_pod(self, node_name: str, pod: k8s.V1Pod, outcome: NodeOutcome, banner: str) -> None:
        """Print a pod; the first pod of a node gets the banner and the column headers."""
        first = not outcome.printed
        if first:
            self.diagnostics.write(f"\n{banner}: {node_name}\n\n")
        self.printer.print_pod(pod, self.output, with_headers=first)
        outcome.printed.append(pod.metadata.name)

    def _format_message(self, node: k8s.V1Node, outcome: NodeOutcome) -> str:
        """Format notification message for a node evacuation.

        :param node: Kubernetes node object
        :param outcome: Outcome of the evacuation
        :return: Formatted message string
        """
        node_info = self.node_analyzer.get_node_info(node)

        if outcome.state is EvacuationState.ABORTED:
            icon = ":no_entry:"
            verb = "could not evacuate Node"
        elif outcome.dry_run:
            icon = ":information_source:"
            verb = f"would evacuate {len(outcome.printed)} pods from Node"
        elif outcome.state is EvacuationState.PARTIAL_FAILURE:
            icon = ":warning:"
            verb = "partially evacuated Node"
        else:
            icon = ":truck:"
            verb = "evacuated Node"

        message = (
            f"{icon} NodeEvacuator {verb} \n"
            f"> Node: `{node_info['name']}`\n"
            f"> Cluster: {node_info['cluster']}\n"
            f"> Instance Type: {node_info['instance_type']}\n"
            f"> Zone: {node_info['zone']}\n"
            f"> Deleted: {outcome.deleted}, Skipped: {outcome.skipped_unsafe}"
        )
        if outcome.errors:
            message += f"\n> Errors: {outcome.error}"
        return message
