"""
Evacuation error taxonomy and the aggregate error value used to report many failures at once.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

from typing import Iterable

UNSAFE_PODS_MESSAGE = (
    "Unable to evacuate some pods on node '{node_name}' because they are not backed by "
    "replication controller.\n"
    "Suggested options:\n"
    "- You can list bare pods in json/yaml format using 'nodeevac list-pods -o json|yaml'\n"
    "- Force deletion of bare pods with --force option to evacuate\n"
    "- Optionally recreate these bare pods by massaging the json/yaml output from above list pods\n"
)


class EvacuationError(Exception):
    """Base class for errors raised while evacuating a node."""

    def __init__(self, message: str, node_name: str | None = None) -> None:
        super().__init__(message)
        self.node_name = node_name


class NodeNotUnschedulableError(EvacuationError):
    """The node must be marked unschedulable before it can be evacuated."""

    def __init__(self, node_name: str) -> None:
        super().__init__(
            f"Node '{node_name}' must be unschedulable to perform evacuation.\n"
            f"You can mark the node unschedulable with 'kubectl cordon {node_name}'",
            node_name=node_name,
        )


class InvalidSelectorError(EvacuationError, ValueError):
    """A label selector expression could not be parsed."""

    def __init__(self, selector: str, reason: str, node_name: str | None = None) -> None:
        super().__init__(f"Invalid label selector '{selector}': {reason}", node_name=node_name)
        self.selector = selector
        self.reason = reason


class ListError(EvacuationError):
    """Listing pods or replication controllers failed."""


class DeleteError(EvacuationError):
    """Deleting a single pod failed."""

    def __init__(self, namespace: str, pod_name: str, node_name: str, cause: Exception) -> None:
        super().__init__(
            f"Unable to delete pod {namespace}/{pod_name} on node '{node_name}': {cause}",
            node_name=node_name,
        )
        self.namespace = namespace
        self.pod_name = pod_name


class UnsafePodsRemainError(EvacuationError):
    """Pods without a replication controller were left on the node."""

    def __init__(self, node_name: str, count: int) -> None:
        super().__init__(UNSAFE_PODS_MESSAGE.format(node_name=node_name), node_name=node_name)
        self.count = count


class AggregateError(Exception):
    """A single error value holding every failure collected across nodes and pods."""

    def __init__(self, errors: list[Exception]) -> None:
        self.errors = list(errors)
        super().__init__(self._message())

    def _message(self) -> str:
        if len(self.errors) == 1:
            return str(self.errors[0])
        return "[" + ", ".join(str(e) for e in self.errors) + "]"

    def flatten(self) -> list[Exception]:
        """Expand nested aggregates into a flat list of errors.

        :return: List of non-aggregate errors in collection order
        """
        flat: list[Exception] = []
        for error in self.errors:
            if isinstance(error, AggregateError):
                flat.extend(error.flatten())
            else:
                flat.append(error)
        return flat

    def __len__(self) -> int:
        return len(self.errors)

    def __iter__(self):
        return iter(self.errors)


def aggregate_errors(errors: Iterable[Exception]) -> AggregateError | None:
    """Combine errors into one aggregate.

    :param errors: Errors collected while processing
    :return: AggregateError, or None if there were no errors
    """
    errors = [e for e in errors if e is not None]
    if not errors:
        return None
    return AggregateError(errors)
