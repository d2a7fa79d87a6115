"""
Command line entry point for NodeEvac.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""
from typing import Callable, List, Optional

import typer
from kubernetes import client as k8s

from nodeevac.errors import AggregateError
from nodeevac.evacuator import NodeEvacuator
from nodeevac.k8s import KubernetesClient, KubernetesException
from nodeevac.logging import setup_logging
from nodeevac.settings import (
    DRY_RUN,
    ENABLE_JSON_LOGS,
    FORCE,
    GRACE_PERIOD_SECONDS,
    LOG_LEVEL,
    NODE_LABEL_SELECTOR,
    NODE_NAMES,
    OUTPUT_FORMAT,
    POD_SELECTOR,
)

app = typer.Typer(
    help="Evacuate pods from unschedulable Kubernetes nodes.",
    add_completion=False,
    no_args_is_help=True,
)

NODES_ARGUMENT = typer.Argument(None, help="Names of the nodes to act on")
SELECTOR_OPTION = typer.Option(
    NODE_LABEL_SELECTOR, "--selector", "-l", help="Label selector for the nodes to act on"
)
POD_SELECTOR_OPTION = typer.Option(
    POD_SELECTOR, "--pod-selector", help="Label selector to filter pods on the nodes"
)
OUTPUT_OPTION = typer.Option(
    OUTPUT_FORMAT, "--output", "-o", help="Pod output format: table, wide, json or yaml"
)


def resolve_nodes(
    k8s_client: KubernetesClient, names: list[str], selector: str
) -> list[k8s.V1Node]:
    """Resolve the nodes named on the command line or matched by the node selector.

    :param k8s_client: Kubernetes client
    :param names: Node names, used when no selector is given
    :param selector: Node label selector
    :return: List of V1Node objects
    :raises typer.BadParameter: If both or neither of names and selector are given
    """
    if names and selector:
        raise typer.BadParameter("Specify either node names or --selector, not both")
    if not names and not selector:
        raise typer.BadParameter("Specify node names or --selector")
    if selector:
        return k8s_client.list_nodes(selector)
    return [k8s_client.get_node(name) for name in names]


def _build_evacuator(**kwargs) -> NodeEvacuator:
    try:
        return NodeEvacuator(**kwargs)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--output") from e
    except KubernetesException as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=1) from e


def _run(
    action: Callable[[list[k8s.V1Node]], AggregateError | None],
    k8s_client: KubernetesClient,
    names: list[str],
    selector: str,
) -> None:
    try:
        nodes = resolve_nodes(k8s_client, names, selector)
    except KubernetesException as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=1) from e

    error = action(nodes)
    if error is not None:
        typer.echo(f"error: {error}", err=True)
        raise typer.Exit(code=1)


@app.callback()
def configure(
    log_level: str = typer.Option(LOG_LEVEL, "--log-level", help="DEBUG, INFO, WARNING or ERROR"),
    json_logs: bool = typer.Option(
        ENABLE_JSON_LOGS, "--json-logs/--text-logs", help="Emit JSON formatted logs"
    ),
) -> None:
    """Configure logging for every command."""
    setup_logging(log_level=log_level, enable_json_logs=json_logs)


@app.command()
def evacuate(
    nodes: Optional[List[str]] = NODES_ARGUMENT,
    selector: str = SELECTOR_OPTION,
    pod_selector: str = POD_SELECTOR_OPTION,
    grace_period: int = typer.Option(
        GRACE_PERIOD_SECONDS, "--grace-period", help="Grace period (seconds) for pods being deleted"
    ),
    dry_run: bool = typer.Option(
        DRY_RUN, "--dry-run/--no-dry-run", help="Show pods that will be migrated"
    ),
    force: bool = typer.Option(
        FORCE, "--force/--no-force", help="Delete pods not backed by replication controller"
    ),
    output: str = OUTPUT_OPTION,
) -> None:
    """Migrate pods off unschedulable nodes.

    Nodes must be marked unschedulable first (e.g. `kubectl cordon NODE`).
    """
    evacuator = _build_evacuator(
        pod_selector=pod_selector,
        dry_run=dry_run,
        force=force,
        grace_period_seconds=grace_period,
        output_format=output,
    )
    _run(evacuator.run, evacuator.k8s_client, nodes or NODE_NAMES, selector)


@app.command("list-pods")
def list_pods(
    nodes: Optional[List[str]] = NODES_ARGUMENT,
    selector: str = SELECTOR_OPTION,
    pod_selector: str = POD_SELECTOR_OPTION,
    output: str = OUTPUT_OPTION,
) -> None:
    """List the pods on the given nodes."""
    evacuator = _build_evacuator(pod_selector=pod_selector, output_format=output)
    _run(evacuator.list_pods, evacuator.k8s_client, nodes or NODE_NAMES, selector)


def main() -> None:
    """Run NodeEvac."""
    app()


if __name__ == "__main__":
    main()
