"""
Pod printers for table, wide, JSON and YAML output.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import json
from datetime import datetime, timezone
from typing import Any, Protocol

import yaml
from kubernetes import client as k8s

OUTPUT_FORMATS = ("table", "wide", "json", "yaml")

_COLUMNS = (("NAMESPACE", 20), ("NAME", 45), ("READY", 8), ("STATUS", 12), ("RESTARTS", 10))
_WIDE_COLUMNS = (("IP", 16),)


class Sink(Protocol):
    """Text stream the printer and the evacuator write to."""

    def write(self, text: str, /) -> Any:
        """Write text to the stream.

        :param text: Text to write
        """
        pass


class PodPrinter:
    """Formats pods the way ``kubectl get pods`` does."""

    def __init__(self, output_format: str = "table") -> None:
        """Initialize pod printer.

        :param output_format: One of table, wide, json, yaml
        :raises ValueError: If the format is not supported
        """
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"Unsupported output format '{output_format}', "
                f"expected one of: {', '.join(OUTPUT_FORMATS)}"
            )
        self.output_format = output_format

    def print_pod(self, pod: k8s.V1Pod, stream: Sink, with_headers: bool = False) -> None:
        """Write a pod representation to the stream.

        :param pod: Kubernetes pod object
        :param stream: Output stream
        :param with_headers: Emit the column header line first (table formats only)
        """
        match self.output_format:
            case "json":
                stream.write(json.dumps(self._serialize(pod), indent=2) + "\n")
            case "yaml":
                document = yaml.safe_dump(self._serialize(pod), default_flow_style=False)
                stream.write("---\n" + document)
            case _:
                wide = self.output_format == "wide"
                if with_headers:
                    stream.write(self._header(wide) + "\n")
                stream.write(self._row(pod, wide) + "\n")

    @staticmethod
    def _serialize(pod: k8s.V1Pod) -> dict:
        with k8s.ApiClient() as api_client:
            return api_client.sanitize_for_serialization(pod)

    @staticmethod
    def _header(wide: bool) -> str:
        columns = [name.ljust(width) for name, width in _COLUMNS] + ["AGE"]
        if wide:
            columns[-1] = "AGE".ljust(8)
            columns += [name.ljust(width) for name, width in _WIDE_COLUMNS] + ["NODE"]
        return " ".join(columns).rstrip()

    def _row(self, pod: k8s.V1Pod, wide: bool) -> str:
        values = [
            pod.metadata.namespace or "",
            pod.metadata.name or "",
            self._ready(pod),
            self._status(pod),
            str(self._restarts(pod)),
        ]
        columns = [value.ljust(width) for value, (_, width) in zip(values, _COLUMNS)]
        age = self._age(pod)
        if wide:
            columns.append(age.ljust(8))
            pod_ip = (pod.status and pod.status.pod_ip) or "<none>"
            columns.append(pod_ip.ljust(_WIDE_COLUMNS[0][1]))
            columns.append((pod.spec and pod.spec.node_name) or "<none>")
        else:
            columns.append(age)
        return " ".join(columns).rstrip()

    @staticmethod
    def _ready(pod: k8s.V1Pod) -> str:
        containers = (pod.spec and pod.spec.containers) or []
        statuses = (pod.status and pod.status.container_statuses) or []
        ready = sum(1 for status in statuses if status.ready)
        return f"{ready}/{len(containers)}"

    @staticmethod
    def _status(pod: k8s.V1Pod) -> str:
        if pod.metadata.deletion_timestamp is not None:
            return "Terminating"
        if pod.status is None:
            return "Unknown"
        return pod.status.reason or pod.status.phase or "Unknown"

    @staticmethod
    def _restarts(pod: k8s.V1Pod) -> int:
        statuses = (pod.status and pod.status.container_statuses) or []
        return sum(status.restart_count or 0 for status in statuses)

    @staticmethod
    def _age(pod: k8s.V1Pod) -> str:
        """Format pod age into human readable string (e.g., "5m", "2h", "3d")."""
        created: datetime | None = pod.metadata.creation_timestamp
        if created is None:
            return "<unknown>"
        total_seconds = int((datetime.now(timezone.utc) - created).total_seconds())

        if total_seconds < 60:
            return f"{total_seconds}s"
        elif total_seconds < 3600:
            return f"{total_seconds // 60}m"
        elif total_seconds < 86400:
            return f"{total_seconds // 3600}h"
        else:
            return f"{total_seconds // 86400}d"
