"""
Structural workload parsing for the engine's parse step.
Entries of an unexpected shape are skipped rather than failing the parse.
"""
from typing import Dict, Any, List, Optional

import yaml

from ...schemas.chart import AppSpec

WORKLOAD_KINDS = {"Deployment", "StatefulSet", "DaemonSet", "ReplicaSet", "Job", "CronJob", "Pod"}


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _mappings(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _pod_spec(doc: Dict[str, Any]) -> Dict[str, Any]:
    spec = _mapping(doc.get("spec"))
    kind = doc.get("kind")
    if kind == "Pod":
        return spec
    if kind == "CronJob":
        spec = _mapping(_mapping(spec.get("jobTemplate")).get("spec"))
    return _mapping(_mapping(spec.get("template")).get("spec"))


def _ports(container: Dict[str, Any], host_network: bool) -> List[str]:
    ports = []
    for port in _mappings(container.get("ports")):
        container_port = port.get("containerPort")
        if container_port is None:
            continue
        ports.append(f"{container_port}:{container_port}" if host_network else str(container_port))
    return ports


def _configs(container: Dict[str, Any]) -> Dict[str, str]:
    # Only literal values; valueFrom references are resolved at deploy time
    return {
        str(env["name"]): str(env["value"])
        for env in _mappings(container.get("env"))
        if env.get("name") and env.get("value") is not None
    }


def _mounts(container: Dict[str, Any]) -> Dict[str, str]:
    return {
        str(mount["name"]): str(mount.get("mountPath") or "")
        for mount in _mappings(container.get("volumeMounts"))
        if mount.get("name")
    }


def parse_workloads(manifest: Optional[str], use_host_network: bool = False) -> List[AppSpec]:
    """
    One AppSpec per container of every workload resource in the manifest.
    Raises yaml.YAMLError on malformed input.
    """
    apps: List[AppSpec] = []
    if not manifest:
        return apps

    for doc in yaml.safe_load_all(manifest):
        if not isinstance(doc, dict) or doc.get("kind") not in WORKLOAD_KINDS:
            continue

        workload_name = str(_mapping(doc.get("metadata")).get("name") or "")
        pod = _pod_spec(doc)
        host_network = use_host_network or bool(pod.get("hostNetwork"))
        containers = _mappings(pod.get("containers"))

        for container in containers:
            container_name = str(container.get("name") or "")
            name = workload_name or container_name
            if len(containers) > 1 and container_name:
                name = f"{workload_name}-{container_name}"
            apps.append(AppSpec(
                name=name,
                image=str(container.get("image") or ""),
                type=doc["kind"].lower(),
                ports=_ports(container, host_network),
                configs=_configs(container),
                mounts=_mounts(container),
            ))
    return apps
