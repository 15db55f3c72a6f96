"""
Writers for the artifacts produced by deplan commands.
"""
import json
import os
from typing import Any, Dict, List, Mapping

import yaml

from ..MODELS.deployment_order import DeployableService, DeploymentOrder
from ..MODELS.deployment_plan import DeploymentPlan


def order_to_data(order: DeploymentOrder) -> Dict[str, Any]:
    return order.model_dump(by_alias=True)


def services_to_data(services: List[DeployableService]) -> List[Dict[str, Any]]:
    return [svc.model_dump(by_alias=True) for svc in services]


def plan_to_data(plan: DeploymentPlan) -> List[Dict[str, Any]]:
    """
    The plan artifact is the bare list of services, as consumed by deploy tooling.
    """
    return services_to_data(plan.services)


def clusters_to_data(clusters: Mapping[str, List[DeployableService]]) -> Dict[str, Any]:
    return {root: services_to_data(services) for root, services in clusters.items()}


def dumps(data: Any, fmt: str = "yaml") -> str:
    """
    Serializes artifact data.

    :param data: Plain data built by one of the ``*_to_data`` helpers.
    :param fmt: ``json`` or ``yaml``.
    :return: The serialized document.
    """
    if fmt == "json":
        return json.dumps(data, indent=2) + "\n"
    return yaml.safe_dump(data, sort_keys=False, default_flow_style=False)


def format_for(path: str) -> str:
    """
    Picks the output format from a file extension; anything but ``.json`` is YAML.
    """
    return "json" if os.path.splitext(path)[1].lower() == ".json" else "yaml"


def write_artifact(data: Any, path: str) -> str:
    """
    Writes artifact data to ``path`` in the format its extension implies.

    :param data: Plain data built by one of the ``*_to_data`` helpers.
    :param path: Output file path. Parent directories are created.
    :return: The path written.
    """
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, 'w') as f:
        f.write(dumps(data, format_for(path)))
    return path
