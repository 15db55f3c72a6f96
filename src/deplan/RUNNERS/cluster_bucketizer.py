"""
Splits a deployment order into per-cluster orders.
"""
from typing import Dict, List, Mapping

from ..errors import UnknownRoot
from ..MODELS.deployment_order import DeployableService, DeploymentOrder


def bucketize(
    order: DeploymentOrder,
    equivalence: Mapping[str, str],
) -> Dict[str, List[DeployableService]]:
    """
    Groups an already sorted order by component root.

    Services keep their relative order from the master order. Clusters appear
    in the order of their first service.

    :param order: The master deployment order.
    :param equivalence: Service name to component root.
    :return: Component root to the ordered services of that component.
    :raises UnknownRoot: If a service has no entry in ``equivalence``.
    """
    clusters: Dict[str, List[DeployableService]] = {}
    for svc in order.deployment_order:
        root = equivalence.get(svc.service_name)
        if root is None:
            raise UnknownRoot(svc.service_name)
        clusters.setdefault(root, []).append(svc)
    return clusters
