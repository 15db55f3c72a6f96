"""
Dependency ordering for services to determine a safe deployment order.
"""
import logging
from typing import Dict, List, Optional

from ..errors import CycleDetected
from ..MODELS.dependency_graph import DependencyGraph
from ..MODELS.deployment_order import DeployableService, DeploymentOrder

logger = logging.getLogger(__name__)

UNVISITED = 0
IN_PROGRESS = 1
DONE = 2


class TopologicalSorter:
    """
    Orders services so that every dependency comes before its dependents.
    """
    def sort(self, graph: DependencyGraph) -> List[str]:
        """
        Determines the deployment order using an iterative depth-first search.

        Traversals start from each node in sorted order, so both the result
        and the node reported for a cycle are reproducible.

        :param graph: The dependency graph.
        :return: Service names, dependencies first.
        :raises CycleDetected: If a dependency loop is found.
        """
        state: Dict[str, int] = {}
        ordered: List[str] = []

        for start in graph.nodes:
            if state.get(start, UNVISITED) == DONE:
                continue

            # (node, expanded) frames; an expanded frame emits the node
            stack = [(start, False)]
            while stack:
                node, expanded = stack.pop()
                node_state = state.get(node, UNVISITED)

                if node_state == DONE:
                    continue

                if expanded:
                    state[node] = DONE
                    ordered.append(node)
                    continue

                if node_state == IN_PROGRESS:
                    raise CycleDetected(node)

                state[node] = IN_PROGRESS
                stack.append((node, True))
                for dep in graph.dependencies_of(node):
                    if state.get(dep, UNVISITED) != DONE:
                        stack.append((dep, False))

        logger.debug("Deployment order: %s", ", ".join(ordered))
        return ordered


def build_deployment_order(graph: DependencyGraph, sorter: Optional[TopologicalSorter] = None) -> DeploymentOrder:
    """
    Sorts the graph and attaches each service's metadata.

    :param graph: The dependency graph.
    :param sorter: Sorter to use, a new TopologicalSorter by default.
    :return: The master deployment order artifact.
    :raises CycleDetected: If a dependency loop is found.
    """
    sorter = sorter or TopologicalSorter()
    entries = []
    for name in sorter.sort(graph):
        meta = graph.metadata_for(name)
        entries.append(DeployableService(
            service_name=name,
            repository=meta.repository.strip(),
            manifest=meta.path_to_manifest,
            dev_local=meta.path_to_devlocal,
            depends_on=graph.dependencies_of(name),
            branch=meta.effective_branch(graph.default_branch),
        ))

    return DeploymentOrder(
        deployment_order=entries,
        dependency_adjacency_list=graph.adjacency,
    )
