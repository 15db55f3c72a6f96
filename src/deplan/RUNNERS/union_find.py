"""
Disjoint-set grouping of services into independently deployable clusters.
"""
import logging
from typing import Dict, Iterable

from ..errors import UnknownService
from ..MODELS.dependency_graph import DependencyGraph

logger = logging.getLogger(__name__)


class UnionFind:
    """
    Union-find over service names with path compression.

    Every node starts as its own root. Two services share a root once a chain
    of unions connects them.
    """

    def __init__(self, nodes: Iterable[str] = ()):
        """
        Initializes the structure with each node in its own set.

        :param nodes: Service names.
        """
        self.parent: Dict[str, str] = {}
        self.make_set(nodes)

    def make_set(self, nodes: Iterable[str]):
        """
        Adds nodes as singleton sets. Nodes already present are left alone.
        """
        for node in nodes:
            self.parent.setdefault(node, node)

    def __contains__(self, node: str) -> bool:
        return node in self.parent

    def find(self, x: str) -> str:
        """
        Finds the root of x and points every node on the way directly at it.

        :param x: Service name.
        :return: The representative of x's set.
        :raises UnknownService: If x was never added.
        """
        if x not in self.parent:
            raise UnknownService(x)

        root = x
        while self.parent[root] != root:
            root = self.parent[root]

        # path compression
        while x != root:
            next_node = self.parent[x]
            self.parent[x] = root
            x = next_node

        return root

    def union(self, x: str, y: str):
        """
        Merges the sets containing x and y. y's root is attached under x's root.
        """
        root_x = self.find(x)
        root_y = self.find(y)
        if root_x != root_y:
            self.parent[root_y] = root_x

    def connected(self, x: str, y: str) -> bool:
        return self.find(x) == self.find(y)

    def groups(self) -> Dict[str, str]:
        """
        Returns the root of every node, keyed by node name in sorted order.
        """
        return {node: self.find(node) for node in sorted(self.parent)}


def group_all(graph: DependencyGraph) -> Dict[str, str]:
    """
    Partitions the graph into connected components, ignoring edge direction.

    :param graph: The dependency graph.
    :return: Every service name mapped to its component root.
    """
    uf = UnionFind(graph.nodes)
    for service, dep in graph.edges():
        uf.union(service, dep)

    groups = uf.groups()
    logger.debug("Found %d connected component(s)", len(set(groups.values())))
    return groups
