# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
In-memory dependency graph built from a manifest.
"""
import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple

from pydantic import ValidationError

from ..errors import MalformedInput
from .manifest import Manifest, ServiceMetadata

logger = logging.getLogger(__name__)


class DependencyGraph:
    """
    Services and their ``dependsOn`` edges plus per-service metadata.

    Every name that appears as a dependency is a node, whether or not it has
    its own adjacency entry or metadata. No cycle or dangling-reference checks
    happen here; those belong to the sorter.
    """

    def __init__(
        self,
        adjacency: Dict[str, List[str]],
        services: Dict[str, ServiceMetadata],
        default_branch: str = "",
    ):
        """
        Initializes the graph.

        :param adjacency: Service name to ordered dependency names.
        :param services: Service name to metadata.
        :param default_branch: Branch used when a service has none.
        """
        self.adjacency: Dict[str, List[str]] = {name: list(deps) for name, deps in adjacency.items()}
        self.services: Dict[str, ServiceMetadata] = dict(services)
        self.default_branch = default_branch

        nodes = set(self.adjacency)
        for deps in self.adjacency.values():
            nodes.update(deps)
        self._node_set = nodes
        self._nodes = sorted(nodes)

    @classmethod
    def load(
        cls,
        services_metadata: Any,
        adjacency_list: Any,
        default_branch: Optional[str] = None,
    ) -> "DependencyGraph":
        """
        Builds a graph from raw manifest sections.

        :param services_metadata: Mapping of service name to metadata fields.
        :param adjacency_list: Mapping of service name to dependencies.
        :param default_branch: Manifest-wide default branch.
        :return: The constructed graph.
        :raises MalformedInput: If the sections do not have the expected shape.
        """
        try:
            manifest = Manifest(
                defaultBranch=default_branch,
                dependencyAdjacencyList=adjacency_list,
                services=services_metadata,
            )
        except ValidationError as e:
            raise MalformedInput(f"invalid manifest: {e}") from e
        return cls.from_manifest(manifest)

    @classmethod
    def from_manifest(cls, manifest: Manifest) -> "DependencyGraph":
        return cls(
            adjacency=manifest.dependency_adjacency_list,
            services=manifest.services,
            default_branch=manifest.default_branch,
        )

    @property
    def nodes(self) -> List[str]:
        """All service names, sorted."""
        return list(self._nodes)

    def __contains__(self, name: str) -> bool:
        return name in self._node_set

    def __len__(self) -> int:
        return len(self._nodes)

    def dependencies_of(self, name: str) -> List[str]:
        """
        Returns the direct dependencies of a service in declared order.
        Nodes without an adjacency entry have none.
        """
        return list(self.adjacency.get(name, []))

    def edges(self) -> Iterator[Tuple[str, str]]:
        """
        Yields every ``(service, dependency)`` pair, services in sorted order.
        """
        for name in sorted(self.adjacency):
            for dep in self.adjacency[name]:
                yield name, dep

    def metadata_for(self, name: str) -> ServiceMetadata:
        """
        Returns the metadata of a service, or empty defaults when none was declared.
        """
        meta = self.services.get(name)
        if meta is None:
            logger.warning("No metadata found for service '%s', using defaults", name)
            return ServiceMetadata()
        return meta
