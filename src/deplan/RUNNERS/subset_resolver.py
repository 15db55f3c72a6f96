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
Resolution of a local deployment plan from a master deployment order.
"""
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set

from ..errors import InconsistentPlan, MalformedInput, UnknownService
from ..MODELS.deployment_order import DeployableService, DeploymentOrder
from ..MODELS.deployment_plan import ConsistencyWarning, DeploymentPlan
from ..MODELS.local_config import LocalConfig, Override

logger = logging.getLogger(__name__)


def transitive_dependencies(service: str, adjacency: Mapping[str, Sequence[str]]) -> Set[str]:
    """
    Collects every service reachable from ``service`` through its dependencies.

    The walk uses an explicit stack and stops at services it has already seen,
    so it terminates on cyclic input.

    :param service: Starting service, not included in the result unless it
        is reachable from itself.
    :param adjacency: Service name to dependency names.
    :return: The set of transitive dependencies.
    """
    found: Set[str] = set()
    stack = list(adjacency.get(service, []))
    while stack:
        dep = stack.pop()
        if dep in found:
            continue
        found.add(dep)
        stack.extend(adjacency.get(dep, []))
    return found


def index_overrides(overrides: Iterable[Override]) -> Dict[str, Override]:
    """
    Maps each override to its service name.

    :raises MalformedInput: If a service has more than one override.
    """
    indexed: Dict[str, Override] = {}
    for override in overrides:
        if override.service_name in indexed:
            raise MalformedInput(f"duplicate override for service '{override.service_name}'")
        indexed[override.service_name] = override
    return indexed


def apply_override(svc: DeployableService, override: Optional[Override]) -> DeployableService:
    """
    Returns a copy of ``svc`` with the non-empty override fields applied.
    """
    update = {'depends_on': list(svc.depends_on)}
    if override is not None:
        if override.branch:
            update['branch'] = override.branch
        if override.manifest_path:
            update['manifest'] = override.manifest_path
        if override.dev_local:
            update['dev_local'] = override.dev_local
    return svc.model_copy(update=update)


class SubsetResolver:
    """
    Computes the part of a master deployment order one developer needs.
    """
    def __init__(self, strict: bool = False):
        """
        Initializes the resolver.

        :param strict: Raise InconsistentPlan instead of returning warnings
            when a retained service depends on a skipped one.
        """
        self.strict = strict

    def resolve(
        self,
        master: DeploymentOrder,
        root_service: str,
        overrides: Iterable[Override] = (),
        adjacency: Optional[Mapping[str, Sequence[str]]] = None,
    ) -> DeploymentPlan:
        """
        Resolves the ordered deployment plan for ``root_service``.

        The deploy-set starts as the root plus its transitive dependencies.
        Force-deployed services add themselves and their dependencies, then
        skipped services are removed without touching their dependents. The
        result keeps the master order, so it stays topologically sorted.

        :param master: The master deployment order. Never modified.
        :param root_service: Service the developer is working on.
        :param overrides: Per-service override directives.
        :param adjacency: Dependency lists to follow, the master's own by default.
        :return: The resolved plan and any consistency warnings.
        :raises UnknownService: If the root is not in the master order.
        :raises MalformedInput: If a service has more than one override.
        :raises InconsistentPlan: In strict mode, if a retained service depends
            on a skipped one.
        """
        if adjacency is None:
            adjacency = master.dependency_adjacency_list

        master_names = set(master.service_names)
        if root_service not in master_names:
            raise UnknownService(root_service)

        override_map = index_overrides(overrides)

        deploy_set = {root_service}
        deploy_set |= transitive_dependencies(root_service, adjacency)

        for name, override in override_map.items():
            if not override.force_deploy:
                continue
            if name not in master_names:
                logger.warning("Force-deployed service '%s' is not in the master order, ignoring", name)
            deploy_set.add(name)
            deploy_set |= transitive_dependencies(name, adjacency)

        skipped = {name for name, override in override_map.items() if override.skip}
        deploy_set -= skipped

        services: List[DeployableService] = []
        warnings: List[ConsistencyWarning] = []
        for svc in master.deployment_order:
            if svc.service_name not in deploy_set:
                continue
            services.append(apply_override(svc, override_map.get(svc.service_name)))
            for dep in dict.fromkeys(svc.depends_on):
                if dep in skipped:
                    warnings.append(ConsistencyWarning(service=svc.service_name, skipped_dependency=dep))

        for warning in warnings:
            logger.warning("Plan for '%s': %s", root_service, warning)
        if warnings and self.strict:
            raise InconsistentPlan(warnings)

        return DeploymentPlan(root_service=root_service, services=services, warnings=warnings)

    def resolve_config(self, master: DeploymentOrder, config: LocalConfig) -> DeploymentPlan:
        """
        Resolves the plan described by a parsed local config.
        """
        return self.resolve(master, config.service_name, config.dependency_overrides)


def resolve(
    master_plan: DeploymentOrder,
    adjacency_list: Mapping[str, Sequence[str]],
    root_service: str,
    overrides: Iterable[Override] = (),
    strict: bool = False,
) -> DeploymentPlan:
    """
    Functional form of SubsetResolver.resolve.
    """
    return SubsetResolver(strict=strict).resolve(
        master_plan, root_service, overrides, adjacency=adjacency_list
    )
