"""
Models for the master deployment-order artifact.
"""
from typing import Any, Dict, List
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, field_validator

from .manifest import normalize_adjacency, scalar_text


class DeployableService(BaseModel):
    """
    A single entry of a deployment order or plan.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    service_name: str = Field(alias="serviceName")
    repository: str = ""
    manifest: str = ""
    dev_local: str = Field("", alias="devLocal")
    depends_on: List[str] = Field(default_factory=list, alias="dependsOn")
    branch: str = ""

    @field_validator('service_name', mode='before')
    @classmethod
    def _name_as_text(cls, value: Any) -> Any:
        return scalar_text(value)

    @field_validator('repository', 'manifest', 'dev_local', 'branch', mode='before')
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return "" if value is None else scalar_text(value)

    @field_validator('depends_on', mode='before')
    @classmethod
    def _none_is_no_deps(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [scalar_text(dep) for dep in value]
        return [] if value is None else value


class DeploymentOrder(BaseModel):
    """
    Dependencies-first ordering of every service in the graph, together with
    the adjacency list it was computed from.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    deployment_order: List[DeployableService] = Field(
        default_factory=list,
        validation_alias=AliasChoices("deploymentOrder", "DeploymentOrder", "deployment_order"),
        serialization_alias="deploymentOrder",
    )
    dependency_adjacency_list: Dict[str, List[str]] = Field(
        default_factory=dict,
        validation_alias=AliasChoices(
            "dependencyAdjacencyList", "DependencyAdjacencyList", "dependency_adjacency_list"
        ),
        serialization_alias="dependencyAdjacencyList",
    )

    @field_validator('deployment_order', mode='before')
    @classmethod
    def _none_is_empty_order(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator('dependency_adjacency_list', mode='before')
    @classmethod
    def _adjacency_shape(cls, value: Any) -> Any:
        return normalize_adjacency(value)

    @field_serializer('dependency_adjacency_list')
    def _dump_adjacency(self, value: Dict[str, List[str]]) -> Dict[str, Dict[str, List[str]]]:
        return {name: {'dependsOn': list(deps)} for name, deps in value.items()}

    @property
    def service_names(self) -> List[str]:
        return [svc.service_name for svc in self.deployment_order]

    def get(self, name: str):
        """
        Returns the entry for a service, or None when it is not in the order.
        """
        for svc in self.deployment_order:
            if svc.service_name == name:
                return svc
        return None
