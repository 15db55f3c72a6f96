"""
Models for the dependency manifest: per-service metadata and the adjacency list.
"""
from typing import Any, Dict, List
from pydantic import BaseModel, ConfigDict, Field, field_validator


def scalar_text(value: Any) -> Any:
    """
    Turns a YAML scalar that was resolved to a number or a boolean back into text.

    Service names, dependency names and branches are strings even when they
    look like ``2048``, ``1.0`` or ``true``. Other values are returned untouched.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


def normalize_adjacency(value: Any) -> Any:
    """
    Accepts both adjacency shapes found in manifests and artifacts.

    ``{svc: {dependsOn: [a, b]}}`` and ``{svc: [a, b]}`` both become
    ``{svc: [a, b]}``. Empty entries become an empty list and scalar names
    become strings. Anything that is not a mapping is returned untouched so
    that validation reports it.
    """
    if value is None:
        return {}
    if not isinstance(value, dict):
        return value
    normalized = {}
    for name, deps in value.items():
        if isinstance(deps, dict):
            deps = deps.get('dependsOn')
        if deps is None:
            deps = []
        elif isinstance(deps, list):
            deps = [scalar_text(dep) for dep in deps]
        normalized[scalar_text(name)] = deps
    return normalized


class ServiceMetadata(BaseModel):
    """
    Where a service lives and how to deploy it.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    repository: str = ""
    path_to_manifest: str = Field("", alias="pathToManifest")
    path_to_devlocal: str = Field("", alias="pathToDevlocal")
    branch: str = ""

    @field_validator('repository', 'path_to_manifest', 'path_to_devlocal', 'branch', mode='before')
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return "" if value is None else scalar_text(value)

    def effective_branch(self, default_branch: str) -> str:
        """
        Returns the branch to deploy, falling back to the manifest default.

        :param default_branch: Manifest-wide default branch.
        :return: The trimmed branch, or the default when it is blank.
        """
        branch = self.branch.strip()
        return branch if branch else default_branch


class Manifest(BaseModel):
    """
    Complete dependency manifest.
    Equivalent to a parsed dependency-manifest.yml file.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    default_branch: str = Field("", alias="defaultBranch")
    dependency_adjacency_list: Dict[str, List[str]] = Field(
        default_factory=dict, alias="dependencyAdjacencyList"
    )
    services: Dict[str, ServiceMetadata] = Field(default_factory=dict)

    @field_validator('default_branch', mode='before')
    @classmethod
    def _default_branch_none(cls, value: Any) -> Any:
        return "" if value is None else scalar_text(value)

    @field_validator('dependency_adjacency_list', mode='before')
    @classmethod
    def _adjacency_shape(cls, value: Any) -> Any:
        return normalize_adjacency(value)

    @field_validator('services', mode='before')
    @classmethod
    def _empty_services(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {scalar_text(name): ({} if meta is None else meta) for name, meta in value.items()}
        return value
