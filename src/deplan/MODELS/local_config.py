"""
Models for a developer's local override directives.
"""
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .manifest import scalar_text


class Override(BaseModel):
    """
    Per-service instruction for a single local deployment run.

    Field overrides only apply when they are non-empty. ``skip`` removes the
    service from the plan, ``force_deploy`` adds it together with its
    transitive dependencies.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    service_name: str = Field(alias="serviceName")
    branch: Optional[str] = None
    manifest_path: Optional[str] = Field(None, alias="manifestPath")
    dev_local: Optional[str] = Field(None, alias="devLocal")
    skip: bool = False
    force_deploy: bool = Field(False, alias="forceDeploy")

    @field_validator('service_name', 'branch', 'manifest_path', 'dev_local', mode='before')
    @classmethod
    def _scalar_as_text(cls, value: Any) -> Any:
        return scalar_text(value)


class LocalConfig(BaseModel):
    """
    Target service plus the overrides for one developer environment.
    Equivalent to a parsed local-config.json file.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    service_name: str = Field(alias="serviceName")
    dependency_overrides: List[Override] = Field(default_factory=list, alias="dependencyOverrides")

    @field_validator('service_name', mode='before')
    @classmethod
    def _name_as_text(cls, value: Any) -> Any:
        return scalar_text(value)

    @field_validator('dependency_overrides', mode='before')
    @classmethod
    def _none_is_no_overrides(cls, value: Any) -> Any:
        return [] if value is None else value
