"""
Models for a resolved local deployment plan.
"""
from typing import List
from pydantic import BaseModel, ConfigDict, Field

from .deployment_order import DeployableService


class ConsistencyWarning(BaseModel):
    """
    A retained service still depends on a service that was skipped.
    """
    model_config = ConfigDict(frozen=True)

    service: str
    skipped_dependency: str

    def __str__(self) -> str:
        return f"'{self.service}' depends on skipped service '{self.skipped_dependency}'"


class DeploymentPlan(BaseModel):
    """
    Ordered subset of a master deployment order with overrides applied.
    """
    model_config = ConfigDict(frozen=True)

    root_service: str
    services: List[DeployableService] = Field(default_factory=list)
    warnings: List[ConsistencyWarning] = Field(default_factory=list)

    @property
    def service_names(self) -> List[str]:
        return [svc.service_name for svc in self.services]

    @property
    def is_consistent(self) -> bool:
        return not self.warnings
