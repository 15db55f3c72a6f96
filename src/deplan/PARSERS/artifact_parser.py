"""
Parsers for the artifacts exchanged between deplan commands: the master
deployment order, the union mapping and a developer's local config.
"""
from typing import Dict, Type, TypeVar
from pydantic import BaseModel, TypeAdapter, ValidationError

from ..errors import MalformedInput
from ..MODELS.deployment_order import DeploymentOrder
from ..MODELS.local_config import LocalConfig
from ..MODELS.manifest import scalar_text
from .manifest_parser import load_document, read_document

ModelT = TypeVar("ModelT", bound=BaseModel)

_UNION_ADAPTER = TypeAdapter(Dict[str, str])


def _validate(model: Type[ModelT], content: str, what: str) -> ModelT:
    data = load_document(content, what)
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise MalformedInput(f"invalid {what}: {e}") from e


class DeploymentOrderParser:
    """
    Parser for deployment-order.yml artifacts.
    """
    @staticmethod
    def parse(path: str) -> DeploymentOrder:
        return DeploymentOrderParser.parse_from_string(read_document(path, "deployment order"))

    @staticmethod
    def parse_from_string(content: str) -> DeploymentOrder:
        """
        Parses a master deployment order.
        Accepts both the camelCase keys written by deplan and the capitalised
        ``DeploymentOrder``/``DependencyAdjacencyList`` keys.
        """
        return _validate(DeploymentOrder, content, "deployment order")


class UnionParser:
    """
    Parser for union.yml artifacts mapping each service to its component root.
    """
    @staticmethod
    def parse(path: str) -> Dict[str, str]:
        return UnionParser.parse_from_string(read_document(path, "union mapping"))

    @staticmethod
    def parse_from_string(content: str) -> Dict[str, str]:
        data = load_document(content, "union mapping")
        try:
            return _UNION_ADAPTER.validate_python(
                {scalar_text(name): scalar_text(root) for name, root in data.items()}
            )
        except ValidationError as e:
            raise MalformedInput(f"invalid union mapping: {e}") from e


class LocalConfigParser:
    """
    Parser for local-config.json files.
    """
    @staticmethod
    def parse(path: str) -> LocalConfig:
        return LocalConfigParser.parse_from_string(read_document(path, "local config"))

    @staticmethod
    def parse_from_string(content: str) -> LocalConfig:
        return _validate(LocalConfig, content, "local config")
