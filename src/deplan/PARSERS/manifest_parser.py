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
Parsers for dependency manifest files.
"""
import json
import yaml
from typing import Any, Dict
from pydantic import ValidationError

from ..errors import MalformedInput
from ..MODELS.dependency_graph import DependencyGraph
from ..MODELS.manifest import Manifest


def read_document(path: str, what: str = "document") -> str:
    """
    Reads a UTF-8 text file.

    :param path: Path to the file.
    :param what: Name of the document, used in error messages.
    :return: The file content.
    :raises MalformedInput: If the file is not valid UTF-8.
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise MalformedInput(f"{what} {path} is not valid UTF-8: {e}") from e


def load_document(content: str, what: str = "document") -> Dict[str, Any]:
    """
    Loads a YAML or JSON mapping from a string.

    Content that looks like JSON is tried with the json module first; YAML
    flow mappings also start with a brace, so a JSON failure falls back to
    the YAML loader.

    :param content: Raw file content.
    :param what: Name of the document, used in error messages.
    :return: The top-level mapping. An empty document gives an empty mapping.
    :raises MalformedInput: If the content is not valid YAML or not a mapping.
    """
    data = None
    parsed = False
    if content.lstrip().startswith(("{", "[")):
        try:
            data = json.loads(content)
            parsed = True
        except json.JSONDecodeError:
            pass
    if not parsed:
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise MalformedInput(f"invalid YAML in {what}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedInput(f"{what} must be a mapping, got {type(data).__name__}")
    return data


class ManifestParser:
    """
    Parser for dependency-manifest.yml files.
    """
    def parse(self, manifest_path: str) -> Manifest:
        """
        Parses a manifest file from a path.

        :param manifest_path: Path to the manifest file.
        :return: Parsed manifest.
        """
        return self.parse_from_string(read_document(manifest_path, "manifest"))

    def parse_from_string(self, content: str) -> Manifest:
        """
        Parses a manifest from a string.

        :param content: YAML or JSON content of the manifest.
        :return: Parsed manifest.
        :raises MalformedInput: If the content does not describe a manifest.
        """
        data = load_document(content, "manifest")
        try:
            return Manifest.model_validate(data)
        except ValidationError as e:
            raise MalformedInput(f"invalid manifest: {e}") from e

    def parse_graph(self, manifest_path: str) -> DependencyGraph:
        """
        Parses a manifest file straight into a dependency graph.
        """
        return DependencyGraph.from_manifest(self.parse(manifest_path))
