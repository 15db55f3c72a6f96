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
Unit tests for the topological sorter and the master order builder.
"""
import random

import pytest
from deplan.errors import CycleDetected
from deplan.MODELS.dependency_graph import DependencyGraph
from deplan.MODELS.manifest import ServiceMetadata
from deplan.RUNNERS.topological_sorter import TopologicalSorter, build_deployment_order


def graph_of(adjacency, services=None, default_branch=""):
    return DependencyGraph(adjacency, services or {}, default_branch)


def assert_dependencies_first(order, adjacency):
    position = {name: i for i, name in enumerate(order)}
    for service, deps in adjacency.items():
        for dep in deps:
            assert position[dep] < position[service], f"{dep} must precede {service}"


class TestTopologicalSorter:
    """Tests for TopologicalSorter.sort."""

    def test_chain(self):
        """Test that a simple chain is ordered dependencies first."""
        order = TopologicalSorter().sort(graph_of({"A": ["B"], "B": ["C"], "C": []}))
        assert order == ["C", "B", "A"]

    def test_implicit_dependency_node(self):
        """Test that dependency-only services are part of the order."""
        order = TopologicalSorter().sort(graph_of({"A": ["B"]}))
        assert order == ["B", "A"]

    def test_diamond(self):
        """Test that shared dependencies are emitted once."""
        adjacency = {"app": ["api", "web"], "api": ["db"], "web": ["db"], "db": []}
        order = TopologicalSorter().sort(graph_of(adjacency))
        assert sorted(order) == ["api", "app", "db", "web"]
        assert_dependencies_first(order, adjacency)

    def test_deterministic_start_order(self):
        """Test that unrelated services come out in name order."""
        order = TopologicalSorter().sort(graph_of({"zeta": [], "alpha": [], "mid": []}))
        assert order == ["alpha", "mid", "zeta"]

    def test_independent_families(self):
        """Test ordering of two disjoint subgraphs."""
        order = TopologicalSorter().sort(graph_of({"A": ["B"], "X": ["Y"]}))
        assert order == ["B", "A", "Y", "X"]

    def test_two_node_cycle(self):
        """Test that a two-node cycle is reported at the first revisited node."""
        with pytest.raises(CycleDetected) as exc:
            TopologicalSorter().sort(graph_of({"A": ["B"], "B": ["A"]}))
        assert exc.value.node == "A"
        assert "A" in str(exc.value)

    def test_self_loop(self):
        """Test that a service depending on itself is a cycle."""
        with pytest.raises(CycleDetected) as exc:
            TopologicalSorter().sort(graph_of({"A": ["A"]}))
        assert exc.value.node == "A"

    def test_cycle_behind_acyclic_prefix(self):
        """Test that the reported node lies on the cycle."""
        adjacency = {"app": ["b"], "b": ["c"], "c": ["d"], "d": ["b"]}
        with pytest.raises(CycleDetected) as exc:
            TopologicalSorter().sort(graph_of(adjacency))
        assert exc.value.node == "b"

    def test_random_dag(self):
        """Test the ordering property on a generated acyclic graph."""
        rng = random.Random(7)
        names = [f"svc-{i:03d}" for i in range(200)]
        adjacency = {}
        for i, name in enumerate(names):
            # only depend on later names, which keeps the graph acyclic
            candidates = names[i + 1:]
            adjacency[name] = rng.sample(candidates, min(len(candidates), rng.randint(0, 4)))
        order = TopologicalSorter().sort(graph_of(adjacency))
        assert len(order) == len(names)
        assert_dependencies_first(order, adjacency)

    def test_long_chain_does_not_recurse(self):
        """Test that a very deep graph is sorted without hitting recursion limits."""
        size = 20000
        adjacency = {f"s{i}": [f"s{i + 1}"] for i in range(size)}
        order = TopologicalSorter().sort(graph_of(adjacency))
        assert order[0] == f"s{size}"
        assert order[-1] == "s0"


class TestBuildDeploymentOrder:
    """Tests for build_deployment_order."""

    def test_metadata_and_branch_fallback(self):
        """Test that metadata is attached and blank branches use the default."""
        services = {
            "A": ServiceMetadata(repository="  git@host:a.git ", pathToManifest="a/k8s.yml",
                                 pathToDevlocal="a/dev.yml", branch="   "),
            "B": ServiceMetadata(repository="git@host:b.git", branch=" feature/x "),
        }
        order = build_deployment_order(graph_of({"A": ["B"]}, services, "main"))

        assert order.service_names == ["B", "A"]
        a = order.get("A")
        assert a.repository == "git@host:a.git"
        assert a.manifest == "a/k8s.yml"
        assert a.dev_local == "a/dev.yml"
        assert a.depends_on == ["B"]
        assert a.branch == "main"
        assert order.get("B").branch == "feature/x"

    def test_missing_metadata_uses_defaults(self, caplog):
        """Test that a service without metadata gets empty values and a warning."""
        with caplog.at_level("WARNING"):
            order = build_deployment_order(graph_of({"A": ["ghost"]}, {}, "develop"))
        ghost = order.get("ghost")
        assert ghost.repository == ""
        assert ghost.depends_on == []
        assert ghost.branch == "develop"
        assert "ghost" in caplog.text

    def test_adjacency_is_retained(self):
        """Test that the source adjacency list travels with the order."""
        order = build_deployment_order(graph_of({"A": ["B"], "B": []}))
        assert order.dependency_adjacency_list == {"A": ["B"], "B": []}

    def test_cycle_propagates(self):
        with pytest.raises(CycleDetected):
            build_deployment_order(graph_of({"A": ["B"], "B": ["A"]}))
