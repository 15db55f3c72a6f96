"""
Unit tests for the disjoint-set grouper.
"""
import itertools
import random

import pytest
from deplan.errors import UnknownService
from deplan.MODELS.dependency_graph import DependencyGraph
from deplan.RUNNERS.union_find import UnionFind, group_all


class TestUnionFind:
    """Tests for UnionFind."""

    def test_make_set_roots_are_self(self):
        """Test that every node starts as its own root."""
        uf = UnionFind(["a", "b", "c"])
        assert uf.groups() == {"a": "a", "b": "b", "c": "c"}

    def test_union_attaches_second_root(self):
        """Test that the second root is attached under the first."""
        uf = UnionFind(["a", "b"])
        uf.union("a", "b")
        assert uf.find("b") == "a"
        assert uf.connected("a", "b")

    def test_union_is_transitive(self):
        """Test that chains of unions connect the ends."""
        uf = UnionFind(["a", "b", "c", "d"])
        uf.union("a", "b")
        uf.union("c", "d")
        assert not uf.connected("a", "d")
        uf.union("b", "c")
        assert uf.connected("a", "d")

    def test_path_compression(self):
        """Test that find points visited nodes directly at the root."""
        uf = UnionFind(["a", "b", "c", "d"])
        uf.parent.update({"b": "a", "c": "b", "d": "c"})
        assert uf.find("d") == "a"
        assert uf.parent["d"] == "a"
        assert uf.parent["c"] == "a"
        assert uf.parent["b"] == "a"

    def test_deep_chain_find(self):
        """Test that find on a very long parent chain does not recurse."""
        size = 50000
        nodes = [str(i) for i in range(size)]
        uf = UnionFind(nodes)
        for i in range(1, size):
            uf.parent[str(i)] = str(i - 1)
        assert uf.find(str(size - 1)) == "0"

    def test_unknown_node(self):
        """Test that find on an unknown node raises."""
        uf = UnionFind(["a"])
        with pytest.raises(UnknownService):
            uf.find("missing")

    def test_make_set_keeps_existing(self):
        uf = UnionFind(["a", "b"])
        uf.union("a", "b")
        uf.make_set(["b", "c"])
        assert uf.find("b") == "a"
        assert uf.find("c") == "c"

    def test_equivalence_properties(self):
        """Test idempotence and connectivity after random unions."""
        rng = random.Random(11)
        nodes = [f"n{i}" for i in range(40)]
        uf = UnionFind(nodes)
        pairs = [(rng.choice(nodes), rng.choice(nodes)) for _ in range(30)]
        for x, y in pairs:
            uf.union(x, y)

        # reference connectivity via plain graph search
        neighbours = {n: set() for n in nodes}
        for x, y in pairs:
            neighbours[x].add(y)
            neighbours[y].add(x)

        def reachable(start):
            seen, stack = {start}, [start]
            while stack:
                for nxt in neighbours[stack.pop()]:
                    if nxt not in seen:
                        seen.add(nxt)
                        stack.append(nxt)
            return seen

        for x in nodes:
            assert uf.find(x) == uf.find(uf.find(x))
        for x, y in itertools.combinations(nodes, 2):
            assert uf.connected(x, y) == (y in reachable(x))


def test_group_all_two_components():
    graph = DependencyGraph({"A": ["B"], "X": ["Y"]}, {})
    groups = group_all(graph)

    assert set(groups) == {"A", "B", "X", "Y"}
    assert groups["A"] == groups["B"]
    assert groups["X"] == groups["Y"]
    assert groups["A"] != groups["X"]


def test_group_all_ignores_direction():
    graph = DependencyGraph({"web": ["db"], "worker": ["db"], "cron": []}, {})
    groups = group_all(graph)

    assert groups["web"] == groups["worker"] == groups["db"]
    assert groups["cron"] == "cron"


def test_group_all_is_deterministic():
    adjacency = {"b": ["a"], "c": ["b"], "z": ["y"]}
    first = group_all(DependencyGraph(adjacency, {}))
    second = group_all(DependencyGraph(dict(reversed(list(adjacency.items()))), {}))
    assert first == second
