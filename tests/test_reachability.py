"""Tests for ReachabilityIndex: is_ancestor, ancestors_of, commits_between."""

from __future__ import annotations

import pytest

from refgraph.exceptions import ObjectMissingError
from refgraph.operations.reachability import ReachabilityIndex, is_ancestor

from tests.conftest import build_graph, linear_graph


# ---------------------------------------------------------------------------
# is_ancestor
# ---------------------------------------------------------------------------


class TestIsAncestor:
    def test_commit_is_its_own_ancestor(self, abc_graph):
        assert is_ancestor(abc_graph, "B", "B") is True

    def test_parent_is_ancestor(self, abc_graph):
        assert is_ancestor(abc_graph, "A", "C") is True

    def test_descendant_is_not_ancestor(self, abc_graph):
        assert is_ancestor(abc_graph, "C", "A") is False

    def test_through_second_merge_parent(self, merge_graph):
        assert is_ancestor(merge_graph, "Y", "T") is True

    def test_sibling_lines_unrelated(self, merge_graph):
        assert is_ancestor(merge_graph, "X", "Y") is False
        assert is_ancestor(merge_graph, "Y", "X") is False

    def test_disconnected_roots(self):
        graph = build_graph({"A": [], "B": []})
        assert is_ancestor(graph, "A", "B") is False

    def test_stops_walking_once_found(self):
        graph, ids = linear_graph(50)
        expanded: list[str] = []
        original = graph.parents_of

        def counting(commit_id):
            expanded.append(commit_id)
            return original(commit_id)

        graph.parents_of = counting  # type: ignore[method-assign]
        assert is_ancestor(graph, ids[47], ids[49]) is True
        assert expanded == [ids[49], ids[48]]

    def test_missing_tip_raises(self, abc_graph):
        with pytest.raises(ObjectMissingError):
            is_ancestor(abc_graph, "A", "nope")

    def test_index_matches_module_function(self, merge_graph):
        index = ReachabilityIndex(merge_graph)
        assert index.source is merge_graph
        for a in "RXYMT":
            for b in "RXYMT":
                assert index.is_ancestor(a, b) == is_ancestor(merge_graph, a, b)


# ---------------------------------------------------------------------------
# ancestors_of
# ---------------------------------------------------------------------------


class TestAncestorsOf:
    def test_includes_self(self, abc_graph):
        assert ReachabilityIndex(abc_graph).ancestors_of("A") == frozenset({"A"})

    def test_merge_ancestors(self, merge_graph):
        assert ReachabilityIndex(merge_graph).ancestors_of("M") == frozenset("MXYR")


# ---------------------------------------------------------------------------
# commits_between
# ---------------------------------------------------------------------------


class TestCommitsBetween:
    def test_linear_range_includes_endpoints(self):
        graph, ids = linear_graph(6)
        result = ReachabilityIndex(graph).commits_between(ids[1], ids[4])
        assert result == frozenset(ids[1:5])

    def test_same_commit(self, abc_graph):
        assert ReachabilityIndex(abc_graph).commits_between("B", "B") == frozenset({"B"})

    def test_not_an_ancestor_is_empty(self, abc_graph):
        assert ReachabilityIndex(abc_graph).commits_between("C", "A") == frozenset()

    def test_both_sides_of_a_diamond(self, merge_graph):
        result = ReachabilityIndex(merge_graph).commits_between("R", "T")
        assert result == frozenset("RXYMT")

    def test_excludes_side_branches_not_leading_to_ancestor(self):
        # S is reachable from M but does not lead down to X.
        graph = build_graph({
            "R": [],
            "X": ["R"],
            "S": ["R"],
            "M": ["X", "S"],
        })
        result = ReachabilityIndex(graph).commits_between("X", "M")
        assert result == frozenset({"X", "M"})

    def test_does_not_walk_below_ancestor(self):
        graph, ids = linear_graph(5)
        expanded: list[str] = []
        original = graph.parents_of

        def counting(commit_id):
            expanded.append(commit_id)
            return original(commit_id)

        graph.parents_of = counting  # type: ignore[method-assign]
        ReachabilityIndex(graph).commits_between(ids[3], ids[4])
        assert ids[3] not in expanded and ids[0] not in expanded
