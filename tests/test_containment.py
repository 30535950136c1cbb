"""Tests for FlagPropagationEngine: branch containment by flag propagation.

Covers:
- Basic containment on linear, merged and forked histories
- Tips on the target itself and tips sharing a commit
- Batching when there are more tips than flag bits
- The timestamp cut-off and strict mode under clock skew
"""

from __future__ import annotations

import pytest

from refgraph.exceptions import InvariantViolationError, ObjectMissingError
from refgraph.models.commit import CommitNode
from refgraph.operations.containment import FlagPropagationEngine, branches_containing
from refgraph.storage.memory import MemoryGraphSource

from tests.conftest import build_graph, linear_graph


@pytest.fixture
def forked_graph() -> MemoryGraphSource:
    """Two lines forked from B; `main` and `feature` heads.

    A <- B <- C <- D        (main at D)
          \\
           E <- F            (feature at F)
    """
    return build_graph({
        "A": [],
        "B": ["A"],
        "C": ["B"],
        "E": ["B"],
        "D": ["C"],
        "F": ["E"],
    })


# ---------------------------------------------------------------------------
# Basic containment
# ---------------------------------------------------------------------------


class TestBranchesContaining:
    def test_linear_history(self, abc_graph):
        assert branches_containing(abc_graph, "A", {"main": "C"}) == {"main"}

    def test_commit_after_tip_not_contained(self, abc_graph):
        assert branches_containing(abc_graph, "C", {"old": "B"}) == set()

    def test_branch_created_before_target(self, abc_graph):
        assert branches_containing(abc_graph, "B", {"main": "C", "feature": "A"}) == {"main"}

    def test_merge_parent_contained(self, merge_graph):
        assert branches_containing(merge_graph, "X", {"br": "M"}) == {"br"}

    def test_fork_point_in_both_branches(self, forked_graph):
        tips = {"main": "D", "feature": "F"}
        assert branches_containing(forked_graph, "B", tips) == {"main", "feature"}

    def test_commit_only_on_one_side(self, forked_graph):
        tips = {"main": "D", "feature": "F"}
        assert branches_containing(forked_graph, "C", tips) == {"main"}
        assert branches_containing(forked_graph, "E", tips) == {"feature"}

    def test_tip_equal_to_target(self, abc_graph):
        assert branches_containing(abc_graph, "B", {"here": "B", "later": "C"}) == {"here", "later"}

    def test_empty_tips(self, abc_graph):
        assert branches_containing(abc_graph, "A", {}) == set()

    def test_merged_side_branch_contained(self, merge_graph):
        tips = {"main": "T", "side": "Y"}
        assert branches_containing(merge_graph, "X", tips) == {"main"}
        assert branches_containing(merge_graph, "Y", tips) == {"main", "side"}

    def test_tips_sharing_a_commit(self, abc_graph):
        tips = {"a": "C", "b": "C", "c": "A"}
        assert branches_containing(abc_graph, "B", tips) == {"a", "b"}

    def test_unrelated_root(self):
        graph = build_graph({"A": [], "B": ["A"], "Z": []})
        assert branches_containing(graph, "Z", {"main": "B"}) == set()

    def test_engine_rejects_zero_flag_width(self, abc_graph):
        with pytest.raises(ValueError):
            FlagPropagationEngine(abc_graph, flag_width=0)

    def test_missing_target_raises(self, abc_graph):
        with pytest.raises(ObjectMissingError):
            branches_containing(abc_graph, "nope", {"main": "C"})

    def test_self_parent_detected(self):
        graph = MemoryGraphSource()
        graph.add_commit("A", timestamp=1)
        graph.add_node(CommitNode.model_construct(commit_id="L", parents=("L",), timestamp=5))
        with pytest.raises(InvariantViolationError):
            branches_containing(graph, "A", {"loop": "L"})


# ---------------------------------------------------------------------------
# Traversal bounds
# ---------------------------------------------------------------------------


class TestTraversalBounds:
    def test_does_not_expand_below_target(self):
        graph, ids = linear_graph(20)
        expanded: list[str] = []
        original = graph.parents_of

        def counting(commit_id):
            expanded.append(commit_id)
            return original(commit_id)

        graph.parents_of = counting  # type: ignore[method-assign]
        assert branches_containing(graph, ids[15], {"main": ids[19]}) == {"main"}
        assert set(expanded) == set(ids[16:20])

    def test_tip_older_than_target_is_never_expanded(self):
        graph, ids = linear_graph(10)
        expanded: list[str] = []
        original = graph.parents_of

        def counting(commit_id):
            expanded.append(commit_id)
            return original(commit_id)

        graph.parents_of = counting  # type: ignore[method-assign]
        assert branches_containing(graph, ids[8], {"old": ids[2]}) == set()
        assert expanded == []

    def test_equal_timestamps_still_found(self):
        graph = MemoryGraphSource()
        graph.add_commit("A", timestamp=5)
        graph.add_commit("B", ["A"], timestamp=5)
        graph.add_commit("C", ["B"], timestamp=5)
        assert branches_containing(graph, "A", {"main": "C"}) == {"main"}


# ---------------------------------------------------------------------------
# Batching
# ---------------------------------------------------------------------------


class TestBatching:
    @pytest.mark.parametrize("flag_width", [1, 2, 3, 64])
    def test_results_independent_of_flag_width(self, forked_graph, flag_width):
        tips = {"main": "D", "feature": "F", "old": "A", "mid": "C", "fork": "B"}
        result = branches_containing(forked_graph, "B", tips, flag_width=flag_width)
        assert result == {"main", "feature", "mid", "fork"}

    def test_many_tips(self):
        graph, ids = linear_graph(100)
        tips = {f"b{i:03d}": ids[i] for i in range(100)}
        result = branches_containing(graph, ids[40], tips, flag_width=8)
        assert result == {f"b{i:03d}" for i in range(40, 100)}


# ---------------------------------------------------------------------------
# Clock skew
# ---------------------------------------------------------------------------


class TestStrictMode:
    @pytest.fixture
    def skewed_graph(self) -> MemoryGraphSource:
        # Child B is stamped before its parent A.
        graph = MemoryGraphSource()
        graph.add_commit("A", timestamp=100)
        graph.add_commit("B", ["A"], timestamp=50)
        graph.add_commit("C", ["B"], timestamp=200)
        return graph

    def test_strict_mode_handles_skew(self, skewed_graph):
        assert branches_containing(skewed_graph, "A", {"main": "C"}, strict=True) == {"main"}

    def test_fast_mode_trusts_timestamps(self, skewed_graph):
        # The skewed commit falls below the cut-off, so the walk stops early.
        assert branches_containing(skewed_graph, "A", {"main": "C"}) == set()

    def test_strict_matches_fast_on_sane_history(self, forked_graph):
        tips = {"main": "D", "feature": "F"}
        for target in "ABCDEF":
            assert branches_containing(forked_graph, target, tips, strict=True) == (
                branches_containing(forked_graph, target, tips)
            )
