"""Property-based tests over randomly generated commit DAGs."""

from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from refgraph.operations.containment import branches_containing
from refgraph.operations.proximity import Direction, nearest_tag
from refgraph.operations.reachability import ReachabilityIndex, is_ancestor

from tests.strategies import commit_dags, dag_with_tips


# ---------------------------------------------------------------------------
# Ancestry relation
# ---------------------------------------------------------------------------


class TestAncestryProperties:
    @given(graph=commit_dags(), data=st.data())
    @settings(max_examples=50)
    def test_reflexive(self, graph, data):
        commit = data.draw(st.sampled_from([f"c{i}" for i in range(len(graph))]))
        assert is_ancestor(graph, commit, commit)

    @given(graph=commit_dags(min_size=2), data=st.data())
    @settings(max_examples=50)
    def test_antisymmetric(self, graph, data):
        ids = [f"c{i}" for i in range(len(graph))]
        a = data.draw(st.sampled_from(ids))
        b = data.draw(st.sampled_from(ids))
        if a != b:
            assert not (is_ancestor(graph, a, b) and is_ancestor(graph, b, a))

    @given(graph=commit_dags(min_size=3), data=st.data())
    @settings(max_examples=50)
    def test_transitive(self, graph, data):
        ids = [f"c{i}" for i in range(len(graph))]
        a, b, c = (data.draw(st.sampled_from(ids)) for _ in range(3))
        if is_ancestor(graph, a, b) and is_ancestor(graph, b, c):
            assert is_ancestor(graph, a, c)

    @given(graph=commit_dags(), data=st.data())
    @settings(max_examples=50)
    def test_commits_between_lie_on_a_path(self, graph, data):
        ids = [f"c{i}" for i in range(len(graph))]
        a = data.draw(st.sampled_from(ids))
        d = data.draw(st.sampled_from(ids))
        index = ReachabilityIndex(graph)
        between = index.commits_between(a, d)
        if not is_ancestor(graph, a, d):
            assert between == frozenset()
        for commit in between:
            assert is_ancestor(graph, a, commit)
            assert is_ancestor(graph, commit, d)


# ---------------------------------------------------------------------------
# Containment
# ---------------------------------------------------------------------------


class TestContainmentProperties:
    @given(case=dag_with_tips())
    @settings(max_examples=50)
    def test_matches_per_tip_ancestry(self, case):
        graph, _ids, tips, target = case
        expected = {label for label, tip in tips.items() if is_ancestor(graph, target, tip)}
        assert branches_containing(graph, target, tips) == expected

    @given(case=dag_with_tips(), flag_width=st.integers(min_value=1, max_value=5))
    @settings(max_examples=50)
    def test_batching_does_not_change_result(self, case, flag_width):
        graph, _ids, tips, target = case
        assert branches_containing(graph, target, tips, flag_width=flag_width) == (
            branches_containing(graph, target, tips)
        )

    @given(case=dag_with_tips())
    @settings(max_examples=50)
    def test_strict_agrees_on_monotonic_timestamps(self, case):
        graph, _ids, tips, target = case
        assert branches_containing(graph, target, tips, strict=True) == (
            branches_containing(graph, target, tips)
        )

    @given(case=dag_with_tips())
    @settings(max_examples=50)
    def test_idempotent(self, case):
        graph, _ids, tips, target = case
        first = branches_containing(graph, target, tips)
        assert branches_containing(graph, target, tips) == first


# ---------------------------------------------------------------------------
# Nearest tag
# ---------------------------------------------------------------------------


class TestNearestTagProperties:
    @given(case=dag_with_tips(), direction=st.sampled_from(list(Direction)))
    @settings(max_examples=50)
    def test_result_qualifies_and_is_maximal(self, case, direction):
        graph, _ids, tips, target = case
        label = nearest_tag(graph, target, direction, tips)

        def qualifies(commit: str) -> bool:
            if commit == target:
                return False
            if direction is Direction.PRECEDING:
                return is_ancestor(graph, commit, target)
            return is_ancestor(graph, target, commit)

        qualifying = {commit for commit in tips.values() if qualifies(commit)}
        if label is None:
            assert not qualifying
            return

        best = tips[label]
        assert best in qualifying
        for other in qualifying - {best}:
            # No qualifying tag lies strictly between best and the target.
            if direction is Direction.PRECEDING:
                assert not is_ancestor(graph, best, other)
            else:
                assert not is_ancestor(graph, other, best)

    @given(case=dag_with_tips(), direction=st.sampled_from(list(Direction)))
    @settings(max_examples=50)
    def test_deterministic(self, case, direction):
        graph, _ids, tips, target = case
        reordered = dict(reversed(list(tips.items())))
        assert nearest_tag(graph, target, direction, tips) == nearest_tag(
            graph, target, direction, reordered
        )
