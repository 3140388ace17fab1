from __future__ import annotations

import random

import pytest

from helpers import rebuild, tags, textbook_lcs
from textcompare.core.diff.aligner import DiffAlgorithm, align, lcs_length
from textcompare.core.models import EditTag


ALGORITHMS = [DiffAlgorithm.LCS, DiffAlgorithm.MYERS]

CASES = [
    ([], []),
    ([], ["a"]),
    (["a"], []),
    (["a", "b", "c"], ["a", "b", "c"]),
    (["a", "b"], ["a", "x", "b"]),
    (["a", "b", "c"], ["x", "y", "z"]),
    (["a", "a"], ["a"]),
    (["a", "b", "c", "a", "b", "b", "a"], ["c", "b", "a", "b", "a", "c"]),
    (["", "", "x"], ["x", "", ""]),
    (["  indented", "Case"], ["indented", "case"]),
]


def _random_pairs(count: int, seed: int = 7):
    rng = random.Random(seed)
    for _ in range(count):
        a = [rng.choice("abcd") for _ in range(rng.randint(0, 12))]
        b = [rng.choice("abcd") for _ in range(rng.randint(0, 12))]
        yield a, b


@pytest.mark.parametrize("algorithm", ALGORITHMS)
@pytest.mark.parametrize("a,b", CASES)
def test_script_rebuilds_both_sequences(algorithm, a, b):
    left, right = rebuild(align(a, b, algorithm))
    assert left == a
    assert right == b


@pytest.mark.parametrize("algorithm", ALGORITHMS)
def test_edit_count_is_minimal_on_random_inputs(algorithm):
    for a, b in _random_pairs(150):
        script = align(a, b, algorithm)
        edits = sum(1 for op in script if op.tag is not EditTag.EQUAL)
        assert edits == len(a) + len(b) - 2 * textbook_lcs(a, b)
        assert rebuild(script) == (a, b)


def test_both_strategies_agree_on_edit_count():
    for a, b in _random_pairs(100, seed=11):
        lcs_edits = sum(1 for op in align(a, b, DiffAlgorithm.LCS) if op.tag is not EditTag.EQUAL)
        myers_edits = sum(1 for op in align(a, b, DiffAlgorithm.MYERS) if op.tag is not EditTag.EQUAL)
        assert lcs_edits == myers_edits


@pytest.mark.parametrize("algorithm", ALGORITHMS)
def test_identical_sequences_are_all_equal(algorithm):
    lines = ["one", "two", "two", ""]
    script = align(lines, lines, algorithm)
    assert [op.tag for op in script] == [EditTag.EQUAL] * len(lines)


@pytest.mark.parametrize("algorithm", ALGORITHMS)
def test_disjoint_sequences_have_no_equal_ops(algorithm):
    script = align(["a", "b", "c"], ["x", "y"], algorithm)
    assert sum(op.tag is EditTag.DELETE for op in script) == 3
    assert sum(op.tag is EditTag.INSERT for op in script) == 2
    assert not any(op.tag is EditTag.EQUAL for op in script)


@pytest.mark.parametrize("algorithm", ALGORITHMS)
def test_empty_inputs_give_empty_script(algorithm):
    assert align([], [], algorithm) == []


def test_lines_compare_exactly():
    script = align(["a "], ["a"])
    assert tags(script) == ["-a ", "+a"]


class TestLcsTieBreak:
    def test_delete_comes_before_insert(self):
        assert tags(align(["x"], ["y"])) == ["-x", "+y"]

    def test_disjoint_blocks_delete_everything_first(self):
        assert tags(align(["a", "b", "c"], ["x", "y", "z"])) == [
            "-a", "-b", "-c", "+x", "+y", "+z",
        ]

    def test_duplicate_line_matches_first_occurrence(self):
        assert tags(align(["a", "a"], ["a"])) == ["=a", "-a"]
        assert tags(align(["x"], ["x", "x"])) == ["=x", "+x"]

    def test_insert_between_equal_lines(self):
        assert tags(align(["a", "b"], ["a", "x", "b"])) == ["=a", "+x", "=b"]

    def test_swapped_lines_consume_left_first(self):
        assert tags(align(["p", "q"], ["q", "p"])) == ["-p", "=q", "+p"]

    def test_insert_taken_only_when_it_keeps_an_optimal_path(self):
        assert tags(align(["b"], ["a", "b"])) == ["+a", "=b"]


def test_lcs_length():
    assert lcs_length([], ["a"]) == 0
    assert lcs_length(["a", "b", "c"], ["a", "c"]) == 2
    assert lcs_length(["a", "a"], ["a"]) == 1


def test_algorithm_from_string():
    assert DiffAlgorithm.from_string("myers") is DiffAlgorithm.MYERS
    assert DiffAlgorithm.from_string("LCS") is DiffAlgorithm.LCS
    assert DiffAlgorithm.from_string("patience") is DiffAlgorithm.LCS


def test_compact_table_gives_the_same_script():
    for a, b in _random_pairs(150, seed=23):
        assert align(a, b, table_cell_limit=0) == align(a, b)


@pytest.mark.parametrize("a,b", CASES)
def test_compact_table_handles_edge_cases(a, b):
    assert align(a, b, table_cell_limit=0) == align(a, b)


def test_myers_on_long_disjoint_inputs():
    a = [f"left {i}" for i in range(300)]
    b = [f"right {i}" for i in range(250)]
    script = align(a, b, DiffAlgorithm.MYERS)
    assert rebuild(script) == (a, b)
    assert all(op.tag is not EditTag.EQUAL for op in script)
