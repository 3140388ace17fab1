from __future__ import annotations

import random

import pytest

from textcompare.core.diff.refiner import refine
from textcompare.core.models import CharSpan


def assert_span_is_tight(left: str, right: str, span: CharSpan) -> None:
    prefix, left_middle, suffix = span.split_left(left)
    assert prefix + left_middle + suffix == left
    prefix, right_middle, suffix = span.split_right(right)
    assert prefix + right_middle + suffix == right

    # Prefix cannot grow
    start = span.prefix_length
    assert start == min(len(left), len(right)) or left[start] != right[start]

    # Suffix cannot grow without overlapping the prefix
    end_left = len(left) - span.suffix_length - 1
    end_right = len(right) - span.suffix_length - 1
    assert (
        end_left < start
        or end_right < start
        or left[end_left] != right[end_right]
    )


def test_equal_lines_have_no_span():
    assert refine("same", "same") is None
    assert refine("", "") is None


def test_single_character_change_at_end():
    span = refine("foo bar", "foo baz")
    assert span == CharSpan(prefix_length=6, left_middle="r", right_middle="z", suffix_length=0)
    assert span.split_left("foo bar") == ("foo ba", "r", "")


def test_insertion_inside_line_leaves_left_middle_empty():
    span = refine("abc", "abXc")
    assert span == CharSpan(2, "", "X", 1)


def test_deletion_inside_line_leaves_right_middle_empty():
    span = refine("- Correct typos in settings panel", "- Correct typo in settings panel")
    assert span.left_middle == "s"
    assert span.right_middle == ""
    assert span.prefix_length == len("- Correct typo")
    assert span.suffix_length == len(" in settings panel")


def test_suffix_does_not_overlap_prefix():
    assert refine("aa", "aaa") == CharSpan(2, "", "a", 0)
    assert refine("abcabc", "abc") == CharSpan(3, "abc", "", 0)


def test_empty_against_text():
    assert refine("", "x") == CharSpan(0, "", "x", 0)
    assert refine("x", "") == CharSpan(0, "x", "", 0)


def test_completely_different_lines():
    assert refine("abc", "xyz") == CharSpan(0, "abc", "xyz", 0)


def test_spans_count_code_points():
    assert refine("café", "cafe") == CharSpan(3, "é", "e", 0)
    span = refine("a\U0001F600b", "a\U0001F603b")
    assert span == CharSpan(1, "\U0001F600", "\U0001F603", 1)


@pytest.mark.parametrize("seed", [1, 2, 3])
def test_random_pairs_produce_tight_spans(seed):
    rng = random.Random(seed)
    for _ in range(200):
        left = "".join(rng.choice("ab ") for _ in range(rng.randint(0, 8)))
        right = "".join(rng.choice("ab ") for _ in range(rng.randint(0, 8)))
        span = refine(left, right)
        if left == right:
            assert span is None
        else:
            assert_span_is_tight(left, right, span)
