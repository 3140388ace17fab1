"""
Intra-line refinement.

Trims the common prefix and the non-overlapping common suffix of two
lines, leaving the minimal differing middle on each side. Python strings
index by code point, so no extra decoding is needed.
"""

from __future__ import annotations

from typing import Optional

from textcompare.core.models import CharSpan


def refine(left: str, right: str) -> Optional[CharSpan]:
    """
    Compute the character span that differs between two lines.

    Returns None for equal lines.
    """
    if left == right:
        return None

    limit = min(len(left), len(right))
    start = 0
    while start < limit and left[start] == right[start]:
        start += 1

    end_left = len(left) - 1
    end_right = len(right) - 1
    while end_left >= start and end_right >= start and left[end_left] == right[end_right]:
        end_left -= 1
        end_right -= 1

    return CharSpan(
        prefix_length=start,
        left_middle=left[start:end_left + 1],
        right_middle=right[start:end_right + 1],
        suffix_length=len(left) - 1 - end_left,
    )
