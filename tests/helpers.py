"""Shared helpers for the test suite."""

from __future__ import annotations

from textcompare.core.models import EditOp, EditTag


def textbook_lcs(a, b) -> int:
    """Reference LCS length via the classic prefix table."""
    dp = [[0] * (len(b) + 1) for _ in range(len(a) + 1)]
    for i in range(1, len(a) + 1):
        for j in range(1, len(b) + 1):
            if a[i - 1] == b[j - 1]:
                dp[i][j] = dp[i - 1][j - 1] + 1
            else:
                dp[i][j] = max(dp[i - 1][j], dp[i][j - 1])
    return dp[len(a)][len(b)]


def rebuild(script: list[EditOp]) -> tuple[list[str], list[str]]:
    """Rebuild both sequences from an edit script."""
    left = [op.line for op in script if op.tag in (EditTag.EQUAL, EditTag.DELETE)]
    right = [op.line for op in script if op.tag in (EditTag.EQUAL, EditTag.INSERT)]
    return left, right


def tags(script: list[EditOp]) -> list[str]:
    """Compact tag listing, e.g. ['=a', '-b', '+c']."""
    symbols = {EditTag.EQUAL: '=', EditTag.DELETE: '-', EditTag.INSERT: '+'}
    return [symbols[op.tag] + op.line for op in script]
