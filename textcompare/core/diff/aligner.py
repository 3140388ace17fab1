"""
Sequence aligner.

Computes a minimal edit script between two sequences of lines. Lines are
opaque tokens compared only by equality; whitespace and case are significant.

Two strategies are available:
- LCS: dynamic-programming table over suffixes, O(n*m) time. Matches
  whenever the current lines are equal and otherwise deletes before it
  inserts. Above ``table_cell_limit`` cells the table of integers is
  replaced by one byte per cell holding the step to take; the script is
  the same.
- MYERS: greedy shortest-edit-script search over edit-graph diagonals,
  O((n+m)*d) time. Only used when requested.

Both return scripts with the same (minimal) number of deletes and inserts.
They may order them differently when several minimal scripts exist.
"""

from __future__ import annotations

import logging
from array import array
from enum import Enum, auto
from typing import Optional, Sequence

from textcompare.core.models import EditOp, EditTag


logger = logging.getLogger(__name__)


class DiffAlgorithm(Enum):
    """Available alignment strategies."""
    LCS = auto()        # Suffix LCS table, delete-before-insert tie-break
    MYERS = auto()      # Myers O(ND) search, follows the furthest-reaching path

    @classmethod
    def from_string(cls, value: str) -> 'DiffAlgorithm':
        """Create from a case-insensitive name, defaulting to LCS."""
        try:
            return cls[value.upper()]
        except (KeyError, AttributeError):
            return cls.LCS


def align(
    a: Sequence[str],
    b: Sequence[str],
    algorithm: DiffAlgorithm = DiffAlgorithm.LCS,
    table_cell_limit: Optional[int] = None
) -> list[EditOp]:
    """
    Compute a minimal edit script turning ``a`` into ``b``.

    Args:
        a: Left/original lines
        b: Right/modified lines
        algorithm: Alignment strategy
        table_cell_limit: Above this many cells the LCS strategy keeps
            one byte per cell instead of a table of integers

    Returns:
        Ordered EditOps; EQUAL+DELETE lines rebuild ``a`` and
        EQUAL+INSERT lines rebuild ``b``.
    """
    if algorithm == DiffAlgorithm.MYERS:
        return _align_myers(a, b)
    if table_cell_limit is not None and len(a) * len(b) > table_cell_limit:
        logger.debug(
            "Input of %dx%d lines exceeds table limit, using compact LCS steps",
            len(a), len(b)
        )
        return _align_lcs_compact(a, b)
    return _align_lcs(a, b)


def lcs_length(a: Sequence[str], b: Sequence[str]) -> int:
    """Length of the longest common subsequence of two line sequences."""
    if not a or not b:
        return 0
    return _suffix_lcs_table(a, b)[0][0]


# =============================================================================
# LCS table strategy
# =============================================================================

def _suffix_lcs_table(a: Sequence[str], b: Sequence[str]) -> list[list[int]]:
    """
    Build table[i][j] = LCS length of a[i:] and b[j:].

    Allocated fresh per call.
    """
    n, m = len(a), len(b)
    table = [[0] * (m + 1) for _ in range(n + 1)]

    for i in range(n - 1, -1, -1):
        row = table[i]
        below = table[i + 1]
        line = a[i]
        for j in range(m - 1, -1, -1):
            if line == b[j]:
                row[j] = below[j + 1] + 1
            else:
                down = below[j]
                right = row[j + 1]
                row[j] = down if down >= right else right

    return table


def _align_lcs(a: Sequence[str], b: Sequence[str]) -> list[EditOp]:
    """
    Walk the suffix table forward from (0, 0).

    Equal lines are always matched (a match is always on an optimal path),
    which extends the current run of equal lines as far as it goes. Otherwise
    a step in ``a`` is taken whenever it keeps the LCS length, so deletes come
    before inserts at every branch point.
    """
    n, m = len(a), len(b)
    ops: list[EditOp] = []

    if n and m:
        table = _suffix_lcs_table(a, b)
        i = j = 0
        while i < n and j < m:
            if a[i] == b[j]:
                ops.append(EditOp(EditTag.EQUAL, a[i]))
                i += 1
                j += 1
            elif table[i + 1][j] >= table[i][j + 1]:
                ops.append(EditOp(EditTag.DELETE, a[i]))
                i += 1
            else:
                ops.append(EditOp(EditTag.INSERT, b[j]))
                j += 1
    else:
        i = j = 0

    ops.extend(EditOp(EditTag.DELETE, line) for line in a[i:])
    ops.extend(EditOp(EditTag.INSERT, line) for line in b[j:])
    return ops


_STEP_INSERT, _STEP_DELETE, _STEP_EQUAL = 0, 1, 2


def _align_lcs_compact(a: Sequence[str], b: Sequence[str]) -> list[EditOp]:
    """
    Same walk as ``_align_lcs`` with one byte per cell.

    Only two rows of LCS lengths are alive at a time; the step each cell
    leads to is recorded while the rows are filled in.
    """
    n, m = len(a), len(b)
    steps = bytearray(n * m)
    below = [0] * (m + 1)

    for i in range(n - 1, -1, -1):
        row = [0] * (m + 1)
        line = a[i]
        base = i * m
        for j in range(m - 1, -1, -1):
            if line == b[j]:
                row[j] = below[j + 1] + 1
                steps[base + j] = _STEP_EQUAL
            elif below[j] >= row[j + 1]:
                row[j] = below[j]
                steps[base + j] = _STEP_DELETE
            else:
                row[j] = row[j + 1]
        below = row

    ops: list[EditOp] = []
    i = j = 0
    while i < n and j < m:
        step = steps[i * m + j]
        if step == _STEP_EQUAL:
            ops.append(EditOp(EditTag.EQUAL, a[i]))
            i += 1
            j += 1
        elif step == _STEP_DELETE:
            ops.append(EditOp(EditTag.DELETE, a[i]))
            i += 1
        else:
            ops.append(EditOp(EditTag.INSERT, b[j]))
            j += 1

    ops.extend(EditOp(EditTag.DELETE, line) for line in a[i:])
    ops.extend(EditOp(EditTag.INSERT, line) for line in b[j:])
    return ops


# =============================================================================
# Myers strategy
# =============================================================================

def _align_myers(a: Sequence[str], b: Sequence[str]) -> list[EditOp]:
    """Myers shortest edit script, reconstructed from the frontier history."""
    trace = _shortest_edit(a, b)
    logger.debug("Myers search finished with edit distance %d", len(trace) - 1)

    ops: list[EditOp] = []
    for prev_x, prev_y, x, y in _backtrack(trace, len(a), len(b)):
        if x == prev_x:
            ops.append(EditOp(EditTag.INSERT, b[prev_y]))
        elif y == prev_y:
            ops.append(EditOp(EditTag.DELETE, a[prev_x]))
        else:
            ops.append(EditOp(EditTag.EQUAL, a[prev_x]))

    ops.reverse()
    return ops


def _choose_down(from_left: int, from_right: int, k: int, d: int) -> bool:
    """True when diagonal k is best reached by a step in ``b`` (from k+1)."""
    return k == -d or (k != d and from_left < from_right)


def _shortest_edit(a: Sequence[str], b: Sequence[str]) -> list[array]:
    """
    Forward greedy search.

    Returns the frontier snapshots. Entry d holds the furthest x reached
    after d-1 edits on diagonals -(d+1), -(d-1), ..., d+1 (the only ones
    round d reads), so diagonal k sits at index (k + d + 1) // 2. The last
    entry's index is the edit distance.
    """
    n, m = len(a), len(b)
    max_d = n + m
    offset = max_d + 1
    v = [0] * (2 * max_d + 3)
    trace: list[array] = []

    for d in range(max_d + 1):
        trace.append(array('q', v[offset - d - 1:offset + d + 2:2]))

        for k in range(-d, d + 1, 2):
            if _choose_down(v[offset + k - 1], v[offset + k + 1], k, d):
                x = v[offset + k + 1]
            else:
                x = v[offset + k - 1] + 1

            y = x - k
            while x < n and y < m and a[x] == b[y]:
                x += 1
                y += 1

            v[offset + k] = x

            if x >= n and y >= m:
                return trace

    return trace


def _backtrack(trace: list[array], n: int, m: int):
    """Yield (prev_x, prev_y, x, y) moves from the end of the edit graph back to the start."""
    x, y = n, m

    for d in range(len(trace) - 1, -1, -1):
        frontier = trace[d]
        k = x - y

        from_left = frontier[(k + d) // 2]          # diagonal k - 1
        from_right = frontier[(k + d + 2) // 2]     # diagonal k + 1
        if _choose_down(from_left, from_right, k, d):
            prev_k, prev_x = k + 1, from_right
        else:
            prev_k, prev_x = k - 1, from_left
        prev_y = prev_x - prev_k

        while x > prev_x and y > prev_y:
            yield x - 1, y - 1, x, y
            x -= 1
            y -= 1

        if d > 0:
            yield prev_x, prev_y, x, y

        x, y = prev_x, prev_y
