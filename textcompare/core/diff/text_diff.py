"""
Text diff engine.

Runs the full comparison pipeline on two pre-split line sequences:
- Sequence alignment (minimal edit script)
- Block grouping and positional change pairing
- Intra-line (character) refinement of every change pair
- Assembly of per-line annotations for both sides

Input lines are expected to be split and line-ending normalized already;
the engine performs no normalization of its own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from textcompare.core.diff.aligner import DiffAlgorithm, align
from textcompare.core.diff.grouper import GroupedDiff, check_coverage, classify_blocks, collapse_ops
from textcompare.core.diff.refiner import refine
from textcompare.core.models import (
    ChangePair,
    ComparisonResult,
    LineAnnotation,
    LineClass,
)


logger = logging.getLogger(__name__)


@dataclass
class TextCompareOptions:
    """Options for text comparison."""
    algorithm: DiffAlgorithm = DiffAlgorithm.LCS
    compute_intraline: bool = True
    table_cell_limit: int = 4_000_000  # Max n*m cells for the integer LCS table


class TextDiffEngine:
    """
    Engine for comparing two sequences of lines.

    Each call to ``compare`` is independent; no state is kept between runs.
    """

    def __init__(self, options: Optional[TextCompareOptions] = None):
        self.options = options or TextCompareOptions()

    def compare(
        self,
        left_lines: Sequence[str],
        right_lines: Sequence[str]
    ) -> ComparisonResult:
        """
        Compare two sequences of lines.

        Args:
            left_lines: Lines from the left/original text
            right_lines: Lines from the right/modified text

        Returns:
            ComparisonResult with annotations for every line on both sides
        """
        left = tuple(left_lines)
        right = tuple(right_lines)

        script = align(left, right, self.options.algorithm, self.options.table_cell_limit)
        grouped = classify_blocks(collapse_ops(script))
        check_coverage(grouped, len(left), len(right))

        pairs = self._refine_pairs(grouped.pairs)
        left_annotations, right_annotations = self._build_annotations(grouped, pairs)

        logger.debug("Compared %d/%d lines: %s", len(left), len(right), grouped.stats)

        return ComparisonResult(
            left_lines=left,
            right_lines=right,
            left=left_annotations,
            right=right_annotations,
            pairs=tuple(pairs),
            stats=grouped.stats,
        )

    def _refine_pairs(self, pairs: list[ChangePair]) -> list[ChangePair]:
        """Attach a character span to every change pair."""
        if not self.options.compute_intraline:
            return list(pairs)

        return [
            ChangePair(
                left_index=pair.left_index,
                right_index=pair.right_index,
                left_line=pair.left_line,
                right_line=pair.right_line,
                span=refine(pair.left_line, pair.right_line),
            )
            for pair in pairs
        ]

    def _build_annotations(
        self,
        grouped: GroupedDiff,
        pairs: list[ChangePair]
    ) -> tuple[dict[int, LineAnnotation], dict[int, LineAnnotation]]:
        """Build index -> annotation maps for both sides."""
        # Plain annotations are shared; they are immutable
        shared = {line_class: LineAnnotation(line_class) for line_class in LineClass}

        left = {i: shared[c] for i, c in enumerate(grouped.left_classes)}
        right = {i: shared[c] for i, c in enumerate(grouped.right_classes)}

        for pair in pairs:
            if pair.span is None:
                continue
            left[pair.left_index] = LineAnnotation(LineClass.MODIFIED, pair.span)
            right[pair.right_index] = LineAnnotation(LineClass.MODIFIED, pair.span)

        return left, right


def compute_diff(
    lines_a: Sequence[str],
    lines_b: Sequence[str],
    options: Optional[TextCompareOptions] = None
) -> ComparisonResult:
    """Compare two line sequences with a fresh engine."""
    return TextDiffEngine(options).compare(lines_a, lines_b)
