"""
Diff module for text comparison.

Provides the comparison pipeline:
- Sequence alignment (minimal line edit script)
- Block grouping and change pairing
- Intra-line character refinement
"""

from textcompare.core.diff.aligner import (
    DiffAlgorithm,
    align,
    lcs_length,
)
from textcompare.core.diff.grouper import (
    GroupedDiff,
    classify_blocks,
    collapse_ops,
    group,
)
from textcompare.core.diff.refiner import refine
from textcompare.core.diff.text_diff import (
    TextCompareOptions,
    TextDiffEngine,
    compute_diff,
)

__all__ = [
    # Alignment
    'DiffAlgorithm',
    'align',
    'lcs_length',
    # Grouping
    'GroupedDiff',
    'classify_blocks',
    'collapse_ops',
    'group',
    # Refinement
    'refine',
    # Engine
    'TextCompareOptions',
    'TextDiffEngine',
    'compute_diff',
]
