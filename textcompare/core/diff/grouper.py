"""
Block grouping and change pairing.

Collapses a flat edit script into typed blocks, then walks the blocks with
running left/right indices to classify every line and to pair a delete
block with an immediately following insert block.

Pairing is positional: the i-th deleted line pairs with the i-th inserted
line up to the shorter block's length. This is a display heuristic, not a
line-level edit distance alignment; unrelated lines are paired when the
blocks happen to be adjacent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from textcompare.core.models import (
    Block,
    ChangePair,
    DiffInvariantError,
    DiffStats,
    EditOp,
    EditTag,
    LineClass,
)


@dataclass
class GroupedDiff:
    """Classification of both sides derived from the collapsed blocks."""
    blocks: list[Block]
    left_classes: list[LineClass] = field(default_factory=list)
    right_classes: list[LineClass] = field(default_factory=list)
    pairs: list[ChangePair] = field(default_factory=list)
    stats: DiffStats = field(default_factory=DiffStats)

    @property
    def left_index(self) -> int:
        """Number of left lines consumed."""
        return len(self.left_classes)

    @property
    def right_index(self) -> int:
        """Number of right lines consumed."""
        return len(self.right_classes)


def collapse_ops(script: Iterable[EditOp]) -> list[Block]:
    """Merge consecutive operations with the same tag into blocks."""
    blocks: list[Block] = []
    current_tag = None
    current_lines: list[str] = []

    for op in script:
        if op.tag is current_tag:
            current_lines.append(op.line)
            continue
        if current_tag is not None:
            blocks.append(Block(current_tag, tuple(current_lines)))
        current_tag = op.tag
        current_lines = [op.line]

    if current_tag is not None:
        blocks.append(Block(current_tag, tuple(current_lines)))

    return blocks


def classify_blocks(blocks: list[Block]) -> GroupedDiff:
    """
    Classify every line of both sides and form change pairs.

    Args:
        blocks: Collapsed blocks, in script order

    Returns:
        GroupedDiff with one class per line on each side
    """
    left: list[LineClass] = []
    right: list[LineClass] = []
    pairs: list[ChangePair] = []
    added = removed = modified = 0

    i = 0
    while i < len(blocks):
        block = blocks[i]

        if block.tag is EditTag.EQUAL:
            left.extend([LineClass.UNCHANGED] * len(block))
            right.extend([LineClass.UNCHANGED] * len(block))
            i += 1
            continue

        following = blocks[i + 1] if i + 1 < len(blocks) else None

        if block.tag is EditTag.DELETE and following is not None and following.tag is EditTag.INSERT:
            left_start, right_start = len(left), len(right)
            pair_count = min(len(block), len(following))

            for p in range(pair_count):
                pairs.append(ChangePair(
                    left_index=left_start + p,
                    right_index=right_start + p,
                    left_line=block.lines[p],
                    right_line=following.lines[p],
                ))
            modified += pair_count
            removed += len(block) - pair_count
            added += len(following) - pair_count

            left.extend([LineClass.MODIFIED] * pair_count)
            left.extend([LineClass.REMOVED] * (len(block) - pair_count))
            right.extend([LineClass.MODIFIED] * pair_count)
            right.extend([LineClass.ADDED] * (len(following) - pair_count))

            # The insert block was absorbed by the pairing
            i += 2
            continue

        if block.tag is EditTag.DELETE:
            left.extend([LineClass.REMOVED] * len(block))
            removed += len(block)
        else:
            right.extend([LineClass.ADDED] * len(block))
            added += len(block)
        i += 1

    return GroupedDiff(
        blocks=blocks,
        left_classes=left,
        right_classes=right,
        pairs=pairs,
        stats=DiffStats(added=added, removed=removed, modified=modified),
    )


def group(script: Iterable[EditOp]) -> tuple[list[Block], DiffStats]:
    """Collapse a script into blocks and compute its statistics."""
    grouped = classify_blocks(collapse_ops(script))
    return grouped.blocks, grouped.stats


def check_coverage(grouped: GroupedDiff, left_count: int, right_count: int) -> None:
    """Raise DiffInvariantError unless both indices reached the sequence lengths."""
    if grouped.left_index != left_count or grouped.right_index != right_count:
        raise DiffInvariantError(
            f"Grouping covered {grouped.left_index}/{left_count} left and "
            f"{grouped.right_index}/{right_count} right lines"
        )
