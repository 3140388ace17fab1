"""
Plain-text presentation of comparison results.

Used by the command line front end. Renderers with richer output should
read the annotations of ComparisonResult directly.
"""

from __future__ import annotations

from typing import Iterator, Optional

from textcompare.core.models import ComparisonResult, LineAnnotation, LineClass, Side


DELETED_OPEN, DELETED_CLOSE = "[-", "-]"
INSERTED_OPEN, INSERTED_CLOSE = "{+", "+}"

ANSI_COLORS = {
    LineClass.REMOVED: '\033[31m',    # Red
    LineClass.ADDED: '\033[32m',      # Green
    LineClass.MODIFIED: '\033[33m',   # Yellow
}
ANSI_RESET = '\033[0m'


def _highlight(line: str, annotation: LineAnnotation, side: Side) -> str:
    """Wrap the differing middle of a modified line in markers."""
    span = annotation.span
    if annotation.line_class is not LineClass.MODIFIED or span is None:
        return line

    if side is Side.LEFT:
        prefix, middle, suffix = span.split_left(line)
        opening, closing = DELETED_OPEN, DELETED_CLOSE
    else:
        prefix, middle, suffix = span.split_right(line)
        opening, closing = INSERTED_OPEN, INSERTED_CLOSE

    if not middle:
        return line
    return f"{prefix}{opening}{middle}{closing}{suffix}"


class SideBySideFormatter:
    """Format a result as two columns with a change separator."""

    SEPARATORS = {
        (LineClass.UNCHANGED, LineClass.UNCHANGED): "   ",
        (None, LineClass.ADDED): " > ",
        (LineClass.REMOVED, None): " < ",
    }

    def __init__(self, width: int = 80, tab_size: int = 4, color: bool = False):
        self.width = width
        self.tab_size = tab_size
        self.color = color

    def format(self, result: ComparisonResult) -> Iterator[tuple[str, str, str]]:
        """
        Format a result for side-by-side display.

        Yields tuples of (left_column, separator, right_column).
        """
        for left_index, right_index in self._rows(result):
            left_class = result.left[left_index].line_class if left_index is not None else None
            right_class = result.right[right_index].line_class if right_index is not None else None

            left = self._format_cell(result, Side.LEFT, left_index)
            right = self._format_cell(result, Side.RIGHT, right_index)
            sep = self.SEPARATORS.get((left_class, right_class), " | ")

            yield (left, sep, right)

    def render(self, result: ComparisonResult) -> Iterator[str]:
        """Yield complete output lines."""
        column = max(self.width // 2 - 2, 10)
        for left, sep, right in self.format(result):
            yield f"{left:<{column}}{sep}{right}".rstrip()

    def _rows(self, result: ComparisonResult) -> Iterator[tuple[Optional[int], Optional[int]]]:
        """Align the two sides into display rows."""
        left_count = len(result.left_lines)
        right_count = len(result.right_lines)
        i = j = 0

        while i < left_count or j < right_count:
            left_class = result.left[i].line_class if i < left_count else None
            right_class = result.right[j].line_class if j < right_count else None

            if left_class is LineClass.REMOVED:
                yield i, None
                i += 1
            elif right_class is LineClass.ADDED:
                yield None, j
                j += 1
            else:
                yield (i if i < left_count else None), (j if j < right_count else None)
                i += 1
                j += 1

    def _format_cell(self, result: ComparisonResult, side: Side, index: Optional[int]) -> str:
        """Format one side of a row with its line number."""
        if index is None:
            return ""

        lines = result.left_lines if side is Side.LEFT else result.right_lines
        content = lines[index].replace('\t', ' ' * self.tab_size)

        prefix = f"{index + 1:4d}: "
        max_content = max(self.width // 2 - 2 - len(prefix), 4)
        if len(content) > max_content:
            content = content[:max_content - 3] + "..."

        text = prefix + content
        line_class = result.annotation(side, index).line_class
        if self.color and line_class in ANSI_COLORS:
            return f"{ANSI_COLORS[line_class]}{text}{ANSI_RESET}"
        return text


class InlineFormatter:
    """Format a result as a single annotated listing with change markers."""

    def render(self, result: ComparisonResult) -> Iterator[str]:
        """Yield one output line per displayed line."""
        left_count = len(result.left_lines)
        right_count = len(result.right_lines)
        i = j = 0

        while i < left_count or j < right_count:
            left = result.annotation(Side.LEFT, i) if i < left_count else None
            right = result.annotation(Side.RIGHT, j) if j < right_count else None

            if left is not None and left.line_class is LineClass.REMOVED:
                yield f"- {result.left_lines[i]}"
                i += 1
            elif right is not None and right.line_class is LineClass.ADDED:
                yield f"+ {result.right_lines[j]}"
                j += 1
            elif left is not None and left.line_class is LineClass.MODIFIED:
                yield f"! {_highlight(result.left_lines[i], left, Side.LEFT)}"
                yield f"! {_highlight(result.right_lines[j], right, Side.RIGHT)}"
                i += 1
                j += 1
            else:
                yield f"  {result.left_lines[i]}"
                i += 1
                j += 1


def format_stats(result: ComparisonResult) -> str:
    """One-line summary of the statistics."""
    stats = result.stats
    return f"added: {stats.added}  removed: {stats.removed}  modified: {stats.modified}"
