"""
Core data models for the text comparison engine.

This module defines the value types produced by a comparison run:
- Edit script models (operations and collapsed blocks)
- Change pairing models
- Character span models
- Per-line annotation and statistics models

All models are:
- UI-agnostic (the renderer owns presentation)
- Immutable once built (a fresh result is produced per comparison)
- Serializable through ``to_dict`` for JSON output
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional


# =============================================================================
# Enumerations
# =============================================================================

class EditTag(Enum):
    """Tag of a single edit script operation."""
    EQUAL = "equal"     # Line present in both sequences
    DELETE = "delete"   # Line present only in the left sequence
    INSERT = "insert"   # Line present only in the right sequence


class LineClass(Enum):
    """Classification of one line on one side of a comparison."""
    UNCHANGED = "unchanged"
    REMOVED = "removed"
    ADDED = "added"
    MODIFIED = "modified"

    @property
    def marker(self) -> str:
        """Single character marker used by plain-text output."""
        markers = {
            LineClass.UNCHANGED: ' ',
            LineClass.REMOVED: '-',
            LineClass.ADDED: '+',
            LineClass.MODIFIED: '!',
        }
        return markers[self]


class Side(Enum):
    """Side of a two-way comparison."""
    LEFT = "left"
    RIGHT = "right"


class DiffInvariantError(RuntimeError):
    """Raised when a computed result breaks an internal invariant (a bug)."""


# =============================================================================
# Edit Script Models
# =============================================================================

@dataclass(frozen=True)
class EditOp:
    """One step of an edit script carrying the line it keeps, deletes or inserts."""
    tag: EditTag
    line: str

    def __str__(self) -> str:
        prefixes = {EditTag.EQUAL: ' ', EditTag.DELETE: '-', EditTag.INSERT: '+'}
        return f"{prefixes[self.tag]}{self.line}"


@dataclass(frozen=True)
class Block:
    """
    A maximal run of consecutive edit operations sharing one tag.

    Two adjacent blocks of a collapsed script never share a tag.
    """
    tag: EditTag
    lines: tuple[str, ...]

    def __len__(self) -> int:
        return len(self.lines)


# =============================================================================
# Change Models
# =============================================================================

@dataclass(frozen=True)
class CharSpan:
    """
    Minimal differing region between two paired lines.

    ``prefix_length`` and ``suffix_length`` count code points shared by both
    lines at the start and end; the middles are what remains on each side.
    Either middle may be empty.
    """
    prefix_length: int
    left_middle: str
    right_middle: str
    suffix_length: int

    def split_left(self, line: str) -> tuple[str, str, str]:
        """Split the left line into (prefix, middle, suffix)."""
        return self._split(line, self.left_middle)

    def split_right(self, line: str) -> tuple[str, str, str]:
        """Split the right line into (prefix, middle, suffix)."""
        return self._split(line, self.right_middle)

    def _split(self, line: str, middle: str) -> tuple[str, str, str]:
        prefix = line[:self.prefix_length]
        suffix = line[len(line) - self.suffix_length:] if self.suffix_length else ""
        return prefix, middle, suffix

    def to_dict(self) -> dict[str, Any]:
        return {
            'prefix_length': self.prefix_length,
            'left_middle': self.left_middle,
            'right_middle': self.right_middle,
            'suffix_length': self.suffix_length,
        }


@dataclass(frozen=True)
class ChangePair:
    """
    A deleted left line positionally paired with an inserted right line.

    Indices are 0-based positions in the original sequences.
    """
    left_index: int
    right_index: int
    left_line: str
    right_line: str
    span: Optional[CharSpan] = None


# =============================================================================
# Annotation Models
# =============================================================================

@dataclass(frozen=True)
class LineAnnotation:
    """Classification of one line, plus its character span when modified."""
    line_class: LineClass
    span: Optional[CharSpan] = None

    @property
    def is_changed(self) -> bool:
        return self.line_class is not LineClass.UNCHANGED

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {'class': self.line_class.value}
        if self.span is not None:
            data['span'] = self.span.to_dict()
        return data


@dataclass(frozen=True)
class DiffStats:
    """
    Aggregate change counters.

    ``modified`` counts change pairs, not characters or lines per side.
    """
    added: int = 0
    removed: int = 0
    modified: int = 0

    @property
    def total_changes(self) -> int:
        """Total number of changed line slots."""
        return self.added + self.removed + self.modified

    @property
    def is_identical(self) -> bool:
        return self.total_changes == 0

    def to_dict(self) -> dict[str, int]:
        return {'added': self.added, 'removed': self.removed, 'modified': self.modified}

    def __str__(self) -> str:
        return f"+{self.added} -{self.removed} ~{self.modified}"


UNCHANGED_ANNOTATION = LineAnnotation(LineClass.UNCHANGED)


@dataclass(frozen=True)
class ComparisonResult:
    """
    Complete result of one comparison run.

    ``left`` and ``right`` map every line index of their side to a
    LineAnnotation, so a renderer never has to re-derive anything.
    """
    left_lines: tuple[str, ...]
    right_lines: tuple[str, ...]
    left: Mapping[int, LineAnnotation]
    right: Mapping[int, LineAnnotation]
    pairs: tuple[ChangePair, ...] = ()
    stats: DiffStats = field(default_factory=DiffStats)

    def __post_init__(self) -> None:
        # Freeze the annotation maps handed in by the engine
        object.__setattr__(self, 'left', MappingProxyType(dict(self.left)))
        object.__setattr__(self, 'right', MappingProxyType(dict(self.right)))

    @property
    def is_identical(self) -> bool:
        return self.stats.is_identical

    def annotation(self, side: Side, index: int) -> LineAnnotation:
        """Annotation for a line index, ``unchanged`` when out of range."""
        annotations = self.left if side is Side.LEFT else self.right
        return annotations.get(index, UNCHANGED_ANNOTATION)

    def changed_indices(self, side: Side) -> list[int]:
        """Sorted indices of non-unchanged lines on one side."""
        annotations = self.left if side is Side.LEFT else self.right
        return sorted(i for i, a in annotations.items() if a.is_changed)

    def iter_side(self, side: Side) -> Iterator[tuple[int, str, LineAnnotation]]:
        """Iterate (index, line, annotation) over one side in order."""
        lines = self.left_lines if side is Side.LEFT else self.right_lines
        for index, line in enumerate(lines):
            yield index, line, self.annotation(side, index)

    def to_dict(self) -> dict[str, Any]:
        """Convert the result to plain data for JSON serialization."""
        def side_dict(annotations: Mapping[int, LineAnnotation]) -> dict[str, Any]:
            return {str(i): annotations[i].to_dict() for i in sorted(annotations)}

        return {
            'stats': self.stats.to_dict(),
            'left': side_dict(self.left),
            'right': side_dict(self.right),
            'pairs': [
                {
                    'left_index': pair.left_index,
                    'right_index': pair.right_index,
                    'span': pair.span.to_dict() if pair.span else None,
                }
                for pair in self.pairs
            ],
        }
