"""
Text I/O service.

Handles:
- Line ending normalization and line splitting
- Whitespace normalization
- Text status (line, word and character counts)
- Reading text files with encoding detection
- Atomic writes
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import tempfile
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Optional

import chardet


logger = logging.getLogger(__name__)

_LINE_ENDINGS = re.compile(r'\r\n?')
_TRAILING_BLANKS = re.compile(r'[ \t]+$')


class LineEnding(Enum):
    """Line ending style."""
    LF = auto()      # Unix: \n
    CRLF = auto()    # Windows: \r\n
    CR = auto()      # Old Mac: \r
    MIXED = auto()   # Mixed endings
    NONE = auto()    # No line endings (single line)


# =============================================================================
# Line splitting and normalization
# =============================================================================

def normalize_line_endings(text: str) -> str:
    """Convert CRLF and lone CR to LF."""
    return _LINE_ENDINGS.sub('\n', text)


def split_lines(text: str) -> list[str]:
    """
    Split text into the lines an editor shows.

    An empty text is one empty line; a trailing newline yields a trailing
    empty line.
    """
    return normalize_line_endings(text).split('\n')


def strip_trailing_whitespace(text: str) -> str:
    """Remove trailing spaces and tabs from every line."""
    return '\n'.join(
        _TRAILING_BLANKS.sub('', line) for line in split_lines(text)
    )


def detect_line_ending(content: str) -> LineEnding:
    """Detect line ending style in content."""
    crlf_count = content.count('\r\n')
    lf_count = content.count('\n') - crlf_count
    cr_count = content.count('\r') - crlf_count

    total = crlf_count + lf_count + cr_count
    if total == 0:
        return LineEnding.NONE

    if crlf_count == total:
        return LineEnding.CRLF
    elif lf_count == total:
        return LineEnding.LF
    elif cr_count == total:
        return LineEnding.CR
    return LineEnding.MIXED


@dataclass(frozen=True)
class TextStatus:
    """Status bar numbers for a text."""
    lines: int
    words: int
    characters: int

    def __str__(self) -> str:
        return f"Lines: {self.lines} | Words: {self.words} | {self.characters} characters"


def measure_text(text: str) -> TextStatus:
    """Count lines, words and characters of a text."""
    normalized = normalize_line_endings(text)
    trimmed = normalized.strip()
    return TextStatus(
        lines=len(normalized.split('\n')) if normalized else 1,
        words=len(trimmed.split()) if trimmed else 0,
        characters=len(text),
    )


# =============================================================================
# File access
# =============================================================================

@dataclass
class TextContent:
    """Decoded file content with metadata."""
    text: str
    encoding: str
    line_ending: LineEnding
    bom: bool
    size: int

    @property
    def lines(self) -> list[str]:
        return split_lines(self.text)


@dataclass
class ReadResult:
    """Result of a file read operation."""
    success: bool
    content: Optional[TextContent] = None
    error: Optional[str] = None
    is_binary: bool = False


@dataclass
class WriteResult:
    """Result of a file write operation."""
    success: bool
    bytes_written: int = 0
    error: Optional[str] = None


class TextIOService:
    """Service for reading and writing text files safely."""

    BINARY_SIGNATURES = [
        b'\x00',           # Null byte (strong indicator)
        b'\x89PNG',        # PNG
        b'\xff\xd8\xff',   # JPEG
        b'GIF8',           # GIF
        b'PK\x03\x04',     # ZIP
        b'\x1f\x8b',       # GZIP
        b'%PDF',           # PDF
        b'\x7fELF',        # ELF
    ]

    BOMS = [
        (b'\xef\xbb\xbf', 'utf-8-sig'),
        (b'\xff\xfe', 'utf-16-le'),
        (b'\xfe\xff', 'utf-16-be'),
    ]

    def __init__(
        self,
        default_encoding: str = 'utf-8',
        fallback_encoding: str = 'latin-1',
        binary_check_size: int = 8192,
        max_text_size: int = 50 * 1024 * 1024
    ):
        self.default_encoding = default_encoding
        self.fallback_encoding = fallback_encoding
        self.binary_check_size = binary_check_size
        self.max_text_size = max_text_size

    def read_text(self, path: Path | str, encoding: Optional[str] = None) -> ReadResult:
        """
        Read a text file with automatic encoding detection.

        Args:
            path: Path to the file
            encoding: Force a specific encoding (auto-detect if None)

        Returns:
            ReadResult with content or error information
        """
        path = Path(path)

        if not path.exists():
            return ReadResult(success=False, error=f"File not found: {path}")
        if not path.is_file():
            return ReadResult(success=False, error=f"Not a file: {path}")

        try:
            size = path.stat().st_size
            if size > self.max_text_size:
                return ReadResult(
                    success=False,
                    error=f"File too large for text comparison ({size / 1024 / 1024:.2f} MB)"
                )

            raw = path.read_bytes()
        except PermissionError:
            return ReadResult(success=False, error=f"Permission denied: {path}")
        except OSError as e:
            return ReadResult(success=False, error=f"OS error: {e}")

        bom = False
        detected = encoding
        for marker, bom_encoding in self.BOMS:
            if raw.startswith(marker):
                bom = True
                detected = bom_encoding
                break

        if not bom and self._is_binary(raw[:self.binary_check_size]):
            return ReadResult(success=False, is_binary=True, error="File appears to be binary")

        detected = detected or self._detect_encoding(raw)
        try:
            text = raw.decode(detected)
        except (UnicodeDecodeError, LookupError):
            logger.warning("Could not decode %s as %s, falling back to %s",
                           path, detected, self.fallback_encoding)
            text = raw.decode(self.fallback_encoding, errors='replace')
            detected = self.fallback_encoding

        return ReadResult(
            success=True,
            content=TextContent(
                text=text,
                encoding=detected,
                line_ending=detect_line_ending(text),
                bom=bom,
                size=len(raw),
            )
        )

    def write_text(self, path: Path | str, text: str, encoding: str = 'utf-8') -> WriteResult:
        """Write text atomically (temp file in the target directory, then move)."""
        path = Path(path)
        try:
            encoded = text.encode(encoding)
            path.parent.mkdir(parents=True, exist_ok=True)

            fd, temp_path = tempfile.mkstemp(dir=path.parent)
            try:
                with os.fdopen(fd, 'wb') as f:
                    f.write(encoded)
                shutil.move(temp_path, path)
            except Exception:
                if os.path.exists(temp_path):
                    os.unlink(temp_path)
                raise

            return WriteResult(success=True, bytes_written=len(encoded))

        except PermissionError:
            return WriteResult(success=False, error=f"Permission denied: {path}")
        except (OSError, UnicodeEncodeError) as e:
            return WriteResult(success=False, error=f"Write failed: {e}")

    def _is_binary(self, chunk: bytes) -> bool:
        """Check a leading chunk for binary signatures and control bytes."""
        for sig in self.BINARY_SIGNATURES:
            if chunk.startswith(sig):
                return True

        if b'\x00' in chunk:
            return True

        non_text = sum(1 for b in chunk if b < 9 or (13 < b < 32))
        return len(chunk) > 0 and non_text / len(chunk) > 0.3

    def _detect_encoding(self, content: bytes) -> str:
        """Detect encoding of content."""
        if not content:
            return self.default_encoding

        try:
            content.decode(self.default_encoding)
            return self.default_encoding
        except UnicodeDecodeError:
            pass

        result = chardet.detect(content)
        if result['confidence'] > 0.7 and result['encoding']:
            encoding = result['encoding'].lower()
            if encoding == 'ascii':
                return 'utf-8'
            return encoding

        return self.fallback_encoding
