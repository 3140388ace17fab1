"""
Main entry point for the Text Compare command line tool.

This module handles:
- Command line argument parsing
- Logging configuration
- Settings loading and overrides
- Reading inputs and running the comparison
- Writing the report
- Exception handling
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, TextIO

from textcompare import __version__
from textcompare.core.diff.aligner import DiffAlgorithm
from textcompare.core.diff.formatters import InlineFormatter, SideBySideFormatter, format_stats
from textcompare.core.models import ComparisonResult
from textcompare.services.samples import SAMPLE_MODIFIED, SAMPLE_ORIGINAL
from textcompare.services.settings import ApplicationSettings, OutputFormat, SettingsManager
from textcompare.services.text_io import TextIOService, measure_text
from textcompare.workers.compare_worker import compare_texts


# =============================================================================
# Constants
# =============================================================================

APP_NAME = "textcompare"
APP_VERSION = __version__

EXIT_IDENTICAL = 0
EXIT_DIFFERENT = 1
EXIT_ERROR = 2


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class CommandLineArgs:
    """Parsed command line arguments."""
    left_path: Optional[str] = None
    right_path: Optional[str] = None
    use_sample: bool = False
    output_format: Optional[OutputFormat] = None
    algorithm: Optional[DiffAlgorithm] = None
    no_intraline: bool = False
    strip_trailing_whitespace: bool = False
    width: Optional[int] = None
    color: Optional[bool] = None
    output_path: Optional[str] = None
    config_file: Optional[str] = None
    encoding: Optional[str] = None
    log_level: str = "WARNING"


# =============================================================================
# Logging Setup
# =============================================================================

class LogFormatter(logging.Formatter):
    """Custom log formatter with colors for console."""

    COLORS = {
        logging.INFO: '\033[32m',      # Green
        logging.WARNING: '\033[33m',   # Yellow
        logging.ERROR: '\033[31m',     # Red
        logging.CRITICAL: '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True, stream: Optional[TextIO] = None):
        super().__init__(
            fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        stream = stream or sys.stderr
        self.use_colors = use_colors and hasattr(stream, 'isatty') and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        if self.use_colors:
            color = self.COLORS.get(record.levelno, '')
            return f"{color}{formatted}{self.RESET}"

        return formatted


def setup_logging(level: str = "WARNING", log_file: Optional[Path] = None) -> logging.Logger:
    """
    Configure application logging.

    Console output goes to stderr so reports on stdout stay clean.

    Args:
        level: Log level string
        log_file: Optional file path for logging

    Returns:
        Root logger instance
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(LogFormatter(use_colors=True, stream=sys.stderr))
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(LogFormatter(use_colors=False))
        root_logger.addHandler(file_handler)

    return root_logger


# =============================================================================
# Exception Handling
# =============================================================================

class ExceptionHandler:
    """Global handler that logs unhandled exceptions."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def handle_exception(self, exc_type: type, exc_value: BaseException, exc_tb) -> None:
        """Handle an unhandled exception."""
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_tb)
            return

        self.logger.critical("Unhandled exception", exc_info=(exc_type, exc_value, exc_tb))
        tb_text = ''.join(traceback.format_exception(exc_type, exc_value, exc_tb))
        print(f"{APP_NAME}: internal error\n{tb_text}", file=sys.stderr)


# =============================================================================
# Command Line Parsing
# =============================================================================

def parse_arguments(args: Optional[List[str]] = None) -> CommandLineArgs:
    """
    Parse command line arguments.

    Args:
        args: Arguments to parse (defaults to sys.argv)

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Compare two texts line by line with character-level highlights",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit status is 0 when the inputs are identical, 1 when they differ
and 2 when an input could not be read.

Examples:
  %(prog)s old.txt new.txt                 Side-by-side comparison
  %(prog)s -f inline old.txt new.txt       Inline listing with [-..-]/{+..+} marks
  %(prog)s -f json old.txt new.txt         Machine-readable annotations
  %(prog)s --sample                        Compare the built-in sample texts
        """
    )

    parser.add_argument('left', nargs='?', help='Left/original file')
    parser.add_argument('right', nargs='?', help='Right/modified file')

    parser.add_argument(
        '--sample',
        action='store_true',
        help='Compare the built-in sample texts instead of files'
    )

    # Comparison options
    parser.add_argument(
        '-a', '--algorithm',
        choices=['lcs', 'myers'],
        default=None,
        help='Line alignment algorithm'
    )
    parser.add_argument(
        '--no-intraline',
        action='store_true',
        help='Skip character-level refinement of modified lines'
    )
    parser.add_argument(
        '-w', '--strip-trailing-whitespace',
        action='store_true',
        help='Remove trailing spaces and tabs before comparing'
    )
    parser.add_argument(
        '--encoding',
        help='Force input encoding (detected by default)'
    )

    # Output options
    parser.add_argument(
        '-f', '--format',
        choices=[f.value for f in OutputFormat],
        default=None,
        help='Report format'
    )
    parser.add_argument(
        '--width',
        type=int,
        default=None,
        help='Total width of the side-by-side report'
    )
    color_group = parser.add_mutually_exclusive_group()
    color_group.add_argument('--color', dest='color', action='store_const', const=True,
                             help='Colorize the side-by-side report')
    color_group.add_argument('--no-color', dest='color', action='store_const', const=False,
                             help='Never colorize output')
    parser.add_argument(
        '-o', '--output',
        help='Write the report to a file instead of stdout'
    )

    # Configuration
    parser.add_argument(
        '-c', '--config',
        help='Configuration file path'
    )

    # Logging
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        default='WARNING',
        help='Log level'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'{APP_NAME} {APP_VERSION}'
    )

    parsed = parser.parse_args(args)

    if not parsed.sample and not (parsed.left and parsed.right):
        parser.error("two files are required unless --sample is given")

    result = CommandLineArgs()
    result.left_path = parsed.left
    result.right_path = parsed.right
    result.use_sample = parsed.sample
    result.no_intraline = parsed.no_intraline
    result.strip_trailing_whitespace = parsed.strip_trailing_whitespace
    result.width = parsed.width
    result.color = parsed.color
    result.output_path = parsed.output
    result.config_file = parsed.config
    result.encoding = parsed.encoding

    if parsed.format:
        result.output_format = OutputFormat.from_string(parsed.format)
    if parsed.algorithm:
        result.algorithm = DiffAlgorithm.from_string(parsed.algorithm)

    result.log_level = 'DEBUG' if parsed.verbose else parsed.log_level
    return result


# =============================================================================
# Settings
# =============================================================================

def load_settings(args: CommandLineArgs) -> ApplicationSettings:
    """Load settings and apply command line overrides."""
    manager = SettingsManager(Path(args.config_file) if args.config_file else None)
    settings = manager.settings

    if args.algorithm is not None:
        settings.comparison.algorithm = args.algorithm
    if args.no_intraline:
        settings.comparison.compute_intraline = False
    if args.strip_trailing_whitespace:
        settings.comparison.strip_trailing_whitespace = True
    if args.output_format is not None:
        settings.output.format = args.output_format
    if args.width is not None:
        settings.output.width = args.width
    if args.color is not None:
        settings.output.color = args.color

    return settings


# =============================================================================
# Inputs and Reports
# =============================================================================

class InputError(Exception):
    """Raised when an input file cannot be read as text."""


def read_inputs(args: CommandLineArgs) -> tuple[str, str, str, str]:
    """
    Resolve the two texts to compare.

    Returns:
        Tuple of (left_label, left_text, right_label, right_text)
    """
    if args.use_sample:
        return "original (sample)", SAMPLE_ORIGINAL, "modified (sample)", SAMPLE_MODIFIED

    service = TextIOService()
    texts = []
    for path in (args.left_path, args.right_path):
        read = service.read_text(path, encoding=args.encoding)
        if not read.success:
            raise InputError(read.error or f"Could not read {path}")
        logging.debug(f"Read {path} ({read.content.encoding}, {read.content.line_ending.name})")
        texts.append(read.content.text)

    return args.left_path, texts[0], args.right_path, texts[1]


def render_report(
    result: ComparisonResult,
    settings: ApplicationSettings,
    left_label: str,
    right_label: str,
    left_text: str,
    right_text: str,
    color: bool = False
) -> Iterable[str]:
    """Yield the report lines for the configured format."""
    output = settings.output

    if output.format == OutputFormat.JSON:
        data = result.to_dict()
        data['left_label'] = left_label
        data['right_label'] = right_label
        yield json.dumps(data, indent=2, ensure_ascii=False)
        return

    if output.format == OutputFormat.STATS:
        yield f"{left_label}: {measure_text(left_text)}"
        yield f"{right_label}: {measure_text(right_text)}"
        yield format_stats(result)
        return

    yield f"--- {left_label}"
    yield f"+++ {right_label}"

    if output.format == OutputFormat.INLINE:
        yield from InlineFormatter().render(result)
    else:
        formatter = SideBySideFormatter(width=output.width, tab_size=output.tab_size, color=color)
        yield from formatter.render(result)

    yield format_stats(result)


# =============================================================================
# Main Function
# =============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """
    Command line entry point.

    Returns:
        Exit code (0 identical, 1 different, 2 error)
    """
    args = parse_arguments(argv)

    logger = setup_logging(args.log_level)
    logger.debug(f"Starting {APP_NAME} v{APP_VERSION}")

    exception_handler = ExceptionHandler(logger)
    sys.excepthook = exception_handler.handle_exception

    settings = load_settings(args)

    try:
        left_label, left_text, right_label, right_text = read_inputs(args)
    except InputError as e:
        print(f"{APP_NAME}: {e}", file=sys.stderr)
        return EXIT_ERROR

    result = compare_texts(
        left_text,
        right_text,
        settings.to_compare_options(),
        strip_whitespace=settings.comparison.strip_trailing_whitespace,
    )
    logger.info(f"Comparison finished: {result.stats}")

    color = settings.output.color and args.output_path is None and sys.stdout.isatty()
    report = '\n'.join(render_report(
        result, settings, left_label, right_label, left_text, right_text, color=color
    )) + '\n'

    if args.output_path:
        written = TextIOService().write_text(args.output_path, report)
        if not written.success:
            print(f"{APP_NAME}: {written.error}", file=sys.stderr)
            return EXIT_ERROR
        logger.info(f"Report written to {args.output_path}")
    else:
        sys.stdout.write(report)

    return EXIT_IDENTICAL if result.is_identical else EXIT_DIFFERENT


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == '__main__':
    sys.exit(main())
