"""Command-line interface for projingest.

This module provides the command-line interface for projingest. It scans a
project directory, applies the exclude and include patterns, counts tokens and
writes the assembled Markdown document.

Signal Handling Notes:
    The module implements careful signal handling to ensure proper cleanup on interruption:
    - SIGPIPE: Handled when output pipe is closed (e.g., when piping to `head`) on Unix-like systems
    - SIGINT: Handled for clean exit on Ctrl+C
    Both cases ensure proper cleanup and appropriate exit codes.

Exit Codes:
    0: Successful completion
    1: Runtime error during execution (including a failed write)
    2: Command-line syntax error
    130: Interrupted by SIGINT (Ctrl+C)
    141: Broken pipe (SIGPIPE) on Unix-like systems

Example:
    # Basic usage to process a directory
    $ projingest /path/to/project

    # Only Python files, with a structure outline, into a file
    $ projingest -i "*.py" -S -o project.md /path/to/project
"""

import argparse
import logging
import sys
from collections.abc import Mapping
from typing import List, Optional

from projingest.cli.argparser import PatternArguments, create_parser, validate_args
from projingest.cli.safe_writer import SafeWriter
from projingest.cli.signal_handler import setup_signal_handling, signal_handler
from projingest.config import DEFAULT_EXCLUDE_BLOCK, IngestOptions
from projingest.diagnostics import DiagnosticLog
from projingest.exceptions import IngestError
from projingest.file_system_tree.file_system import LocalFileSystem
from projingest.patterns import format_pattern_block
from projingest.scan_rules import BaseScanRules, CompositeScanRules, GitIgnoreScanRules, HiddenEntryRules
from projingest.session import IngestSession
from projingest.settings import JsonFileStore, KeyValueStore, MemoryStore

logger = logging.getLogger(__name__)


def configure_logging(verbosity: int) -> None:
    """Send log records to stderr; -v shows progress, -vv everything."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr)


def format_counts(counts: Mapping[str, Optional[int]]) -> str:
    """Format the counts into a human-readable string.

    Args:
        counts: Mapping containing various count metrics.

    Returns:
        A formatted string showing all counts with appropriate labels.

    Example:
        >>> print(format_counts({"directories": 2, "files": 5, "skipped": 1, "tokens": None, "document_tokens": None}))
        Directories: 2
        Files: 5
        Skipped: 1
    """
    result = [
        f"Directories: {counts['directories']}",
        f"Files: {counts['files']}",
        f"Skipped: {counts['skipped']}",
    ]

    if counts.get("tokens") is not None:
        result.append(f"Tokens: {counts['tokens']}")
    if counts.get("document_tokens") is not None:
        result.append(f"Document tokens: {counts['document_tokens']}")

    return "\n".join(result)


def build_scan_rules(args: argparse.Namespace) -> BaseScanRules:
    rules: List[BaseScanRules] = []
    if not args.hidden:
        rules.append(HiddenEntryRules())
    if args.gitignore:
        rules.append(GitIgnoreScanRules.for_directory(args.directory))
    return CompositeScanRules(rules)


def build_exclude_block(args: argparse.Namespace, patterns: PatternArguments) -> str:
    """Combine the default exclude block (unless disabled) with the command-line excludes."""
    blocks = [] if args.no_default_excludes else [DEFAULT_EXCLUDE_BLOCK]
    if patterns.exclude:
        blocks.append(format_pattern_block(patterns.exclude))
    return "\n".join(blocks)


def run(args: argparse.Namespace, patterns: PatternArguments) -> int:
    """Process one directory according to parsed arguments and return the exit code."""
    store: KeyValueStore = JsonFileStore(args.settings) if args.settings else MemoryStore()
    options = IngestOptions(include_structure=args.structure, model=args.model, count_tokens=not args.no_tokens)
    diagnostics = DiagnosticLog("projingest")
    session = IngestSession(
        args.directory,
        options=options,
        file_system=LocalFileSystem(build_scan_rules(args)),
        store=store,
        diagnostics=diagnostics,
    )

    session.load(remember=bool(args.settings))
    if patterns or args.no_default_excludes or not args.settings:
        session.update_patterns(
            exclude=build_exclude_block(args, patterns),
            include=format_pattern_block(patterns.include),
        )

    tokens: Optional[int] = None
    if options.count_tokens:
        result = session.compute_costs_sync()
        if result.aborted:
            print(
                f"Error: token counting is unavailable for model '{options.model}'. "
                "Use -N/--no-tokens to ingest without token counts.",
                file=sys.stderr,
            )
            return 1
        tokens = result.total

    document = session.ingest()

    output_file = args.output if args.output else sys.stdout.fileno()
    with SafeWriter(output_file) as safe_writer:
        try:
            safe_writer.write(document.text)

            if args.summary:
                counts = {
                    "directories": session.directory_count,
                    "files": len(document.files),
                    "skipped": len(document.skipped),
                    "tokens": tokens,
                    "document_tokens": document.token_count,
                }
                count_output_str = format_counts(counts)
                if args.summary in ("stdout", "file"):
                    safe_writer.write("\n" + count_output_str + "\n")
                else:
                    print(count_output_str, file=sys.stderr)
        except BrokenPipeError:
            pass  # SafeWriter will automatically close in the context manager

    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the projingest command-line interface.

    Exit codes:
        0: Successful completion
        1: Runtime error during execution
        2: Command-line syntax error
        130: Interrupted by SIGINT (Ctrl+C)
        141: Broken pipe (SIGPIPE) on Unix-like systems
    """
    setup_signal_handling()

    patterns = PatternArguments()
    parser = create_parser(patterns)
    # argparse calls sys.exit(2) for argument errors or sys.exit(0) for --version
    args = parser.parse_args(argv)

    try:
        validate_args(args)
    except ValueError as e:
        parser.error(str(e))

    configure_logging(args.verbose)

    try:
        exit_code = run(args, patterns)
    except (IngestError, OSError) as e:
        print(f"Error: {str(e)}", file=sys.stderr)
        sys.exit(1)

    signal_exit = signal_handler.exit_code()
    if signal_exit is not None:
        sys.exit(signal_exit)
    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
