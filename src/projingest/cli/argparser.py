"""Command-line argument parsing for projingest.

This module defines the command-line interface for projingest,
handling argument parsing and validation.
"""

import argparse
from pathlib import Path
from typing import Any, List, Optional, Sequence, Type, Union

from projingest import __version__
from projingest.config import AVAILABLE_MODELS, DEFAULT_EXCLUDE_PATTERNS, DEFAULT_MODEL
from projingest.patterns import parse_pattern_block


class PatternArguments:
    """Exclude and include patterns collected from the command line, in order."""

    def __init__(self) -> None:
        self.exclude: List[str] = []
        self.include: List[str] = []

    def __bool__(self) -> bool:
        return bool(self.exclude or self.include)


def read_pattern_file(path: Union[str, Path]) -> List[str]:
    """Read a pattern block from a file.

    Raises:
        OSError: If the file cannot be read.
    """
    with open(path, "r", encoding="utf-8") as f:
        return parse_pattern_block(f.read())


def create_pattern_action(patterns: PatternArguments) -> Type[argparse.Action]:
    """Create a custom action class collecting pattern options.

    This factory function creates an action class that will update the provided
    PatternArguments object as arguments are processed. This preserves the exact
    order of pattern specifications as they appear on the command line.

    Args:
        patterns: The object to update during parsing.

    Returns:
        A custom action class for use with argparse.
    """

    class PatternAction(argparse.Action):
        """Action to collect patterns as arguments are processed.

        Single patterns (-x, -i) are appended as given; pattern files (-X, -I)
        are read immediately and their patterns appended in file order.
        """

        def __init__(self, option_strings: List[str], dest: str, **kwargs: Any) -> None:
            super().__init__(option_strings, dest, **kwargs)

        def __call__(
            self,
            parser: argparse.ArgumentParser,
            namespace: argparse.Namespace,
            values: Union[str, Sequence[Any], None],
            option_string: Optional[str] = None,
        ) -> None:
            if values is None:
                return

            if option_string in ("-X", "--exclude-from", "-I", "--include-from"):
                try:
                    new_patterns = read_pattern_file(str(values))
                except OSError as e:
                    parser.error(f"cannot read pattern file {values}: {e.strerror or e}")
            else:
                new_patterns = [str(values).strip()] if str(values).strip() else []

            if option_string in ("-x", "--exclude", "-X", "--exclude-from"):
                patterns.exclude.extend(new_patterns)
            else:
                patterns.include.extend(new_patterns)

            # Also keep the raw values on the namespace
            items = getattr(namespace, self.dest, None) or []
            items.append(values)
            setattr(namespace, self.dest, items)

    return PatternAction


def create_parser(patterns: PatternArguments) -> argparse.ArgumentParser:
    """Create and configure the command-line argument parser.

    Args:
        patterns: The object collecting pattern options during parsing.

    Returns:
        An ArgumentParser instance configured with projingest's options.
    """
    description = """
    projingest: Turn a project directory into a single Markdown document for LLMs.

    The document starts with a title, optionally an outline of the project
    structure, and then every included file as a fenced code block tagged with
    the file's extension.

    Key Features:
    - gitignore-style exclude patterns, with a sensible default set
    - Include patterns to keep only matching files ("include mode")
    - Token counts per file and for the whole document (requires tiktoken)
    - Optional .gitignore support and hidden-file handling
    - Remembered patterns and recent folders with --settings

    Exclusion always wins: a file matching both an exclude and an include
    pattern is left out, and so is everything below an excluded directory.
    """

    epilog = f"""
    Default exclude patterns:
      {" ".join(DEFAULT_EXCLUDE_PATTERNS)}

    Examples:
      # Basic directory processing
      projingest /path/to/project

      # Exclude more patterns
      projingest -x "*.log" -x "build/" /path/to/project

      # Only Go sources under src/
      projingest -i "src/*.go" /path/to/project

      # Read patterns from files
      projingest -X exclude.txt -I include.txt /path/to/project

      # Add an outline of the project structure and write to a file
      projingest -S -o project.md /path/to/project

      # Also honour the project's .gitignore, and show hidden files
      projingest -g -H /path/to/project

      # Count tokens with another model's tokenizer, print summary to stderr
      projingest -m gpt-4 -s stderr /path/to/project

      # Remember patterns per folder between runs
      projingest --settings ~/.config/projingest.json /path/to/project
    """

    parser = argparse.ArgumentParser(
        prog="projingest",
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-V", "--version", action="version", version=f"projingest {__version__}", help="Show the version and exit"
    )

    PatternAction = create_pattern_action(patterns)

    parser.add_argument(
        "directory",
        type=Path,
        help="The project directory. All paths in the output are relative to this directory.",
    )
    parser.add_argument(
        "-x",
        "--exclude",
        type=str,
        metavar="PATTERN",
        action=PatternAction,
        help=(
            "Pattern of files or directories to exclude. A pattern without '/' matches names at any "
            "depth (*.log); a pattern with '/' matches paths from the root (build/, src/*.go). "
            "Can be specified multiple times."
        ),
    )
    parser.add_argument(
        "-X",
        "--exclude-from",
        type=Path,
        metavar="FILE",
        action=PatternAction,
        help="File of exclude patterns, one per line; blank lines and # comments are ignored.",
    )
    parser.add_argument(
        "-i",
        "--include",
        type=str,
        metavar="PATTERN",
        action=PatternAction,
        help=(
            "Pattern of files to include. When any include pattern is given, only matching files "
            "and the directories containing them are kept. Can be specified multiple times."
        ),
    )
    parser.add_argument(
        "-I",
        "--include-from",
        type=Path,
        metavar="FILE",
        action=PatternAction,
        help="File of include patterns, one per line.",
    )
    parser.add_argument(
        "-D",
        "--no-default-excludes",
        action="store_true",
        help="Do not apply the default exclude patterns.",
    )
    parser.add_argument(
        "-S",
        "--structure",
        action="store_true",
        help="Start the document with an outline of the project structure.",
    )
    parser.add_argument(
        "-m",
        "--model",
        metavar="MODEL",
        default=DEFAULT_MODEL,
        help=f"Model whose tokenizer counts tokens (default: {DEFAULT_MODEL}; offered: {', '.join(AVAILABLE_MODELS)}).",
    )
    parser.add_argument(
        "-N",
        "--no-tokens",
        action="store_true",
        help="Do not count tokens. tiktoken is not needed in this mode.",
    )
    parser.add_argument(
        "-g",
        "--gitignore",
        action="store_true",
        help="Also skip everything ignored by the project's top-level .gitignore.",
    )
    parser.add_argument(
        "-H",
        "--hidden",
        action="store_true",
        help="Include hidden files and directories (names starting with '.').",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        metavar="FILE",
        help="Output file path. If not specified, output is written to stdout.",
    )
    parser.add_argument(
        "-s",
        "--summary",
        metavar="DEST",
        choices=["stderr", "stdout", "file"],
        help="Print summary report. Valid destinations: stderr, stdout, file (requires -o)",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        metavar="FILE",
        help=(
            "JSON settings file. Patterns are remembered per folder and restored when no pattern "
            "options are given; the folder is added to the recent folders."
        ),
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log progress to stderr (-v for info, -vv for debug).",
    )

    return parser


def validate_args(args: argparse.Namespace) -> None:
    """Validate command-line arguments.

    Performs additional validation beyond what argparse can handle.

    Raises:
        ValueError: If any arguments fail validation.
    """
    if args.summary == "file" and not args.output:
        raise ValueError("--summary=file requires -o/--output to be specified")
    if args.no_tokens and args.model != DEFAULT_MODEL:
        raise ValueError("-m/--model has no effect together with -N/--no-tokens")
