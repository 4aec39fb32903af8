"""Gitignore-style pattern matching against root-relative POSIX paths.

Two kinds of pattern are recognised:

- A pattern without a slash (``*.log``, ``.DS_Store``) is compared with the
  final path segment only, so it applies at any depth.
- A pattern with a slash (``build/``, ``src/*.go``) is compared with the whole
  relative path. It matches when the path (with a trailing slash for
  directories) starts with the literal pattern text, or when the pattern
  matches a leading run of whole path segments as a glob in which ``*``, ``?``
  and bracket expressions never cross a ``/``.

The prefix rule is deliberately permissive: ``src/ma`` selects ``src/main.go``.
Malformed globs never raise; they fall back to literal comparison.
"""

import functools
import logging
import posixpath
import re
from typing import Iterable, List, Pattern

logger = logging.getLogger(__name__)

SEPARATOR = "/"
COMMENT_PREFIX = "#"

# Characters that must be escaped inside a regex character class
_CLASS_SPECIALS = frozenset("\\^[]-&~|")


def parse_pattern_block(text: str) -> List[str]:
    """Split a newline-separated pattern block into normalised patterns.

    Leading and trailing whitespace is trimmed from every line. Blank lines and
    lines starting with ``#`` are dropped.

    Args:
        text: The raw block, as typed by a user or read from a file.

    Returns:
        The patterns in their original order.

    Example:
        >>> parse_pattern_block("# Exclude files/folders\\n  *.log \\n\\nbuild/\\n")
        ['*.log', 'build/']
    """
    patterns = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith(COMMENT_PREFIX):
            continue
        patterns.append(stripped)
    return patterns


def format_pattern_block(patterns: Iterable[str]) -> str:
    """Join patterns back into a newline-separated block.

    Example:
        >>> format_pattern_block(["*.log", "build/"])
        '*.log\\nbuild/'
    """
    return "\n".join(patterns)


def _translate_class(body: str) -> str:
    """Translate the inside of a bracket expression into regex class syntax."""
    out = []
    last = len(body) - 1
    for index, char in enumerate(body):
        if char == "-" and 0 < index < last:
            out.append("-")
        elif char in _CLASS_SPECIALS:
            out.append("\\" + char)
        else:
            out.append(char)
    return "".join(out)


def _translate(pattern: str) -> str:
    """Translate a glob into a regex body in which wildcards never match a separator."""
    i, n = 0, len(pattern)
    parts = []
    while i < n:
        char = pattern[i]
        i += 1
        if char == "*":
            while i < n and pattern[i] == "*":
                i += 1
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        elif char == "\\":
            if i < n:
                parts.append(re.escape(pattern[i]))
                i += 1
            else:
                parts.append(re.escape(char))
        elif char == "[":
            j = i
            if j < n and pattern[j] in "!^":
                j += 1
            if j < n and pattern[j] == "]":
                j += 1
            while j < n and pattern[j] != "]":
                j += 1
            if j >= n:
                # Unterminated bracket: the "[" is an ordinary character
                parts.append(re.escape(char))
                continue
            body = pattern[i:j]
            i = j + 1
            if body[:1] in ("!", "^"):
                parts.append(f"[^/{_translate_class(body[1:])}]")
            else:
                parts.append(f"(?!/)[{_translate_class(body)}]")
        else:
            parts.append(re.escape(char))
    return "".join(parts)


@functools.lru_cache(maxsize=1024)
def compile_glob(pattern: str) -> Pattern[str]:
    """Compile a glob into a regex with directory-prefix semantics.

    The returned regex matches a path when the glob matches the whole path or a
    leading run of whole segments of it. The unmatched remainder, if any, is
    captured in the ``tail`` group.

    Args:
        pattern: The glob to compile.

    Returns:
        The compiled regex. If the glob cannot be compiled it is treated as a
        literal string.

    Example:
        >>> bool(compile_glob("src/*.go").match("src/main.go"))
        True
        >>> bool(compile_glob("src/*.go").match("src/pkg/main.go"))
        False
        >>> compile_glob("docs").match("docs/guide/intro.md").group("tail")
        '/guide/intro.md'
    """
    suffix = r"(?P<tail>/.*)?\Z"
    try:
        return re.compile(f"(?s:{_translate(pattern)}){suffix}")
    except re.error as e:
        logger.debug("Treating malformed pattern %r as a literal: %s", pattern, e)
        return re.compile(f"(?s:{re.escape(pattern)}){suffix}")


def _basename(relative_path: str) -> str:
    return posixpath.basename(relative_path.rstrip(SEPARATOR))


def _glob_match(pattern: str, relative_path: str, is_container: bool) -> bool:
    directory_only = pattern.endswith(SEPARATOR)
    glob = pattern.rstrip(SEPARATOR)
    if not glob:
        return False
    match = compile_glob(glob).match(relative_path.rstrip(SEPARATOR))
    if match is None:
        return False
    if directory_only and not match.group("tail") and not is_container:
        # "name/" selects a directory or what lies beneath it, never a file
        return False
    return True


def matches(pattern: str, relative_path: str, is_container: bool) -> bool:
    """Check whether a single pattern selects a path.

    Args:
        pattern: A normalised, non-empty pattern.
        relative_path: Root-relative POSIX path, without a leading separator.
            Directories may carry a trailing separator.
        is_container: Whether the path names a directory.

    Returns:
        True if the pattern selects the path.

    Example:
        >>> matches("*.log", "logs/app.log", False)
        True
        >>> matches("build/", "build", True)
        True
        >>> matches("build/", "build/out.bin", False)
        True
        >>> matches("src/*.go", "src/main_test.go", False)
        True
        >>> matches("src/*.go", "src/pkg/util.go", False)
        False
    """
    if SEPARATOR not in pattern:
        basename = _basename(relative_path)
        match = compile_glob(pattern).match(basename)
        return match is not None and not match.group("tail")

    candidate = relative_path
    if is_container and not candidate.endswith(SEPARATOR):
        candidate += SEPARATOR
    if candidate.startswith(pattern):
        return True

    return _glob_match(pattern, relative_path, is_container)


def matches_any(patterns: Iterable[str], relative_path: str, is_container: bool) -> bool:
    """Check whether any of the patterns selects a path.

    The order of the patterns is irrelevant; there is no negation.

    Example:
        >>> matches_any(["*.log", "build/"], "a.txt", False)
        False
        >>> matches_any(["*.log", "build/"], "a.log", False)
        True
    """
    return any(matches(pattern, relative_path, is_container) for pattern in patterns)
