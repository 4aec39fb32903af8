"""Scan rules using .gitignore pattern syntax."""

from os import PathLike
from pathlib import Path
from typing import Optional, Sequence, Union

from pathspec import PathSpec
from pathspec.patterns import GitWildMatchPattern  # type: ignore

from projingest.types import PathType

from .base_rules import BaseScanRules


class GitIgnoreScanRules(BaseScanRules):
    """Skip entries ignored by a project's .gitignore files.

    Unlike the user-editable exclude patterns, which follow the permissive
    matching in :mod:`projingest.patterns`, these rules use the pathspec library
    to match exactly the way Git does, including negation (``!keep.log``) and
    ``**`` wildcards. They are applied at scan time.

    Attributes:
        spec (PathSpec): Compiled pattern matcher from the pathspec library.

    Example:
        >>> rules = GitIgnoreScanRules()
        >>> rules.add_rule("*.log")
        >>> rules.add_rule("!keep.log")
        >>> rules.exclude("debug.log")
        True
        >>> rules.exclude("keep.log")
        False
    """

    GITIGNORE_NAME = ".gitignore"

    def __init__(self, rules_files: Optional[Union[PathType, Sequence[PathType]]] = None):
        """Initialize with patterns from the given files, if any.

        Args:
            rules_files: Path(s) to file(s) containing .gitignore patterns.

        Raises:
            FileNotFoundError: If any rules file does not exist.
        """
        self.spec = PathSpec.from_lines(GitWildMatchPattern, [])

        if rules_files is not None:
            self.load_rules(rules_files)

    @classmethod
    def for_directory(cls, directory: PathType) -> "GitIgnoreScanRules":
        """Create rules from the .gitignore at the root of a directory.

        A missing .gitignore yields rules that exclude nothing.

        Example:
            >>> import tempfile
            >>> with tempfile.TemporaryDirectory() as tmpdir:
            ...     rules = GitIgnoreScanRules.for_directory(tmpdir)
            >>> rules.has_rules()
            False
        """
        gitignore = Path(directory) / cls.GITIGNORE_NAME
        if gitignore.is_file():
            return cls(gitignore)
        return cls()

    def exclude(self, path: str) -> bool:
        return self.spec.match_file(path)

    def has_rules(self) -> bool:
        return len(self.spec.patterns) > 0

    def load_rules(self, rules_files: Union[PathType, Sequence[PathType]]) -> None:
        """Load and append .gitignore patterns from one or more files.

        Patterns are processed in the order they are added, so later negations
        can re-include entries excluded by earlier files.

        Raises:
            FileNotFoundError: If any rules file does not exist.
        """
        if isinstance(rules_files, (str, PathLike)):
            rules_files = [rules_files]

        for rules_file in rules_files:
            path = Path(rules_file)
            if not path.exists():
                raise FileNotFoundError(f"Rules file not found: {path}")

            with open(path, "r", encoding="utf-8") as f:
                gitignore_content = f.read().splitlines()

            new_patterns = PathSpec.from_lines(GitWildMatchPattern, gitignore_content).patterns

            if not hasattr(self.spec.patterns, "extend"):
                self.spec.patterns = list(self.spec.patterns)

            self.spec.patterns.extend(new_patterns)

    def add_rule(self, rule: str) -> None:
        new_pattern = GitWildMatchPattern(rule)

        if not hasattr(self.spec.patterns, "append"):
            self.spec.patterns = list(self.spec.patterns)

        self.spec.patterns.append(new_pattern)
