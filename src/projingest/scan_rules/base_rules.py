from abc import ABC, abstractmethod
from typing import Sequence, Union

from projingest.types import PathType


class BaseScanRules(ABC):
    """
    Abstract base class for rules that hide entries from a directory scan.

    Scan rules are applied by the filesystem collaborator before any tree node is
    constructed, so an entry rejected here never appears in the tree at all. This
    differs from the user's include/exclude patterns, which only change a node's
    visibility and can be edited without rescanning.

    Paths handed to exclude() are root-relative POSIX paths; directories carry a
    trailing slash so that directory-only rules can tell them apart.

    Example:
        >>> from projingest.scan_rules.hidden_rules import HiddenEntryRules
        >>> rules = HiddenEntryRules()
        >>> rules.exclude(".git/")
        True
        >>> rules.exclude("src/main.py")
        False
    """

    @abstractmethod
    def exclude(self, path: str) -> bool:
        """
        Determine if a path should be left out of the scan.

        Args:
            path (str): Root-relative POSIX path. Directories end with "/".

        Returns:
            bool: True if the entry should be skipped.
        """
        pass

    def load_rules(self, rules_files: Union[PathType, Sequence[PathType]]) -> None:
        """
        Load rules from one or more files.

        Rule types without file support keep this default, which raises.

        Raises:
            NotImplementedError: If this rule type doesn't support loading from files.
        """
        raise NotImplementedError(f"{self.__class__.__name__} doesn't support loading rules from files.")

    def add_rule(self, rule: str) -> None:
        """
        Add a single rule directly.

        Raises:
            NotImplementedError: If this rule type doesn't support adding individual rules.
        """
        raise NotImplementedError(f"{self.__class__.__name__} doesn't support adding individual rules.")
