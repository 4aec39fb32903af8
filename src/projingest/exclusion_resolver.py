"""Visibility resolution for a project tree.

The resolver reconciles the exclude and include pattern sets against the tree
and writes a visibility decision into every node. It is a single synchronous
post-order traversal, re-run from scratch whenever the patterns change.

Rules, in order of precedence:

1. The root is always included and is never matched against a pattern.
2. A node matching an exclude pattern is excluded together with its whole
   subtree, whatever the include patterns say.
3. With no include patterns every surviving node is included.
4. With include patterns ("include mode") a surviving file is included only if
   it matches one; a surviving directory is included only if at least one of
   its children is, so an empty directory is excluded.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from anytree import PreOrderIter

from projingest.diagnostics import DiagnosticLog
from projingest.file_system_tree.file_system_node import ProjectNode
from projingest.patterns import matches_any
from projingest.types import Visibility

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionSummary:
    """Counts produced by one resolution pass. The root is not counted."""

    included_files: int = 0
    excluded_files: int = 0
    included_directories: int = 0
    excluded_directories: int = 0

    @property
    def included(self) -> int:
        return self.included_files + self.included_directories

    @property
    def excluded(self) -> int:
        return self.excluded_files + self.excluded_directories


def _mark_excluded(node: ProjectNode) -> None:
    for descendant in PreOrderIter(node):
        descendant.visibility = Visibility.EXCLUDED


def _resolve_node(node: ProjectNode, exclude: Sequence[str], include: Sequence[str]) -> bool:
    """Resolve one non-root node and its subtree; return whether it is included."""
    if matches_any(exclude, node.relative_path, node.is_container):
        _mark_excluded(node)
        return False

    if not include:
        node.visibility = Visibility.INCLUDED
        for child in node.children:
            _resolve_node(child, exclude, include)
        return True

    if node.is_container:
        # Every child must be resolved, so no short-circuit here
        results = [_resolve_node(child, exclude, include) for child in node.children]
        included = any(results)
    else:
        included = matches_any(include, node.relative_path, False)

    node.visibility = Visibility.INCLUDED if included else Visibility.EXCLUDED
    return included


def resolve(root: ProjectNode, exclude_patterns: Sequence[str], include_patterns: Sequence[str]) -> None:
    """Write a visibility decision into every node of the tree.

    Args:
        root: Root of the tree. It is always marked INCLUDED.
        exclude_patterns: Normalised exclude patterns.
        include_patterns: Normalised include patterns. Empty means include everything
            that is not excluded.

    Example:
        >>> from pathlib import Path
        >>> root = ProjectNode("root", Path("/root"), is_container=True)
        >>> log = ProjectNode("a.log", Path("/root/a.log"), relative_path="a.log", parent=root)
        >>> txt = ProjectNode("a.txt", Path("/root/a.txt"), relative_path="a.txt", parent=root)
        >>> resolve(root, ["*.log"], [])
        >>> log.visibility.value, txt.visibility.value
        ('excluded', 'included')
    """
    exclude = list(exclude_patterns)
    include = list(include_patterns)
    root.visibility = Visibility.INCLUDED
    for child in root.children:
        _resolve_node(child, exclude, include)


def summarize(root: ProjectNode) -> ResolutionSummary:
    """Count included and excluded nodes below the root."""
    counts = {
        (False, Visibility.INCLUDED): 0,
        (False, Visibility.EXCLUDED): 0,
        (True, Visibility.INCLUDED): 0,
        (True, Visibility.EXCLUDED): 0,
    }
    for node in PreOrderIter(root):
        if node is root or node.visibility is Visibility.UNRESOLVED:
            continue
        counts[(node.is_container, node.visibility)] += 1
    return ResolutionSummary(
        included_files=counts[(False, Visibility.INCLUDED)],
        excluded_files=counts[(False, Visibility.EXCLUDED)],
        included_directories=counts[(True, Visibility.INCLUDED)],
        excluded_directories=counts[(True, Visibility.EXCLUDED)],
    )


class ExclusionResolver:
    """Resolver bound to a diagnostic log.

    Attributes:
        diagnostics (DiagnosticLog): Receives a debug entry per resolution and a
            warning when a toggle request is refused.

    Example:
        >>> resolver = ExclusionResolver()
        >>> summary = resolver.resolve(root, ["build/"], [])  # doctest: +SKIP
        >>> summary.excluded_directories  # doctest: +SKIP
        1
    """

    def __init__(self, diagnostics: Optional[DiagnosticLog] = None) -> None:
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticLog(__name__)

    def resolve(
        self, root: ProjectNode, exclude_patterns: Sequence[str], include_patterns: Sequence[str]
    ) -> ResolutionSummary:
        """Resolve the tree and return what the pass decided."""
        resolve(root, exclude_patterns, include_patterns)
        summary = summarize(root)
        self.diagnostics.debug(
            f"Resolved {len(exclude_patterns)} exclude and {len(include_patterns)} include patterns: "
            f"{summary.included_files} files included, {summary.excluded_files} excluded."
        )
        return summary

    def toggle_exclusion(self, node: ProjectNode, exclude_patterns: Sequence[str]) -> List[str]:
        """Add or remove the pattern that selects exactly this node.

        If the node's selector is already an exclude pattern it is removed,
        otherwise it is appended. The caller is expected to resolve again.

        Args:
            node: The node to toggle.
            exclude_patterns: Current exclude patterns. Not modified.

        Returns:
            The new exclude pattern list. Unchanged when the node is the root,
            which can never be excluded.

        Example:
            >>> from pathlib import Path
            >>> root = ProjectNode("root", Path("/root"), is_container=True)
            >>> build = ProjectNode("build", Path("/root/build"), is_container=True, relative_path="build", parent=root)
            >>> ExclusionResolver().toggle_exclusion(build, ["*.log"])
            ['*.log', 'build/']
            >>> ExclusionResolver().toggle_exclusion(build, ["*.log", "build/"])
            ['*.log']
        """
        patterns = list(exclude_patterns)
        if node.is_root:
            self.diagnostics.warning("The project root cannot be excluded.", path=str(node.abs_path))
            return patterns

        selector = node.selector
        if selector in patterns:
            patterns = [pattern for pattern in patterns if pattern != selector]
            logger.debug("Removed exclusion %s", selector)
        else:
            patterns.append(selector)
            logger.debug("Added exclusion %s", selector)
        return patterns


def toggle_exclusion(node: ProjectNode, exclude_patterns: Sequence[str]) -> List[str]:
    """Module-level shortcut for ExclusionResolver().toggle_exclusion."""
    return ExclusionResolver().toggle_exclusion(node, exclude_patterns)
