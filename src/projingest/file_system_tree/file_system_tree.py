"""Project tree construction.

This module provides the ProjectTree class, which scans a directory once into
an unfiltered tree of ProjectNode objects. Filtering by user patterns happens
later and only annotates the tree; it never changes its shape.
"""

import logging
from typing import Iterator, Optional

from anytree import PreOrderIter

from projingest.diagnostics import DiagnosticLog
from projingest.exceptions import AccessDenied
from projingest.file_system_tree.file_system import FileSystem, LocalFileSystem, resolve_path
from projingest.file_system_tree.file_system_node import ProjectNode
from projingest.types import PathType, Visibility

logger = logging.getLogger(__name__)


class ProjectTree:
    """An unfiltered tree representation of a project directory.

    The tree is built lazily on first access and can be refreshed to reflect
    filesystem changes. Every entry the filesystem collaborator lists becomes a
    node; user exclusions are applied afterwards by the exclusion resolver.

    Permission Handling:
        A directory that cannot be enumerated stays in the tree as a container
        with no children, and a warning is added to the diagnostic log. Scanning
        continues with its siblings.

    Attributes:
        root_path (Path): The absolute path to the root directory.
        file_system (FileSystem): Collaborator used to list directories.
        diagnostics (DiagnosticLog): Log receiving scan warnings.

    Example:
        >>> tree = ProjectTree("my-app")  # doctest: +SKIP
        >>> tree.get_tree().name  # doctest: +SKIP
        'my-app'
        >>> tree.get_file_count()  # doctest: +SKIP
        42
    """

    def __init__(
        self,
        root_path: PathType,
        file_system: Optional[FileSystem] = None,
        diagnostics: Optional[DiagnosticLog] = None,
    ) -> None:
        self.root_path = resolve_path(root_path)
        self.file_system = file_system if file_system is not None else LocalFileSystem()
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticLog(__name__)
        self._tree: Optional[ProjectNode] = None
        self._file_count = 0
        self._directory_count = 0

    def get_tree(self) -> ProjectNode:
        """Get the root node, building the tree if needed.

        Raises:
            FileNotFoundError: If the root path doesn't exist.
            NotADirectoryError: If the root path isn't a directory.
        """
        if self._tree is None:
            self._build_tree()
        assert self._tree is not None
        return self._tree

    def _build_tree(self) -> None:
        if not self.root_path.exists():
            raise FileNotFoundError(f"Root path does not exist: {self.root_path}")
        if not self.root_path.is_dir():
            raise NotADirectoryError(f"Root path is not a directory: {self.root_path}")

        root = ProjectNode(self.root_path.name or str(self.root_path), self.root_path, is_container=True)
        root.visibility = Visibility.INCLUDED
        self._populate(root)
        self._tree = root
        self._count_files_and_directories()
        logger.info(
            "Scanned %s: %d files, %d directories", self.root_path, self._file_count, self._directory_count
        )

    def _populate(self, node: ProjectNode) -> None:
        """Recursively attach the children of a container node."""
        try:
            entries = self.file_system.list_children(node.abs_path, node.relative_path)
        except AccessDenied as e:
            self.diagnostics.warning(f"Cannot list directory: {e}", path=str(node.abs_path))
            return

        for entry in entries:
            relative = f"{node.relative_path}/{entry.name}" if node.relative_path else entry.name
            child = ProjectNode(
                entry.name,
                node.abs_path / entry.name,
                is_container=entry.is_container,
                relative_path=relative,
                parent=node,
            )
            if child.is_container:
                self._populate(child)

    def _count_files_and_directories(self) -> None:
        """Count the files and directories in the tree; the root is not a counted directory."""
        if self._tree is None:
            self._file_count = self._directory_count = 0
            return
        self._file_count, self._directory_count = count_nodes(self._tree)

    def get_file_count(self) -> int:
        """Get the total number of files in the tree, visible or not."""
        if self._tree is None:
            self._build_tree()
        return self._file_count

    def get_directory_count(self) -> int:
        """Get the total number of directories in the tree (excluding root)."""
        if self._tree is None:
            self._build_tree()
        return self._directory_count

    def iterate_nodes(self) -> Iterator[ProjectNode]:
        """Iterate over every node in depth-first pre-order, root first."""
        yield from PreOrderIter(self.get_tree())

    def find(self, relative_path: str) -> Optional[ProjectNode]:
        """Look up a node by its root-relative path.

        A trailing slash is accepted for directories. The empty string returns the root.

        Example:
            >>> tree = ProjectTree("my-app")  # doctest: +SKIP
            >>> tree.find("src/main.py").name  # doctest: +SKIP
            'main.py'
        """
        wanted = relative_path.strip("/")
        node = self.get_tree()
        if not wanted:
            return node
        for part in wanted.split("/"):
            node = next((child for child in node.children if child.name == part), None)
            if node is None:
                return None
        return node

    def refresh(self) -> None:
        """Rescan the filesystem, discarding all visibility and cost state."""
        self._tree = None
        self._file_count = 0
        self._directory_count = 0
        self._build_tree()


def build_tree(
    root_path: PathType,
    file_system: Optional[FileSystem] = None,
    diagnostics: Optional[DiagnosticLog] = None,
) -> ProjectNode:
    """Scan a directory and return the root of its unfiltered tree.

    Args:
        root_path: Directory to scan.
        file_system: Filesystem collaborator. Defaults to LocalFileSystem().
        diagnostics: Log receiving scan warnings.

    Returns:
        The root node. It is INCLUDED; every other node is UNRESOLVED.

    Raises:
        FileNotFoundError: If the root path doesn't exist.
        NotADirectoryError: If the root path isn't a directory.
    """
    return ProjectTree(root_path, file_system, diagnostics).get_tree()


def count_nodes(root: ProjectNode) -> "tuple[int, int]":
    """Return (files, directories) below root, the root itself not counted."""
    files = directories = 0
    for node in PreOrderIter(root):
        if node is root:
            continue
        if node.is_container:
            directories += 1
        else:
            files += 1
    return files, directories
