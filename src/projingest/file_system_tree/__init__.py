"""Project tree model: nodes, the tree builder and the filesystem collaborator."""

from .binary_detector import is_binary_content
from .file_system import BINARY, ChildEntry, FileSystem, LocalFileSystem, resolve_path
from .file_system_node import ProjectNode
from .file_system_tree import ProjectTree, build_tree, count_nodes

__all__ = [
    "BINARY",
    "ChildEntry",
    "FileSystem",
    "LocalFileSystem",
    "ProjectNode",
    "ProjectTree",
    "build_tree",
    "count_nodes",
    "is_binary_content",
    "resolve_path",
]
