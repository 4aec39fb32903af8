"""Filesystem access used by the tree builder, cost engine and assembler.

The core never touches the disk directly; it goes through a FileSystem object.
LocalFileSystem is the real implementation. Tests and embedding applications
can supply their own.
"""

import logging
import os
from pathlib import Path
from typing import List, NamedTuple, Optional, Protocol, Union

from projingest.exceptions import AccessDenied, ContentUndecodable
from projingest.file_system_tree.binary_detector import is_binary_content
from projingest.scan_rules.base_rules import BaseScanRules
from projingest.scan_rules.hidden_rules import HiddenEntryRules
from projingest.types import PathType

logger = logging.getLogger(__name__)


class _BinaryMarker:
    """Sentinel returned by read_text for binary content."""

    _instance: Optional["_BinaryMarker"] = None

    def __new__(cls) -> "_BinaryMarker":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "BINARY"


BINARY = _BinaryMarker()

TextOrBinary = Union[str, _BinaryMarker]


class ChildEntry(NamedTuple):
    """One entry of a directory listing."""

    name: str
    is_container: bool


class FileSystem(Protocol):
    """What the core needs from a filesystem."""

    def list_children(self, path: Path, relative_path: str = "") -> List[ChildEntry]:
        """List a directory's visible entries, sorted by name.

        Raises:
            AccessDenied: If the directory cannot be enumerated.
        """
        ...

    def read_text(self, path: Path) -> TextOrBinary:
        """Read a file as text, or return BINARY for binary content.

        Raises:
            AccessDenied: If the file cannot be read.
            ContentUndecodable: If the content is not valid text.
        """
        ...


class LocalFileSystem:
    """FileSystem backed by the local disk.

    Entries rejected by the scan rules are filtered out of every listing, so
    they never become tree nodes. By default hidden entries are skipped.
    Symbolic links are listed, but a link to a directory is treated as a leaf
    so that link loops cannot recurse.

    Attributes:
        scan_rules (BaseScanRules): Rules applied to every listed entry.
        encoding (str): Text encoding used by read_text.

    Example:
        >>> fs = LocalFileSystem()
        >>> [entry.name for entry in fs.list_children(Path("project"))]  # doctest: +SKIP
        ['README.md', 'src']
    """

    def __init__(self, scan_rules: Optional[BaseScanRules] = None, encoding: str = "utf-8") -> None:
        self.scan_rules = scan_rules if scan_rules is not None else HiddenEntryRules()
        self.encoding = encoding

    def list_children(self, path: Path, relative_path: str = "") -> List[ChildEntry]:
        """List a directory's entries that survive the scan rules.

        Args:
            path: Absolute path of the directory.
            relative_path: Root-relative path of the directory, used for rule matching.

        Returns:
            Entries sorted by name.

        Raises:
            AccessDenied: If the directory cannot be enumerated.
        """
        try:
            names = sorted(os.listdir(path))
        except OSError as e:
            raise AccessDenied(str(path), e.strerror or str(e)) from e

        entries = []
        for name in names:
            child_path = path / name
            try:
                is_container = child_path.is_dir() and not child_path.is_symlink()
            except OSError:
                is_container = False

            child_relative = f"{relative_path}/{name}" if relative_path else name
            rule_path = child_relative + "/" if is_container else child_relative
            if self.scan_rules.exclude(rule_path):
                logger.debug("Scan rules skip %s", rule_path)
                continue
            entries.append(ChildEntry(name, is_container))
        return entries

    def read_bytes(self, path: Path) -> bytes:
        """Read raw file content.

        Raises:
            AccessDenied: If the file cannot be read.
        """
        try:
            with open(path, "rb") as file:
                return file.read()
        except OSError as e:
            raise AccessDenied(str(path), e.strerror or str(e)) from e

    def read_text(self, path: Path) -> TextOrBinary:
        """Read a file as text.

        Returns:
            The decoded text, or BINARY if the raw content contains a null byte.

        Raises:
            AccessDenied: If the file cannot be read.
            ContentUndecodable: If the content is not valid in the configured encoding.
        """
        data = self.read_bytes(path)
        if is_binary_content(data):
            return BINARY
        try:
            return data.decode(self.encoding)
        except UnicodeDecodeError as e:
            raise ContentUndecodable(str(path), f"not valid {self.encoding}") from e


def resolve_path(path: PathType) -> Path:
    """Return an absolute, normalised Path."""
    return Path(os.path.abspath(os.fspath(path)))
