"""Assembly of the final project document.

The assembler is a read-only walk over a resolved tree. It never changes
visibility or cost state; it only reads them, together with file content from
the filesystem collaborator.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from anytree import ContStyle, PreOrderIter, RenderTree

from projingest.config import IngestOptions
from projingest.diagnostics import DiagnosticLog
from projingest.exceptions import AccessDenied, ContentUndecodable
from projingest.file_system_tree.file_system import BINARY, FileSystem, LocalFileSystem
from projingest.file_system_tree.file_system_node import ProjectNode
from projingest.output_strategies.base_strategy import OutputStrategy
from projingest.output_strategies.markdown_strategy import MarkdownOutputStrategy

logger = logging.getLogger(__name__)


@dataclass
class IngestDocument:
    """The assembled document and what went into it.

    Attributes:
        text: The complete document.
        outline: The rendered outline of the visible tree, even when it is not
            part of the text.
        files: Relative paths of the files written to the document, in order.
        skipped: Relative paths of visible files left out because they are
            binary, unreadable or not valid text.
        token_count: Token count of the whole text, if it was measured.
    """

    text: str
    outline: str = ""
    files: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    token_count: Optional[int] = None


def _visible_children(children: "tuple[ProjectNode, ...]") -> "list[ProjectNode]":
    return [child for child in children if child.is_visible]


def collect_files(root: ProjectNode) -> List[ProjectNode]:
    """Return the included files below root, sorted by absolute path.

    Excluded subtrees are not entered.

    Example:
        >>> [node.relative_path for node in collect_files(root)]  # doctest: +SKIP
        ['README.md', 'src/main.go']
    """
    files = [
        node
        for node in PreOrderIter(root, stop=lambda n: not n.is_visible and n is not root)
        if not node.is_container
    ]
    return sorted(files, key=lambda node: str(node.abs_path))


def render_outline(root: ProjectNode) -> str:
    """Render the visible tree with box-drawing connectors.

    The root line is the root's name. Each level lists only included children,
    so the last included sibling gets the terminal connector.

    Example:
        >>> print(render_outline(root), end='')  # doctest: +SKIP
        my-app
        ├── README.md
        └── src
            └── main.go
    """
    lines = []
    for pre, _, node in RenderTree(root, style=ContStyle(), childiter=_visible_children):
        lines.append(f"{pre}{node.name}\n")
    return "".join(lines)


class Assembler:
    """Walks a resolved tree and produces the project document.

    Attributes:
        file_system (FileSystem): Collaborator used to read file content.
        strategy (OutputStrategy): Formatting of the document.
        diagnostics (DiagnosticLog): Receives progress and skipped-file messages.
    """

    def __init__(
        self,
        file_system: Optional[FileSystem] = None,
        strategy: Optional[OutputStrategy] = None,
        diagnostics: Optional[DiagnosticLog] = None,
    ) -> None:
        self.file_system = file_system if file_system is not None else LocalFileSystem()
        self.strategy = strategy if strategy is not None else MarkdownOutputStrategy()
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticLog(__name__)

    def assemble(self, root: ProjectNode, options: Optional[IngestOptions] = None) -> IngestDocument:
        """Produce the document for the visible part of the tree.

        Args:
            root: Root of a resolved tree.
            options: Controls whether the outline is included. Defaults to IngestOptions().

        Returns:
            The document. Unreadable, undecodable and binary files are listed in
            ``skipped`` and stay in the outline.
        """
        options = options if options is not None else IngestOptions()
        self.diagnostics.info(f"Processing project: {root.name}")

        files = collect_files(root)
        self.diagnostics.info(f"Found {len(files)} files to process (after filtering).")

        outline = render_outline(root)
        parts = [self.strategy.format_title(root.name)]
        if options.include_structure:
            parts.append(self.strategy.format_structure(outline))
            self.diagnostics.debug("Added project structure to the output.")

        document = IngestDocument(text="", outline=outline)
        for index, node in enumerate(files, start=1):
            logger.debug("Processing (%d/%d): %s", index, len(files), node.relative_path)
            try:
                content = self.file_system.read_text(node.abs_path)
            except (AccessDenied, ContentUndecodable) as e:
                self.diagnostics.warning(f"Could not read file {node.relative_path}: {e}", path=str(node.abs_path))
                document.skipped.append(node.relative_path)
                continue

            if content is BINARY:
                self.diagnostics.info(f"Skipping binary file: {node.relative_path}", path=str(node.abs_path))
                document.skipped.append(node.relative_path)
                continue

            parts.append(self.strategy.format_start(node.relative_path, node.extension))
            parts.append(self.strategy.format_content(content))  # type: ignore[arg-type]
            parts.append(self.strategy.format_end())
            document.files.append(node.relative_path)

        document.text = "".join(parts)
        self.diagnostics.info(
            f"Ingestion complete: {len(document.files)} files written, {len(document.skipped)} skipped."
        )
        return document


def assemble(
    root: ProjectNode,
    options: Optional[IngestOptions] = None,
    file_system: Optional[FileSystem] = None,
    diagnostics: Optional[DiagnosticLog] = None,
) -> IngestDocument:
    """Produce the Markdown document for the visible part of a resolved tree.

    Example:
        >>> document = assemble(root, IngestOptions(include_structure=True))  # doctest: +SKIP
        >>> document.text.splitlines()[0]  # doctest: +SKIP
        '# Project: my-app'
    """
    return Assembler(file_system, diagnostics=diagnostics).assemble(root, options)
