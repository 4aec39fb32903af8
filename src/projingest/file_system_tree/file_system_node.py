"""Node representation for project entries in the tree."""

from pathlib import Path
from typing import Any, Optional

from anytree import Node, PreOrderIter

from projingest.types import CostState, Visibility


class ProjectNode(Node):  # type: ignore
    """Node representing one file or directory of an ingested project.

    Extends anytree.Node with the filesystem identity of the entry and the two
    pieces of mutable state the core maintains: visibility (written by the
    exclusion resolver) and cost state (written by the cost engine). Children
    are owned by their parent's children tuple; the parent link is only used to
    walk upwards.

    Two nodes are equal when they stand for the same absolute path.

    Attributes:
        name (str): Basename of the entry; for the root, the folder name.
        abs_path (Path): Absolute path of the entry. Read-only.
        is_container (bool): True for directories.
        relative_path (str): Root-relative POSIX path; "" for the root.
        visibility (Visibility): Current visibility decision.
        cost_state (CostState): Cost computation state; meaningful for leaves only.
        children (tuple[ProjectNode]): Child nodes sorted by name (inherited from anytree.Node).

    Example:
        >>> root = ProjectNode("app", Path("/srv/app"), is_container=True)
        >>> src = ProjectNode("src", Path("/srv/app/src"), is_container=True, relative_path="src", parent=root)
        >>> src.selector
        'src/'
        >>> src.parent is root
        True
    """

    def __init__(
        self,
        name: str,
        path: Path,
        is_container: bool = False,
        relative_path: str = "",
        parent: Optional["ProjectNode"] = None,
        **kwargs: Any,
    ) -> None:
        self._abs_path = Path(path)
        self.is_container = is_container
        self.relative_path = relative_path
        self.visibility = Visibility.UNRESOLVED
        self.cost_state = CostState.UNSET
        super().__init__(name, parent, **kwargs)

    @property
    def abs_path(self) -> Path:
        return self._abs_path

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def selector(self) -> str:
        """The exclude pattern that selects exactly this node.

        Directories carry a trailing slash. The root has no selector ("").
        """
        if self.is_container and self.relative_path:
            return self.relative_path + "/"
        return self.relative_path

    @property
    def extension(self) -> str:
        """File extension without the dot, used as the fenced-block language hint."""
        return self._abs_path.suffix[1:] if self._abs_path.suffix else ""

    @property
    def is_visible(self) -> bool:
        return self.visibility is Visibility.INCLUDED

    @property
    def is_excluded(self) -> bool:
        return self.visibility is Visibility.EXCLUDED

    @property
    def displayed_cost(self) -> int:
        """Cost shown for this node, derived on every access.

        Excluded nodes show 0 even if they hold a resolved value. A container
        shows the sum over its children, so excluding a child lowers every
        ancestor's cost at once without any recomputation.
        """
        if self.is_excluded:
            return 0
        if self.is_container:
            return sum(child.displayed_cost for child in self.children)
        if self.cost_state.is_resolved:
            return self.cost_state.count or 0
        return 0

    @property
    def is_pending(self) -> bool:
        """Whether a visible part of this subtree is still being computed."""
        if self.is_excluded:
            return False
        if self.is_container:
            return any(child.is_pending for child in self.children)
        return self.cost_state.is_pending

    def files(self) -> "list[ProjectNode]":
        """All files below (or at) this node, visible or not, in pre-order."""
        return [node for node in PreOrderIter(self) if not node.is_container]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProjectNode):
            return NotImplemented
        return self._abs_path == other._abs_path

    def __hash__(self) -> int:
        return hash(self._abs_path)

    def __repr__(self) -> str:
        label = self.selector or self.name
        return f"{self.__class__.__name__}({label!r}, visibility={self.visibility.value}, cost={self.cost_state})"
