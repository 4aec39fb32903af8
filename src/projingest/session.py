"""Orchestration of one ingestion session.

An IngestSession holds one loaded folder together with its pattern blocks and
drives the pipeline stages explicitly:

    scan -> resolve -> compute costs -> assemble

Nothing runs implicitly. Changing patterns re-runs the resolver, and the caller
decides when costs are recomputed.
"""

import functools
import logging
from typing import Callable, List, Optional

from anytree import PreOrderIter

from projingest.assembler import Assembler, IngestDocument
from projingest.config import DEFAULT_EXCLUDE_BLOCK, IngestOptions
from projingest.cost_engine import CostEngine, CostPassResult, visible_leaves
from projingest.diagnostics import DiagnosticLog
from projingest.exclusion_resolver import ExclusionResolver, ResolutionSummary
from projingest.file_system_tree.file_system import FileSystem, LocalFileSystem, resolve_path
from projingest.file_system_tree.file_system_node import ProjectNode
from projingest.file_system_tree.file_system_tree import ProjectTree
from projingest.patterns import parse_pattern_block
from projingest.settings import KeyValueStore, MemoryStore, PatternMemory, RecentFolders
from projingest.token_counter import acquire as acquire_token_counter
from projingest.types import CostFunction, PathType

logger = logging.getLogger(__name__)


class IngestSession:
    """A loaded project folder with its patterns, costs and output.

    Attributes:
        root_path (Path): Absolute path of the project folder.
        options (IngestOptions): Model and output options.
        diagnostics (DiagnosticLog): Shared by every stage of the session.
        exclude_block (str): Raw exclude pattern block.
        include_block (str): Raw include pattern block.

    Example:
        >>> session = IngestSession("my-app")  # doctest: +SKIP
        >>> session.load()  # doctest: +SKIP
        >>> session.compute_costs_sync().total  # doctest: +SKIP
        18234
        >>> print(session.ingest().text[:20])  # doctest: +SKIP
        # Project: my-app
    """

    def __init__(
        self,
        root_path: PathType,
        options: Optional[IngestOptions] = None,
        file_system: Optional[FileSystem] = None,
        store: Optional[KeyValueStore] = None,
        acquire: Callable[[str], CostFunction] = acquire_token_counter,
        diagnostics: Optional[DiagnosticLog] = None,
    ) -> None:
        self.root_path = resolve_path(root_path)
        self.options = options if options is not None else IngestOptions()
        self.file_system = file_system if file_system is not None else LocalFileSystem()
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticLog(__name__)
        self.store = store if store is not None else MemoryStore()
        self.acquire = acquire

        self.pattern_memory = PatternMemory(self.store)
        self.recents = RecentFolders(self.store, diagnostics=self.diagnostics)
        self.resolver = ExclusionResolver(self.diagnostics)
        self.engine = CostEngine(self.file_system, self.diagnostics)
        self.assembler = Assembler(self.file_system, diagnostics=self.diagnostics)

        self.exclude_block = DEFAULT_EXCLUDE_BLOCK
        self.include_block = ""
        self._tree: Optional[ProjectTree] = None

    @property
    def root(self) -> ProjectNode:
        """Root node of the loaded tree.

        Raises:
            RuntimeError: If load() has not been called.
        """
        if self._tree is None:
            raise RuntimeError("No folder loaded; call load() first")
        return self._tree.get_tree()

    @property
    def exclude_patterns(self) -> List[str]:
        return parse_pattern_block(self.exclude_block)

    @property
    def include_patterns(self) -> List[str]:
        return parse_pattern_block(self.include_block)

    def load(self, remember: bool = True) -> ResolutionSummary:
        """Scan the folder, restore its remembered patterns and resolve.

        Args:
            remember: Whether to restore the patterns saved for this folder and
                record it among the recent folders.

        Raises:
            FileNotFoundError: If the folder doesn't exist.
            NotADirectoryError: If the path isn't a directory.
        """
        self.engine.cancel()
        if remember:
            saved_exclude = self.pattern_memory.load_exclude(self.root_path)
            saved_include = self.pattern_memory.load_include(self.root_path)
            if saved_exclude is not None or saved_include is not None:
                self.exclude_block = saved_exclude if saved_exclude is not None else self.exclude_block
                self.include_block = saved_include if saved_include is not None else self.include_block
                self.diagnostics.info(f"Loaded ignore patterns for '{self.root_path.name}'.")

        self.diagnostics.info(f"Loading folder contents: {self.root_path}")
        self._tree = ProjectTree(self.root_path, self.file_system, self.diagnostics)
        self._tree.get_tree()
        self.diagnostics.info("File tree populated.")

        if remember:
            self.recents.add(self.root_path)
        return self.resolve()

    def resolve(self) -> ResolutionSummary:
        """Re-run the exclusion resolver with the current pattern blocks."""
        return self.resolver.resolve(self.root, self.exclude_patterns, self.include_patterns)

    def update_patterns(self, exclude: Optional[str] = None, include: Optional[str] = None) -> ResolutionSummary:
        """Replace one or both pattern blocks, remember them and resolve.

        Costs already computed stay valid; files that became visible are still
        UNSET until compute_missing_costs() runs.
        """
        if exclude is not None:
            self.exclude_block = exclude
        if include is not None:
            self.include_block = include
        self.pattern_memory.save(self.root_path, self.exclude_block, self.include_block)
        return self.resolve()

    def toggle_exclusion(self, node: ProjectNode) -> ResolutionSummary:
        """Exclude a node, or include it again if it was excluded by its own selector.

        Comment lines in the exclude block are kept.
        """
        lines = [line.strip() for line in self.exclude_block.splitlines() if line.strip()]
        toggled = self.resolver.toggle_exclusion(node, lines)
        if toggled == lines:
            return self.resolve()
        if len(toggled) > len(lines):
            self.diagnostics.info(f"Excluded '{node.selector}'")
        else:
            self.diagnostics.info(f"Included '{node.selector}'")
        return self.update_patterns(exclude="\n".join(toggled))

    def _acquire_for_model(self) -> Callable[[], CostFunction]:
        return functools.partial(self.acquire, self.options.model)

    async def compute_costs(self) -> CostPassResult:
        """Recompute every visible file's cost with the configured model."""
        return await self.engine.compute_all(self.root, self._acquire_for_model())

    async def compute_missing_costs(self) -> CostPassResult:
        """Compute costs only for visible files that have none yet."""
        return await self.engine.compute_missing(self.root)

    def compute_costs_sync(self) -> CostPassResult:
        return self.engine.compute_all_sync(self.root, self._acquire_for_model())

    def compute_missing_costs_sync(self) -> CostPassResult:
        return self.engine.compute_missing_sync(self.root)

    def ingest(self) -> IngestDocument:
        """Assemble the document and, if token counting is on, count its tokens.

        The cost function of the latest cost pass is reused when there is one.
        If none can be acquired, or counting the document fails, the document has
        no token count and a warning is recorded.
        """
        self.diagnostics.info("Starting ingest...")
        document = self.assembler.assemble(self.root, self.options)
        if not self.options.count_tokens:
            return document

        cost_fn = self.engine.cost_function
        if cost_fn is None:
            try:
                cost_fn = self.acquire(self.options.model)
            except Exception as e:
                self.diagnostics.warning(f"Document token count unavailable: {e}")
                return document
        try:
            document.token_count = cost_fn(document.text)
        except Exception as e:
            self.diagnostics.warning(f"Could not count document tokens: {e}")
        return document

    @property
    def total_cost(self) -> int:
        """Displayed cost of the root: the sum over every visible file."""
        return self.engine.displayed_cost(self.root)

    @property
    def file_count(self) -> int:
        """Number of visible files."""
        return sum(1 for _ in visible_leaves(self.root))

    @property
    def directory_count(self) -> int:
        """Number of visible directories, the root not counted."""
        root = self.root
        visible = PreOrderIter(root, stop=lambda n: n.is_excluded)
        return sum(1 for node in visible if node.is_container and node is not root)
