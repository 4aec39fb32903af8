"""Concurrent cost computation over a resolved project tree.

A cost pass walks the tree with one asyncio task per child of every container.
Each visible file is read and measured in the default thread pool, which bounds
the real parallelism. Container costs are never stored: ProjectNode derives them
from the children on every read.

Every pass is tagged with a generation number. Starting a new pass (or calling
cancel()) bumps the generation, and all writes from an older pass are dropped,
so a superseded pass can never overwrite the state of a newer one.
"""

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from anytree import PreOrderIter

from projingest.diagnostics import DiagnosticLog
from projingest.exceptions import AccessDenied, ContentUndecodable, EncoderUnavailable
from projingest.file_system_tree.file_system import BINARY, FileSystem, LocalFileSystem
from projingest.file_system_tree.file_system_node import ProjectNode
from projingest.types import CostFunction, CostState

logger = logging.getLogger(__name__)

# Zero-argument callable returning the cost function for one pass
Acquire = Callable[[], CostFunction]


@dataclass
class CostPassResult:
    """Outcome of one cost pass.

    Attributes:
        generation: Generation number the pass ran under.
        resolved: Leaves whose cost was written by this pass.
        zeroed: Of those, leaves resolved to 0 because they could not be measured.
        aborted: The cost function could not be acquired; nothing was computed.
        superseded: A newer pass or a cancel() took over before this one finished.
        total: Displayed cost of the root when the pass ended.
    """

    generation: int
    resolved: int = 0
    zeroed: int = 0
    aborted: bool = False
    superseded: bool = False
    total: int = 0


def visible_leaves(root: ProjectNode) -> Iterator[ProjectNode]:
    """Yield the files not excluded, in pre-order; excluded subtrees are not entered."""
    for node in PreOrderIter(root, stop=lambda n: n.is_excluded):
        if not node.is_container:
            yield node


class CostEngine:
    """Computes and aggregates per-file costs.

    All writes to ``cost_state`` happen on the event loop thread while holding
    the engine lock, and only if the writing pass is still the current
    generation. Readers on other threads can take a consistent aggregate with
    displayed_cost().

    Attributes:
        file_system (FileSystem): Collaborator used to read file content.
        diagnostics (DiagnosticLog): Receives per-file warnings and pass errors.

    Example:
        >>> engine = CostEngine()
        >>> result = engine.compute_all_sync(root, lambda: len)  # doctest: +SKIP
        >>> result.total == root.displayed_cost  # doctest: +SKIP
        True
    """

    def __init__(self, file_system: Optional[FileSystem] = None, diagnostics: Optional[DiagnosticLog] = None):
        self.file_system = file_system if file_system is not None else LocalFileSystem()
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticLog(__name__)
        self._lock = threading.RLock()
        self._generation = 0
        self._cost_fn: Optional[CostFunction] = None
        self._root: Optional[ProjectNode] = None

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    @property
    def cost_function(self) -> Optional[CostFunction]:
        """The cost function acquired by the latest pass, if any."""
        with self._lock:
            return self._cost_fn

    def _begin_pass(self, root: ProjectNode) -> int:
        """Start a generation and reset every node to UNSET in one atomic step."""
        with self._lock:
            self._generation += 1
            self._cost_fn = None
            self._root = root
            for node in PreOrderIter(root):
                node.cost_state = CostState.UNSET
            return self._generation

    def _write(self, node: ProjectNode, generation: int, state: CostState) -> bool:
        with self._lock:
            if generation != self._generation:
                return False
            node.cost_state = state
            return True

    def _revert_pending(self, root: ProjectNode, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            for node in PreOrderIter(root):
                if node.cost_state.is_pending:
                    node.cost_state = CostState.UNSET

    def _measure(self, node: ProjectNode, cost_fn: CostFunction) -> Optional[int]:
        """Read and measure one file. Runs in a worker thread.

        Returns:
            The cost, or None for binary content.
        """
        content = self.file_system.read_text(node.abs_path)
        if content is BINARY:
            return None
        count = int(cost_fn(content))  # type: ignore[arg-type]
        if count < 0:
            raise ValueError(f"cost function returned {count}")
        return count

    async def _compute_leaf(
        self, node: ProjectNode, cost_fn: CostFunction, generation: int, result: CostPassResult
    ) -> None:
        if not self._write(node, generation, CostState.PENDING):
            return

        zeroed = False
        try:
            count = await asyncio.to_thread(self._measure, node, cost_fn)
        except (AccessDenied, ContentUndecodable) as e:
            self.diagnostics.warning(f"Could not read {node.relative_path}: {e}", path=str(node.abs_path))
            count, zeroed = 0, True
        except Exception as e:
            self.diagnostics.warning(f"Could not count tokens for {node.relative_path}: {e}", path=str(node.abs_path))
            count, zeroed = 0, True
        else:
            if count is None:
                logger.debug("Binary file counts as 0: %s", node.relative_path)
                count, zeroed = 0, True

        if self._write(node, generation, CostState.resolved(count)):
            result.resolved += 1
            if zeroed:
                result.zeroed += 1

    async def _visit(self, node: ProjectNode, cost_fn: CostFunction, generation: int, result: CostPassResult) -> None:
        if node.is_excluded:
            return
        if node.is_container:
            await asyncio.gather(*(self._visit(child, cost_fn, generation, result) for child in node.children))
        else:
            await self._compute_leaf(node, cost_fn, generation, result)

    def _finish(self, root: ProjectNode, result: CostPassResult) -> CostPassResult:
        with self._lock:
            result.superseded = result.generation != self._generation
            result.total = root.displayed_cost
        return result

    async def compute_all(self, root: ProjectNode, acquire: Acquire) -> CostPassResult:
        """Recompute the cost of every visible file.

        Every node is reset to UNSET before anything else happens, then the cost
        function is acquired once and shared by all files of the pass. Excluded
        subtrees are skipped.

        Args:
            root: Root of a resolved tree.
            acquire: Zero-argument callable returning the cost function. Called
                once, in a worker thread.

        Returns:
            The outcome of the pass. Acquisition failure is reported through
            ``aborted`` and an error diagnostic, never raised.

        Raises:
            asyncio.CancelledError: If the awaiting task is cancelled. Files this
                pass left PENDING are reverted to UNSET first.
        """
        generation = self._begin_pass(root)
        result = CostPassResult(generation)
        try:
            try:
                cost_fn = await asyncio.to_thread(acquire)
            except EncoderUnavailable as e:
                self.diagnostics.error(f"Token calculation aborted: {e}")
                result.aborted = True
                return self._finish(root, result)
            except Exception as e:
                self.diagnostics.error(f"Token calculation aborted: could not load tokenizer: {e}")
                result.aborted = True
                return self._finish(root, result)

            with self._lock:
                if generation != self._generation:
                    result.superseded = True
                    return result
                self._cost_fn = cost_fn

            await self._visit(root, cost_fn, generation, result)
        except asyncio.CancelledError:
            self._revert_pending(root, generation)
            raise

        self._finish(root, result)
        if result.superseded:
            logger.debug("Cost pass %d was superseded", generation)
        else:
            self.diagnostics.info(f"Token calculation complete: {result.total} tokens in {result.resolved} files.")
        return result

    async def compute_missing(self, root: ProjectNode) -> CostPassResult:
        """Compute only the visible files that are still UNSET.

        Used after a pattern change makes new files visible. The cost function of
        the current generation is reused; if there is none (no pass has acquired
        one yet) nothing happens.
        """
        with self._lock:
            generation = self._generation
            cost_fn = self._cost_fn
            missing = [leaf for leaf in visible_leaves(root) if leaf.cost_state == CostState.UNSET]
        result = CostPassResult(generation)
        if cost_fn is None:
            logger.debug("No cost function available; skipping %d files", len(missing))
            return self._finish(root, result)

        try:
            await asyncio.gather(*(self._compute_leaf(leaf, cost_fn, generation, result) for leaf in missing))
        except asyncio.CancelledError:
            self._revert_pending(root, generation)
            raise
        return self._finish(root, result)

    def cancel(self) -> None:
        """Supersede any in-flight pass. Its PENDING files go back to UNSET."""
        with self._lock:
            self._generation += 1
            if self._root is not None:
                for node in PreOrderIter(self._root):
                    if node.cost_state.is_pending:
                        node.cost_state = CostState.UNSET
        logger.debug("Cost computation cancelled")

    def displayed_cost(self, node: ProjectNode) -> int:
        """Read a node's aggregate cost without interleaving with engine writes."""
        with self._lock:
            return node.displayed_cost

    def compute_all_sync(self, root: ProjectNode, acquire: Acquire) -> CostPassResult:
        """Run compute_all on a fresh event loop, for synchronous callers."""
        return asyncio.run(self.compute_all(root, acquire))

    def compute_missing_sync(self, root: ProjectNode) -> CostPassResult:
        """Run compute_missing on a fresh event loop, for synchronous callers."""
        return asyncio.run(self.compute_missing(root))
