from dataclasses import dataclass
from enum import Enum
from os import PathLike
from typing import Callable, Optional, Union

# Complete path type including strings and any path-like object
PathType = Union[str, PathLike[str]]

# A cost function maps decoded text to a non-negative cost (e.g. a token count)
CostFunction = Callable[[str], int]


class Visibility(str, Enum):
    """Visibility of a node after exclusion resolution.

    Attributes:
        UNRESOLVED: The node has not been through a resolution pass yet.
        INCLUDED: The node is part of the ingested output.
        EXCLUDED: The node and everything below it is left out.
    """

    UNRESOLVED = "unresolved"
    INCLUDED = "included"
    EXCLUDED = "excluded"


class CostStatus(str, Enum):
    """Lifecycle of a leaf's cost computation."""

    UNSET = "unset"
    PENDING = "pending"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class CostState:
    """Immutable cost state of a leaf node.

    Only leaves carry a cost state that matters; a container's cost is always
    derived from its children on demand.

    Attributes:
        status: Where the computation stands.
        count: The resolved cost, or None unless status is RESOLVED.

    Example:
        >>> CostState.resolved(12).count
        12
        >>> CostState.UNSET.is_resolved
        False
    """

    status: CostStatus
    count: Optional[int] = None

    # Class-level singletons, assigned below the class body
    UNSET = None  # type: ignore[assignment]
    PENDING = None  # type: ignore[assignment]

    @classmethod
    def resolved(cls, count: int) -> "CostState":
        """Create a resolved state.

        Args:
            count: The computed cost. Must not be negative.

        Raises:
            ValueError: If count is negative.
        """
        if count < 0:
            raise ValueError(f"Cost must be non-negative, got {count}")
        return cls(CostStatus.RESOLVED, count)

    @property
    def is_resolved(self) -> bool:
        return self.status is CostStatus.RESOLVED

    @property
    def is_pending(self) -> bool:
        return self.status is CostStatus.PENDING

    def __str__(self) -> str:
        if self.is_resolved:
            return f"resolved({self.count})"
        return self.status.value


CostState.UNSET = CostState(CostStatus.UNSET)  # type: ignore[misc]
CostState.PENDING = CostState(CostStatus.PENDING)  # type: ignore[misc]
