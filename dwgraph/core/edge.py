from __future__ import annotations

from dataclasses import dataclass
from functools import total_ordering
from typing import Any, NamedTuple, Optional

from .structure import EdgeKind


class EdgeValue(NamedTuple):
    """Detached copy of one edge, as handed out by cursors and iteration.

    ``weight`` is ``None`` for unweighted edges.
    """

    src: Any
    dst: Any
    weight: Optional[Any] = None


@total_ordering
@dataclass(frozen=True)
class Edge:
    """
    Immutable directed edge ``src -> dst``, weighted or unweighted.

    Parameters
    ----------
    src : hashable, orderable
        Source node label.
    dst : hashable, orderable
        Destination node label.
    kind : EdgeKind
        Variant tag. Use :meth:`Edge.weighted` / :meth:`Edge.unweighted`
        rather than passing it by hand.
    weight : object, optional
        Weight value; must be ``None`` exactly when ``kind`` is UNWEIGHTED.

    Notes
    -----
    - Equality is structural over the identity triple: same variant, same
      endpoints, and (weighted only) equal weights.
    - Ordering is the canonical edge order: ``src``, then ``dst``, then
      unweighted before weighted, then ascending weight.
    - Instances are never mutated; renaming a node produces new edges.
    """

    src: Any
    dst: Any
    kind: EdgeKind = EdgeKind.UNWEIGHTED
    weight: Any = None

    def __post_init__(self):
        # accept the plain string values ("weighted" / "unweighted") too
        object.__setattr__(self, "kind", EdgeKind(self.kind))
        if self.kind is EdgeKind.WEIGHTED and self.weight is None:
            raise ValueError("weighted edge requires a weight")
        if self.kind is EdgeKind.UNWEIGHTED and self.weight is not None:
            raise ValueError("unweighted edge cannot carry a weight")

    # Construction

    @classmethod
    def weighted(cls, src, dst, weight) -> "Edge":
        return cls(src, dst, EdgeKind.WEIGHTED, weight)

    @classmethod
    def unweighted(cls, src, dst) -> "Edge":
        return cls(src, dst, EdgeKind.UNWEIGHTED, None)

    @classmethod
    def make(cls, src, dst, weight=None) -> "Edge":
        """Build the variant implied by ``weight`` (``None`` means unweighted)."""
        if weight is None:
            return cls.unweighted(src, dst)
        return cls.weighted(src, dst, weight)

    # Queries

    def print_edge(self) -> str:
        """
        Canonical one-line text form.

        Returns
        -------
        str
            ``"src -> dst | U"`` or ``"src -> dst | W | weight"``.
        """
        line = f"{self.src} -> {self.dst} | {self.kind.tag}"
        return f"{line} | {self.weight}" if self.is_weighted() else line

    def is_weighted(self) -> bool:
        return self.kind is EdgeKind.WEIGHTED

    def get_weight(self):
        """Weight value, or ``None`` when the edge is unweighted."""
        return self.weight

    def get_nodes(self) -> tuple:
        return (self.src, self.dst)

    def matches(self, src, dst, weight=None) -> bool:
        """True if this edge has the identity triple ``(src, dst, weight-or-absent)``."""
        if self.src != src or self.dst != dst:
            return False
        if weight is None:
            return self.kind is EdgeKind.UNWEIGHTED
        return self.kind is EdgeKind.WEIGHTED and self.weight == weight

    def sort_key(self) -> tuple:
        if self.kind is EdgeKind.WEIGHTED:
            return (self.src, self.dst, 1, self.weight)
        return (self.src, self.dst, 0)

    def value(self) -> EdgeValue:
        return EdgeValue(self.src, self.dst, self.weight)

    # Derivation

    def renamed(self, old, new) -> "Edge":
        """Copy with every ``old`` endpoint replaced by ``new``."""
        src = new if self.src == old else self.src
        dst = new if self.dst == old else self.dst
        if src is self.src and dst is self.dst:
            return self
        return Edge(src, dst, self.kind, self.weight)

    def __lt__(self, other):
        if not isinstance(other, Edge):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __str__(self) -> str:
        return self.print_edge()
