from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .edge import EdgeValue

if TYPE_CHECKING:
    from .graph import Graph


class Cursor:
    """
    Bidirectional position over a graph's edges in canonical order.

    A cursor is the pair ``(node_pos, edge_pos)``: an index into the sorted
    node labels and an index into that node's sorted outgoing edges. Nodes
    without outgoing edges are skipped. The end position is
    ``(number_of_nodes, 0)``.

    Cursors are immutable values: :meth:`next` and :meth:`prev` return new
    cursors. Dereferencing (:attr:`value`) returns an :class:`EdgeValue`
    copy, never a live edge.

    Notes
    -----
    Any mutation of the graph (node or edge insert, rename, merge, erase,
    clear) invalidates every cursor obtained before it. Using a stale cursor
    is a caller error; it is not detected.
    """

    __slots__ = ("_graph", "_node_pos", "_edge_pos")

    def __init__(self, graph: Optional["Graph"] = None, node_pos: int = 0, edge_pos: int = 0):
        self._graph = graph
        self._node_pos = node_pos
        self._edge_pos = edge_pos

    # Construction helpers

    @classmethod
    def first_from(cls, graph: "Graph", node_pos: int) -> "Cursor":
        """First edge of the first node at or after ``node_pos`` that has any; else end."""
        nodes = graph._nodes
        for pos in range(node_pos, len(nodes)):
            if graph._adjacency.get(nodes[pos]):
                return cls(graph, pos, 0)
        return cls(graph, len(nodes), 0)

    @classmethod
    def last_before(cls, graph: "Graph", node_pos: int) -> Optional["Cursor"]:
        """Last edge of the last node strictly before ``node_pos`` that has any; else None."""
        nodes = graph._nodes
        for pos in range(node_pos - 1, -1, -1):
            out = graph._adjacency.get(nodes[pos])
            if out:
                return cls(graph, pos, len(out) - 1)
        return None

    # State

    @property
    def graph(self):
        return self._graph

    @property
    def position(self) -> tuple:
        return (self._node_pos, self._edge_pos)

    def is_end(self) -> bool:
        return self._graph is not None and self._node_pos >= len(self._graph._nodes)

    # Dereference

    @property
    def value(self) -> EdgeValue:
        """
        Copy of the referenced edge.

        Raises
        ------
        IndexError
            If the cursor is default constructed or at the end position.
        """
        return self._edge().value()

    def deref(self) -> EdgeValue:
        return self.value

    def _edge(self):
        if self._graph is None:
            raise IndexError("cannot dereference a detached cursor")
        if self.is_end():
            raise IndexError("cannot dereference the end cursor")
        node = self._graph._nodes[self._node_pos]
        return self._graph._adjacency[node][self._edge_pos]

    # Traversal

    def next(self) -> "Cursor":
        """
        Cursor at the following edge in canonical order.

        Raises
        ------
        IndexError
            If the cursor is detached or already at the end.
        """
        if self._graph is None or self.is_end():
            raise IndexError("cannot advance past the end")
        graph = self._graph
        out = graph._adjacency.get(graph._nodes[self._node_pos], ())
        if self._edge_pos + 1 < len(out):
            return Cursor(graph, self._node_pos, self._edge_pos + 1)
        return Cursor.first_from(graph, self._node_pos + 1)

    def prev(self) -> "Cursor":
        """
        Cursor at the preceding edge in canonical order.

        Decrementing the end cursor lands on the last edge of the last node
        that has outgoing edges.

        Raises
        ------
        IndexError
            If the cursor is detached or already at the first edge.
        """
        if self._graph is None:
            raise IndexError("cannot move a detached cursor")
        if not self.is_end() and self._edge_pos > 0:
            return Cursor(self._graph, self._node_pos, self._edge_pos - 1)
        found = Cursor.last_before(self._graph, self._node_pos)
        if found is None:
            raise IndexError("cannot move before the first edge")
        return found

    # Comparison

    def __eq__(self, other):
        if not isinstance(other, Cursor):
            return NotImplemented
        return (
            self._graph is other._graph
            and self._node_pos == other._node_pos
            and self._edge_pos == other._edge_pos
        )

    def __hash__(self):
        return hash((id(self._graph), self._node_pos, self._edge_pos))

    def __repr__(self):
        if self._graph is None:
            return "Cursor()"
        if self.is_end():
            return "Cursor(<end>)"
        return f"Cursor({self.value!r})"
