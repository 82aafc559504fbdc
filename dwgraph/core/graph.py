import copy as _copy
import inspect
import json
import time
from bisect import bisect_left, insort
from datetime import datetime, timezone
from functools import wraps

import numpy as np
import polars as pl
import scipy.sparse as sp

from .cursor import Cursor
from .edge import Edge, EdgeValue
from .errors import NodeNotFound


class Graph:
    """
    Generic directed weighted multigraph.

    Nodes are unique, totally ordered labels. Edges are directed and either
    weighted or unweighted; several edges may join the same ordered pair as
    long as their identity triples ``(src, dst, weight-or-absent)`` differ.
    Self loops are allowed.

    Three structures are kept consistent after every public mutation:

    - the node registry (sorted list of labels),
    - the global edge list (every edge, canonical order),
    - the adjacency index (label -> sorted outgoing edges).

    Parameters
    ----------
    nodes : Iterable, optional
        Initial node labels. Duplicates are collapsed.
    history : bool, optional
        Record every mutation in the in-memory history log (default True).

    Notes
    -----
    - Canonical edge order: ``src``, then ``dst``, then unweighted before
      weighted, then ascending weight. It drives iteration, equality and
      :meth:`render`.
    - Threading: the graph is single-threaded and synchronous. Concurrent
      read-only access is safe; any mutator must be serialized by the caller
      (one writer, no readers during the write). Mutating the graph
      invalidates all outstanding cursors.
    - ``weight=None`` always means "unweighted"; ``None`` is not a valid
      weight value.

    See Also
    --------
    insert_edge, merge_replace_node, begin, render
    """

    # Mutating methods wrapped by the history log. Add here if you add new mutators.
    _HISTORY_HOOKS = (
        "insert_node", "insert_edge", "replace_node", "merge_replace_node",
        "erase_node", "erase_edge", "erase_edge_at", "erase_edge_range", "clear",
    )
    _HISTORY_HEADER = {"version", "ts_utc", "mono_ns", "op"}

    # Construction

    def __init__(self, nodes=None, *, history=True):
        self._nodes = sorted(set(nodes)) if nodes is not None else []
        self._edges = []        # list[Edge], canonical order
        self._adjacency = {}    # label -> list[Edge], only labels with outgoing edges

        # Mutation history
        self._history_enabled = bool(history)
        self._history = []      # list[dict]
        self._version = 0
        self._history_clock0 = time.perf_counter_ns()
        self._install_history_hooks()

    def copy(self):
        """
        Copy the graph. The copy owns its own node list, edge list and
        adjacency lists; edge values are immutable and are shared.

        Returns
        -------
        Graph
        """
        new_graph = Graph(history=self._history_enabled)
        new_graph._nodes = list(self._nodes)
        new_graph._edges = list(self._edges)
        new_graph._adjacency = {node: list(out) for node, out in self._adjacency.items()}
        return new_graph

    def move(self):
        """
        Transfer the contents of this graph into a new one.

        Returns
        -------
        Graph
            The new owner of the nodes and edges. ``self`` is left empty.
        """
        new_graph = Graph(history=self._history_enabled)
        new_graph._nodes, self._nodes = self._nodes, []
        new_graph._edges, self._edges = self._edges, []
        new_graph._adjacency, self._adjacency = self._adjacency, {}
        return new_graph

    def __copy__(self):
        return self.copy()

    def __deepcopy__(self, memo):
        new_graph = Graph(_copy.deepcopy(self._nodes, memo), history=self._history_enabled)
        new_graph._reindex(
            Edge(_copy.deepcopy(e.src, memo), _copy.deepcopy(e.dst, memo), e.kind,
                 _copy.deepcopy(e.weight, memo))
            for e in self._edges
        )
        return new_graph

    def __getstate__(self):
        # bound history wrappers live in the instance dict and are rebuilt on load
        return {k: v for k, v in self.__dict__.items() if k not in self._HISTORY_HOOKS}

    def __setstate__(self, state):
        self.__dict__.update(state)
        self._install_history_hooks()

    # Internal consistency

    def _reindex(self, edges):
        """
        Rebuild the global edge list and the adjacency index from ``edges``.

        Sorts canonically and drops repeated identity triples, then splits the
        result per source node. Every mutator ends here, so the invariants
        hold in one place.
        """
        ordered = sorted(edges, key=Edge.sort_key)
        unique = []
        for edge in ordered:
            if not unique or unique[-1] != edge:
                unique.append(edge)

        adjacency = {}
        for edge in unique:
            adjacency.setdefault(edge.src, []).append(edge)

        self._edges = unique
        self._adjacency = adjacency

    def _node_index(self, value):
        i = bisect_left(self._nodes, value)
        if i < len(self._nodes) and self._nodes[i] == value:
            return i
        return -1

    def _require_nodes(self, operation, *values):
        missing = [v for v in values if not self.is_node(v)]
        if missing:
            raise NodeNotFound(operation, missing, arity=len(values))

    def _check_cursor(self, cursor):
        if not isinstance(cursor, Cursor):
            raise TypeError(f"expected a Cursor, got {type(cursor).__name__}")
        if cursor.graph is not self:
            raise ValueError("cursor does not belong to this graph")

    def _cursor_offset(self, cursor):
        """Index into the global edge list of the edge under ``cursor`` (len for end)."""
        node_pos, edge_pos = cursor.position
        if node_pos >= len(self._nodes):
            return len(self._edges)
        before = sum(len(self._adjacency.get(n, ())) for n in self._nodes[:node_pos])
        return before + edge_pos

    def _cursor_for_offset(self, offset):
        """Cursor at index ``offset`` of the global edge list (end if past it)."""
        if offset >= len(self._edges):
            return self.end()
        src = self._edges[offset].src
        first = offset
        while first > 0 and self._edges[first - 1].src == src:
            first -= 1
        return Cursor(self, self._node_index(src), offset - first)

    # Modifiers

    def insert_node(self, value):
        """
        Add a node.

        Parameters
        ----------
        value : hashable, orderable

        Returns
        -------
        bool
            True if inserted, False if the label was already present.
        """
        if self.is_node(value):
            return False
        insort(self._nodes, value)
        return True

    def insert_edge(self, src, dst, weight=None):
        """
        Add an edge ``src -> dst``.

        Parameters
        ----------
        src, dst : node labels
            Both must already be nodes.
        weight : object, optional
            Edge weight. ``None`` inserts an unweighted edge.

        Returns
        -------
        bool
            False if an edge with the same identity triple already exists.

        Raises
        ------
        NodeNotFound
            If ``src`` or ``dst`` is not a node.
        """
        self._require_nodes("insert_edge", src, dst)
        for edge in self._adjacency.get(src, ()):
            if edge.matches(src, dst, weight):
                return False
        self._reindex(self._edges + [Edge.make(src, dst, weight)])
        return True

    def replace_node(self, old_data, new_data):
        """
        Rename ``old_data`` to ``new_data`` everywhere it appears.

        Returns
        -------
        bool
            False (and no change) if ``new_data`` is already a node.

        Raises
        ------
        NodeNotFound
            If ``old_data`` is not a node.
        """
        self._require_nodes("replace_node", old_data)
        if self.is_node(new_data):
            return False
        del self._nodes[self._node_index(old_data)]
        insort(self._nodes, new_data)
        self._reindex(e.renamed(old_data, new_data) for e in self._edges)
        return True

    def merge_replace_node(self, old_data, new_data):
        """
        Fold ``old_data`` into the existing node ``new_data``.

        Every endpoint ``old_data`` becomes ``new_data``; edges that end up
        with the same identity triple are merged into one. ``old_data`` is
        removed. Merging a node into itself does nothing.

        Raises
        ------
        NodeNotFound
            If either node is missing. The graph is left unchanged.
        """
        self._require_nodes("merge_replace_node", old_data, new_data)
        if old_data == new_data:
            return None
        del self._nodes[self._node_index(old_data)]
        self._reindex(e.renamed(old_data, new_data) for e in self._edges)
        return None

    def erase_node(self, value):
        """
        Remove a node and every edge that starts or ends at it.

        Returns
        -------
        bool
            False if ``value`` was not a node.
        """
        idx = self._node_index(value)
        if idx < 0:
            return False
        del self._nodes[idx]
        self._reindex(e for e in self._edges if e.src != value and e.dst != value)
        return True

    def erase_edge(self, src, dst=None, weight=None):
        """
        Remove one edge, or a range of edges.

        Three call forms:

        - ``erase_edge(src, dst, weight=None)``: remove the edge with that
          identity triple; without a weight only the unweighted edge matches.
          Returns bool.
        - ``erase_edge(cursor)``: same as :meth:`erase_edge_at`.
        - ``erase_edge(first, last)``: same as :meth:`erase_edge_range`.

        Raises
        ------
        NodeNotFound
            Value form only, if ``src`` or ``dst`` is not a node.
        """
        if isinstance(src, Cursor):
            if dst is None:
                return self._erase_at(src)
            return self._erase_range(src, dst)
        if dst is None:
            raise TypeError("erase_edge() needs both src and dst node labels")
        self._require_nodes("erase_edge", src, dst)
        for i, edge in enumerate(self._edges):
            if edge.matches(src, dst, weight):
                self._reindex(self._edges[:i] + self._edges[i + 1:])
                return True
        return False

    def erase_edge_at(self, cursor):
        """
        Remove the edge under ``cursor``.

        Works for weighted and unweighted edges alike: the exact identity
        triple under the cursor is removed.

        Returns
        -------
        Cursor
            Cursor at the edge that followed the removed one, or :meth:`end`.

        Raises
        ------
        IndexError
            If ``cursor`` is the end cursor.
        ValueError
            If ``cursor`` belongs to another graph.
        """
        return self._erase_at(cursor)

    def erase_edge_range(self, first, last):
        """
        Remove every edge in ``[first, last)`` (canonical order).

        Returns
        -------
        Cursor
            A freshly derived cursor at the position ``last`` referred to.

        Raises
        ------
        ValueError
            If a cursor belongs to another graph or ``first`` is after ``last``.
        """
        return self._erase_range(first, last)

    def _erase_at(self, cursor):
        self._check_cursor(cursor)
        if cursor.is_end():
            raise IndexError("cannot erase at the end cursor")
        offset = self._cursor_offset(cursor)
        self._reindex(self._edges[:offset] + self._edges[offset + 1:])
        return self._cursor_for_offset(offset)

    def _erase_range(self, first, last):
        self._check_cursor(first)
        self._check_cursor(last)
        lo, hi = self._cursor_offset(first), self._cursor_offset(last)
        if lo > hi:
            raise ValueError("first cursor is after last cursor")
        if lo < hi:
            self._reindex(self._edges[:lo] + self._edges[hi:])
        return self._cursor_for_offset(lo)

    def clear(self):
        """Remove every node and edge."""
        self._nodes = []
        self._edges = []
        self._adjacency = {}

    # Accessors

    def is_node(self, value):
        return self._node_index(value) >= 0

    def empty(self):
        return not self._nodes

    def is_connected(self, src, dst):
        """
        True if at least one edge (either variant) goes from ``src`` to ``dst``.

        Raises
        ------
        NodeNotFound
            If ``src`` or ``dst`` is not a node.
        """
        self._require_nodes("is_connected", src, dst)
        return any(e.dst == dst for e in self._adjacency.get(src, ()))

    def nodes(self):
        """
        All node labels in ascending order.

        Returns
        -------
        list
        """
        return list(self._nodes)

    def edges(self, src, dst):
        """
        Every edge from ``src`` to ``dst``: unweighted first, then by weight.

        Returns
        -------
        list[Edge]

        Raises
        ------
        NodeNotFound
            If ``src`` or ``dst`` is not a node.
        """
        self._require_nodes("edges", src, dst)
        return [e for e in self._adjacency.get(src, ()) if e.dst == dst]

    def find(self, src, dst, weight=None):
        """
        Cursor at the edge with identity triple ``(src, dst, weight-or-absent)``.

        Returns
        -------
        Cursor
            :meth:`end` when there is no such edge, including when either
            label is not a node.
        """
        node_pos = self._node_index(src)
        if node_pos < 0:
            return self.end()
        for edge_pos, edge in enumerate(self._adjacency.get(src, ())):
            if edge.matches(src, dst, weight):
                return Cursor(self, node_pos, edge_pos)
        return self.end()

    def connections(self, src):
        """
        Sorted, duplicate-free labels joined to ``src`` by any edge, in either
        direction.

        Raises
        ------
        NodeNotFound
            If ``src`` is not a node.
        """
        self._require_nodes("connections", src)
        neighbours = set()
        for edge in self._edges:
            if edge.src == src:
                neighbours.add(edge.dst)
            if edge.dst == src:
                neighbours.add(edge.src)
        return sorted(neighbours)

    def num_edges(self):
        return len(self._edges)

    def edge_list(self):
        """
        Materialize every edge as :class:`EdgeValue` in canonical order.

        Returns
        -------
        list[EdgeValue]
        """
        return [e.value() for e in self._edges]

    def __len__(self):
        return len(self._nodes)

    def __contains__(self, value):
        return self.is_node(value)

    # Iterator access

    def begin(self):
        """Cursor at the first edge in canonical order (equals :meth:`end` if there are none)."""
        return Cursor.first_from(self, 0)

    def end(self):
        return Cursor(self, len(self._nodes), 0)

    def __iter__(self):
        cursor, stop = self.begin(), self.end()
        while cursor != stop:
            yield cursor.value
            cursor = cursor.next()

    def __reversed__(self):
        cursor, first = self.end(), self.begin()
        while cursor != first:
            cursor = cursor.prev()
            yield cursor.value

    # Comparison

    def __eq__(self, other):
        if not isinstance(other, Graph):
            return NotImplemented
        return self._nodes == other._nodes and self._edges == other._edges

    __hash__ = None

    # Rendering

    def render(self):
        """
        Canonical text form.

        For each node in order: ``"label ("``, then its unweighted edges in
        destination order, then its weighted edges in destination/weight
        order (one per line, indented two spaces), then ``")"``.

        Returns
        -------
        str
            Empty string for an empty graph.
        """
        lines = []
        for node in self._nodes:
            out = self._adjacency.get(node, ())
            lines.append(f"{node} (")
            lines.extend(f"  {e.print_edge()}" for e in out if not e.is_weighted())
            lines.extend(f"  {e.print_edge()}" for e in out if e.is_weighted())
            lines.append(")")
        return "".join(line + "\n" for line in lines)

    def write(self, stream):
        """Write :meth:`render` to a text stream."""
        stream.write(self.render())

    def __str__(self):
        return self.render()

    def __repr__(self):
        return f"Graph(nodes={len(self._nodes)}, edges={len(self._edges)})"

    # Views

    def edges_view(self):
        """
        Polars DF view of the edges in canonical order.

        Returns
        -------
        polars.DataFrame
            Columns ``src``, ``dst``, ``weighted`` and ``weight`` (null when
            unweighted).
        """
        rows = [
            {"src": e.src, "dst": e.dst, "weighted": e.is_weighted(), "weight": e.weight}
            for e in self._edges
        ]
        if not rows:
            return pl.DataFrame(
                schema={"src": pl.Utf8, "dst": pl.Utf8, "weighted": pl.Boolean, "weight": pl.Float64}
            )
        return pl.DataFrame(rows, infer_schema_length=None)

    def nodes_view(self):
        """
        Polars DF of the nodes with their out- and in-degree (edge counts).

        Returns
        -------
        polars.DataFrame
        """
        in_degree = {}
        for e in self._edges:
            in_degree[e.dst] = in_degree.get(e.dst, 0) + 1
        rows = [
            {
                "node": n,
                "out_degree": len(self._adjacency.get(n, ())),
                "in_degree": in_degree.get(n, 0),
            }
            for n in self._nodes
        ]
        if not rows:
            return pl.DataFrame(
                schema={"node": pl.Utf8, "out_degree": pl.Int64, "in_degree": pl.Int64}
            )
        return pl.DataFrame(rows, infer_schema_length=None)

    def adjacency_matrix(self, values: bool = False, sparse: bool = False):
        """
        Node-by-node adjacency matrix in node order.

        Parameters
        ----------
        values : bool, optional (default=False)
            If False, ``M[i, j]`` counts the edges ``i -> j`` (both variants).
            If True, ``M[i, j]`` sums the weights of the weighted edges
            ``i -> j``; unweighted edges contribute nothing.
        sparse : bool, optional (default=False)
            Return a SciPy CSR matrix instead of a dense NumPy ndarray.

        Returns
        -------
        scipy.sparse.csr_matrix | numpy.ndarray

        Raises
        ------
        TypeError, ValueError
            If ``values=True`` and a weight cannot be converted to float.
        """
        index = {node: i for i, node in enumerate(self._nodes)}
        n = len(self._nodes)
        M = sp.dok_matrix((n, n), dtype=np.float64)
        for e in self._edges:
            i, j = index[e.src], index[e.dst]
            if not values:
                M[i, j] += 1.0
            elif e.is_weighted():
                M[i, j] += float(e.weight)
        M = M.tocsr()
        return M if sparse else M.toarray()

    # Mutation history

    def _utcnow_iso(self) -> str:
        stamp = datetime.now(timezone.utc).isoformat(timespec="microseconds")
        return stamp.replace("+00:00", "Z")

    def _jsonify(self, x):
        # labels and weights are arbitrary; keep JSON scalars, stringify the rest
        if x is None or isinstance(x, (bool, int, float, str)):
            return x
        if isinstance(x, np.generic):
            return x.item()
        if isinstance(x, Cursor):
            return list(x.position)
        if isinstance(x, (list, tuple)):
            return [self._jsonify(v) for v in x]
        return str(x)

    def _log_event(self, op: str, **fields):
        if not self._history_enabled:
            return
        self._version += 1
        event = {
            "version": self._version,
            "ts_utc": self._utcnow_iso(),
            "mono_ns": time.perf_counter_ns() - self._history_clock0,
            "op": op,
        }
        event.update((k, self._jsonify(v)) for k, v in fields.items())
        self._history.append(event)

    def _log_mutation(self, name=None):
        def deco(fn):
            op = name or fn.__name__
            sig = inspect.signature(fn)

            @wraps(fn)
            def wrapper(*args, **kwargs):
                bound = sig.bind(*args, **kwargs)
                bound.apply_defaults()
                result = fn(*args, **kwargs)
                # fn is already bound, so arguments never include self
                self._log_event(op, **bound.arguments, result=result)
                return result
            return wrapper
        return deco

    def _install_history_hooks(self):
        for name in self._HISTORY_HOOKS:
            method = getattr(self, name)
            if getattr(method, "__wrapped__", None) is None:
                setattr(self, name, self._log_mutation(name)(method))

    def history(self, as_df: bool = False):
        """
        Events recorded so far, oldest first.

        Parameters
        ----------
        as_df : bool, default False
            Return a Polars DataFrame instead of a list of dicts. Argument and
            result columns are JSON-encoded strings there, since labels and
            weights may mix types across events.

        Returns
        -------
        list[dict] or polars.DataFrame
            Each event has 'version', 'ts_utc' (UTC ISO-8601), 'mono_ns'
            (nanoseconds since the graph was created), 'op', the call
            arguments by name, and 'result'.

        Notes
        -----
        Calls that raise leave no event.
        """
        if not as_df:
            return list(self._history)
        if not self._history:
            return pl.DataFrame(schema={"version": pl.Int64, "ts_utc": pl.Utf8,
                                        "mono_ns": pl.Int64, "op": pl.Utf8})
        rows = [
            {k: v if k in self._HISTORY_HEADER or v is None else json.dumps(v)
             for k, v in event.items()}
            for event in self._history
        ]
        return pl.DataFrame(rows, infer_schema_length=None)

    def export_history(self, path) -> int:
        """
        Save the history to ``path``; the format follows the extension.

        '.ndjson' / '.jsonl' and '.json' keep native JSON values; '.csv' and
        '.parquet' are written from ``history(as_df=True)``. Any other
        extension gets '.parquet' appended.

        Returns
        -------
        int
            Number of events written; 0 (and no file) when the log is empty.
        """
        if not self._history:
            return 0
        path = str(path)
        suffix = path.lower()
        if suffix.endswith((".ndjson", ".jsonl")):
            with open(path, "w", encoding="utf-8") as f:
                for event in self._history:
                    f.write(json.dumps(event, ensure_ascii=False) + "\n")
        elif suffix.endswith(".json"):
            with open(path, "w", encoding="utf-8") as f:
                json.dump(self._history, f, ensure_ascii=False)
        elif suffix.endswith(".csv"):
            self.history(as_df=True).write_csv(path)
        elif suffix.endswith(".parquet"):
            self.history(as_df=True).write_parquet(path)
        else:
            self.history(as_df=True).write_parquet(path + ".parquet")
        return len(self._history)

    def enable_history(self, flag: bool = True):
        """Turn event recording on or off. Already recorded events are kept."""
        self._history_enabled = bool(flag)

    def clear_history(self):
        """Drop recorded events. The version counter keeps counting."""
        self._history.clear()

    def mark(self, label: str):
        """Record a user 'mark' event carrying ``label`` (only while recording is on)."""
        self._log_event("mark", label=label)


__all__ = ["Graph", "Cursor", "Edge", "EdgeValue"]
