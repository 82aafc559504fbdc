import hashlib
import json
import warnings

from ..core.errors import GraphInvariantError


def validate(graph) -> None:
    """
    Check that the registry, the global edge list and the adjacency index agree.

    Raises
    ------
    GraphInvariantError
        On the first violated invariant: unknown endpoint, edge list and
        adjacency lists out of step, unsorted storage, repeated identity
        triple, or repeated node label.
    """
    nodes = graph._nodes
    for a, b in zip(nodes, nodes[1:]):
        if not a < b:
            raise GraphInvariantError(f"node registry not strictly ascending at {a!r}, {b!r}")

    known = set(nodes)
    for edge in graph._edges:
        if edge.src not in known or edge.dst not in known:
            raise GraphInvariantError(f"edge {edge} references a node that is not in the graph")

    keys = [e.sort_key() for e in graph._edges]
    for i in range(1, len(keys)):
        if keys[i - 1] > keys[i]:
            raise GraphInvariantError(f"global edge list not sorted at position {i}")
        if graph._edges[i - 1] == graph._edges[i]:
            raise GraphInvariantError(f"duplicate edge {graph._edges[i]}")

    flattened = []
    for node in nodes:
        out = graph._adjacency.get(node, [])
        if any(e.src != node for e in out):
            raise GraphInvariantError(f"adjacency list of {node!r} holds a foreign edge")
        flattened.extend(out)
    stray = set(graph._adjacency) - known
    if stray:
        raise GraphInvariantError(f"adjacency index has entries for unknown nodes {sorted(stray)!r}")
    if flattened != graph._edges:
        raise GraphInvariantError("adjacency index does not match the global edge list")

    empty_lists = [n for n, out in graph._adjacency.items() if not out]
    if empty_lists:
        warnings.warn(
            f"adjacency index keeps empty lists for {empty_lists!r}",
            RuntimeWarning,
            stacklevel=2,
        )


def _plain(value):
    # JSON has no tuples or arbitrary objects; keep scalars, stringify the rest
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return str(value)


def canonical_hash(graph) -> str:
    """
    SHA-256 fingerprint of the nodes and edges of ``graph``.

    Storage is already canonical, so equal graphs give equal digests
    regardless of insertion order. Graphs are mutable; this is a content
    fingerprint and not ``__hash__``.
    """
    payload = {
        "nodes": [_plain(n) for n in graph.nodes()],
        "edges": [
            [_plain(e.src), _plain(e.dst), e.kind.tag, _plain(e.weight)]
            for e in graph._edges
        ],
    }
    blob = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(blob).hexdigest()
