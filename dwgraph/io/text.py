"""
Read and write the canonical text rendering of a Graph.

Format (one block per node, nodes in ascending order)::

    a (
      a -> b | U
      a -> b | W | 1
    )
    e (
    )

Public entry points:
- dumps(graph) -> str, to_text(graph, path)
- loads(text, node_type=str, weight_type=int) -> Graph, from_text(path, ...)

Parsing assumes labels whose ``str()`` contains neither ``" -> "`` nor
``" | "`` and does not end with ``" ("``; ``node_type`` / ``weight_type``
convert the text back to values.
"""
from __future__ import annotations

from typing import Callable, List, Tuple

from ..core.graph import Graph

_OPEN = " ("
_CLOSE = ")"
_ARROW = " -> "
_SEP = " | "


def dumps(graph: "Graph") -> str:
    return graph.render()


def to_text(graph: "Graph", path, *, encoding: str = "utf-8") -> int:
    """
    Write the canonical rendering to ``path``.

    Returns
    -------
    int
        Number of characters written.
    """
    text = graph.render()
    with open(path, "w", encoding=encoding) as f:
        f.write(text)
    return len(text)


def _parse_edge(line: str, line_no: int, weight_type: Callable):
    body = line.strip()
    if body.endswith(_SEP + "U"):
        ends, weight = body[: -len(_SEP + "U")], None
    else:
        parts = body.rsplit(_SEP, 2)
        if len(parts) != 3 or parts[1] != "W":
            raise ValueError(f"line {line_no}: malformed edge line {line!r}")
        ends = parts[0]
        try:
            weight = weight_type(parts[2])
        except (TypeError, ValueError) as e:
            raise ValueError(f"line {line_no}: bad weight {parts[2]!r}") from e
    if _ARROW not in ends:
        raise ValueError(f"line {line_no}: edge line without '->': {line!r}")
    src, dst = ends.split(_ARROW, 1)
    return src, dst, weight


def loads(text: str, node_type: Callable = str, weight_type: Callable = int,
          *, history: bool = True) -> Graph:
    """
    Parse the canonical rendering back into a Graph.

    Parameters
    ----------
    text : str
    node_type : callable
        Converts label text to a node label (default ``str``).
    weight_type : callable
        Converts weight text to a weight (default ``int``).
    history : bool
        Forwarded to :class:`Graph`.

    Returns
    -------
    Graph

    Raises
    ------
    ValueError
        On a malformed line, an edge outside a node block, an edge whose
        source is not the enclosing node, or an unterminated block. The
        message carries the 1-based line number.
    NodeNotFound
        If an edge names a destination that has no block of its own.
    """
    labels: List[str] = []
    edges: List[Tuple[str, str, object]] = []
    current = None

    for line_no, raw in enumerate(text.splitlines(), start=1):
        if not raw.strip():
            continue
        if current is None:
            if not raw.endswith(_OPEN):
                raise ValueError(f"line {line_no}: expected 'label (' but got {raw!r}")
            current = raw[: -len(_OPEN)]
            labels.append(current)
            continue
        if raw.strip() == _CLOSE:
            current = None
            continue
        src, dst, weight = _parse_edge(raw, line_no, weight_type)
        if src != current:
            raise ValueError(f"line {line_no}: edge from {src!r} inside block of {current!r}")
        edges.append((src, dst, weight))

    if current is not None:
        raise ValueError(f"unterminated block for node {current!r}")

    G = Graph((node_type(label) for label in labels), history=history)
    for src, dst, weight in edges:
        G.insert_edge(node_type(src), node_type(dst), weight)
    return G


def from_text(path, node_type: Callable = str, weight_type: Callable = int,
              *, encoding: str = "utf-8", history: bool = True) -> Graph:
    """Read a file written by :func:`to_text` (see :func:`loads`)."""
    with open(path, "r", encoding=encoding) as f:
        return loads(f.read(), node_type=node_type, weight_type=weight_type, history=history)
