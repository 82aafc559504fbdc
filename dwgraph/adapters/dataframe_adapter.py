from __future__ import annotations

from typing import Dict, Optional

import polars as pl

from ..core.graph import Graph
from ._base import GraphAdapter

SRC_COLS = ["src", "source", "from", "u"]
DST_COLS = ["dst", "target", "to", "v"]
WGT_COLS = ["weight", "w"]
NODE_COLS = ["node", "node_id", "vertex_id", "id"]


def _pick(df: pl.DataFrame, candidates, what: str, required: bool = True) -> Optional[str]:
    for name in candidates:
        if name in df.columns:
            return name
    if required:
        raise ValueError(f"no {what} column found; expected one of {candidates}")
    return None


def to_dataframes(graph: "Graph") -> Dict[str, pl.DataFrame]:
    """
    Export graph to Polars DataFrames.

    Returns a dictionary of DataFrames:
    - 'nodes': node labels in order, with out/in degree
    - 'edges': src, dst, weighted, weight (null for unweighted) in canonical order

    Args:
        graph: Graph instance to export

    Returns:
        Dictionary mapping table names to Polars DataFrames
    """
    return {
        "nodes": graph.nodes_view(),
        "edges": graph.edges_view(),
    }


def from_dataframes(
    nodes: Optional[pl.DataFrame] = None,
    edges: Optional[pl.DataFrame] = None,
    *,
    history: bool = True,
) -> Graph:
    """
    Build a Graph from Polars DataFrames.

    Args:
        nodes: Table with a node column (``node``/``node_id``/``vertex_id``/``id``).
            Optional; isolated nodes only survive if listed here.
        edges: Table with source/target columns (``src``/``source``/``from``/``u``
            and ``dst``/``target``/``to``/``v``) and an optional ``weight`` column.
            A null weight, or ``weighted == False`` when that column exists,
            inserts an unweighted edge.
        history: Forwarded to :class:`Graph`.

    Returns:
        The reconstructed Graph. Endpoints missing from ``nodes`` are added.

    Raises:
        ValueError: If a required column cannot be found.
    """
    labels = []
    if nodes is not None and nodes.height > 0:
        labels.extend(nodes.get_column(_pick(nodes, NODE_COLS, "node")).to_list())

    rows = []
    if edges is not None and edges.height > 0:
        s_col = _pick(edges, SRC_COLS, "source")
        d_col = _pick(edges, DST_COLS, "target")
        w_col = _pick(edges, WGT_COLS, "weight", required=False)
        has_flag = "weighted" in edges.columns
        for row in edges.iter_rows(named=True):
            weight = row[w_col] if w_col else None
            if has_flag and row["weighted"] is False:
                weight = None
            rows.append((row[s_col], row[d_col], weight))
            labels.append(row[s_col])
            labels.append(row[d_col])

    G = Graph(labels, history=history)
    for src, dst, weight in rows:
        G.insert_edge(src, dst, weight)
    return G


class DataFrameAdapter(GraphAdapter):
    """Registry-facing wrapper around :func:`to_dataframes` / :func:`from_dataframes`."""

    def __init__(self, history: bool = True):
        self.history = history

    def export(self, nodes: pl.DataFrame, edges: pl.DataFrame) -> Dict[str, pl.DataFrame]:
        return {"nodes": nodes, "edges": edges}

    def to_graph(self, tables: Dict[str, pl.DataFrame]) -> Graph:
        return from_dataframes(tables.get("nodes"), tables.get("edges"), history=self.history)
