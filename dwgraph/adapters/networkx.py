try:
    import networkx as nx
except ModuleNotFoundError as e:
    raise ModuleNotFoundError(
        "Optional dependency 'networkx' is not installed. "
        "Install with: pip install dwgraph[networkx]"
    ) from e

from typing import Any

import polars as pl

from ..core.graph import Graph
from ._base import GraphAdapter


def to_nx(graph: "Graph", weight_attr: str = "weight"):
    """
    Export Graph to a NetworkX MultiDiGraph.

    Parameters
    ----------
    graph : Graph
        Source graph instance.
    weight_attr : str
        Edge attribute that receives the weight. Unweighted edges carry no
        attributes at all, so the two variants stay distinguishable.

    Returns
    -------
    networkx.MultiDiGraph
        Nodes in ascending order; edges in canonical order. The edge key is
        the position within the ``(src, dst)`` bundle (0, 1, ...).
    """
    G = nx.MultiDiGraph()
    G.add_nodes_from(graph.nodes())
    for src, dst, weight in graph.edge_list():
        if weight is None:
            G.add_edge(src, dst)
        else:
            G.add_edge(src, dst, **{weight_attr: weight})
    return G


def from_nx(nxG: Any, weight_attr: str = "weight", history: bool = True) -> Graph:
    """
    Import any NetworkX graph into a Graph.

    Parameters
    ----------
    nxG : networkx.Graph | DiGraph | MultiGraph | MultiDiGraph
    weight_attr : str
        Edge attribute read as the weight; edges without it are unweighted.
    history : bool
        Forwarded to :class:`Graph`.

    Returns
    -------
    Graph
        Undirected inputs yield one edge per direction. Edges repeating an
        identity triple collapse into one.
    """
    G = Graph(nxG.nodes(), history=history)
    directed = nxG.is_directed()
    for u, v, data in nxG.edges(data=True):
        weight = data.get(weight_attr)
        G.insert_edge(u, v, weight)
        if not directed and u != v:
            G.insert_edge(v, u, weight)
    return G


class NetworkXAdapter(GraphAdapter):
    """Builds NetworkX graphs from the tables produced by ``to_dataframes``."""

    def __init__(self, weight_attr: str = "weight"):
        self.weight_attr = weight_attr

    def export(self, nodes: pl.DataFrame, edges: pl.DataFrame) -> Any:
        G = nx.MultiDiGraph()
        if nodes.height > 0:
            G.add_nodes_from(nodes.get_column("node").to_list())
        for row in edges.iter_rows(named=True):
            if row.get("weighted"):
                G.add_edge(row["src"], row["dst"], **{self.weight_attr: row["weight"]})
            else:
                G.add_edge(row["src"], row["dst"])
        return G

    def to_graph(self, nxG: Any) -> Graph:
        return from_nx(nxG, weight_attr=self.weight_attr)
