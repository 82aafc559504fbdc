from abc import ABC, abstractmethod
from typing import Any

import polars as pl

from ..core.graph import Graph


class GraphAdapter(ABC):
    """Converts between :class:`Graph` and a foreign representation.

    Adapters work off the node and edge tables from ``Graph.nodes_view`` and
    ``Graph.edges_view`` so that every backend sees the same canonical order.
    """

    @abstractmethod
    def export(self, nodes: pl.DataFrame, edges: pl.DataFrame) -> Any:
        pass

    @abstractmethod
    def to_graph(self, obj: Any) -> Graph:
        pass

    def export_graph(self, graph: Graph) -> Any:
        return self.export(graph.nodes_view(), graph.edges_view())
