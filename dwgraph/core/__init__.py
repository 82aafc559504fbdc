from .structure import EdgeKind
from .errors import GraphError, GraphInvariantError, NodeNotFound
from .edge import Edge, EdgeValue
from .cursor import Cursor
from .graph import Graph

__all__ = [
    "EdgeKind",
    "GraphError",
    "GraphInvariantError",
    "NodeNotFound",
    "Edge",
    "EdgeValue",
    "Cursor",
    "Graph",
]
