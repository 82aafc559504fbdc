class GraphError(Exception):
    """Base exception for graph operations."""
    pass


class NodeNotFound(GraphError, KeyError):
    """Raised when an operation needs a node label that is not in the graph.

    Subclasses ``KeyError`` so callers that treat missing labels like missing
    mapping keys keep working.

    Attributes:
        operation: Name of the ``Graph`` method that failed
        nodes: The labels that were missing
    """

    def __init__(self, operation: str, nodes, arity: int = 1):
        self.operation = operation
        self.nodes = tuple(nodes)
        which = "the" if arity == 1 else "either src or dst"
        self.message = f"Cannot call Graph.{operation} when {which} node does not exist"
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class GraphInvariantError(GraphError):
    """Raised when a graph's internal indexes disagree with each other."""
    pass
