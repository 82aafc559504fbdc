import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]  # project root
sys.path.insert(0, str(ROOT))

from dwgraph.core.graph import Graph  # noqa: E402


@pytest.fixture
def simple_graph():
    """a, b, c with a -> b (1), a -> c (1), b -> c (1)."""
    g = Graph(["a", "b", "c"])
    g.insert_edge("a", "b", 1)
    g.insert_edge("a", "c", 1)
    g.insert_edge("b", "c", 1)
    return g


@pytest.fixture
def bundle_graph():
    """Three weighted parallel edges a -> b (1, 7, 11)."""
    g = Graph(["a", "b", "c"])
    g.insert_edge("a", "b", 1)
    g.insert_edge("a", "b", 7)
    g.insert_edge("a", "b", 11)
    return g


@pytest.fixture
def complex_graph():
    """Five nodes, mixed variants, self loops, one isolated node (e)."""
    g = Graph(["a", "b", "c", "d", "e"])
    g.insert_edge("a", "b", 1)
    g.insert_edge("a", "b", 10)
    g.insert_edge("a", "b")
    g.insert_edge("b", "c", 1)
    g.insert_edge("b", "d", -1)
    g.insert_edge("c", "c")
    g.insert_edge("c", "c", 100)
    g.insert_edge("d", "c", 100)
    g.insert_edge("d", "a", 10)
    return g


@pytest.fixture
def complex_rendering():
    return (
        "a (\n"
        "  a -> b | U\n"
        "  a -> b | W | 1\n"
        "  a -> b | W | 10\n"
        ")\n"
        "b (\n"
        "  b -> c | W | 1\n"
        "  b -> d | W | -1\n"
        ")\n"
        "c (\n"
        "  c -> c | U\n"
        "  c -> c | W | 100\n"
        ")\n"
        "d (\n"
        "  d -> a | W | 10\n"
        "  d -> c | W | 100\n"
        ")\n"
        "e (\n"
        ")\n"
    )
