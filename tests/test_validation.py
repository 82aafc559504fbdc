import random
import warnings

import pytest

from dwgraph.core.edge import Edge, EdgeValue
from dwgraph.core.errors import GraphInvariantError, NodeNotFound
from dwgraph.core.graph import Graph
from dwgraph.utils import canonical_hash, validate


class TestValidate:
    def test_fixtures_are_consistent(self, simple_graph, complex_graph):
        validate(simple_graph)
        validate(complex_graph)
        validate(Graph())

    def test_unknown_endpoint(self, simple_graph):
        simple_graph._nodes.remove("c")
        with pytest.raises(GraphInvariantError, match="not in the graph"):
            validate(simple_graph)

    def test_duplicate_edge(self, bundle_graph):
        bundle_graph._edges.insert(0, bundle_graph._edges[0])
        with pytest.raises(GraphInvariantError, match="duplicate"):
            validate(bundle_graph)

    def test_unsorted_edges(self, bundle_graph):
        bundle_graph._edges.reverse()
        with pytest.raises(GraphInvariantError, match="not sorted"):
            validate(bundle_graph)

    def test_adjacency_out_of_step(self, simple_graph):
        simple_graph._adjacency["a"].pop()
        with pytest.raises(GraphInvariantError, match="does not match"):
            validate(simple_graph)

    def test_foreign_edge_in_adjacency(self, simple_graph):
        simple_graph._adjacency["c"] = [Edge.make("a", "b", 5)]
        with pytest.raises(GraphInvariantError, match="foreign"):
            validate(simple_graph)

    def test_empty_adjacency_list_warns(self, simple_graph):
        simple_graph._adjacency["c"] = []
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            validate(simple_graph)
        assert any(issubclass(w.category, RuntimeWarning) for w in caught)


class TestCanonicalHash:
    def test_independent_of_insertion_order(self):
        g1 = Graph(["a", "b"])
        g1.insert_edge("a", "b", 2)
        g1.insert_edge("a", "b")
        g2 = Graph(["b", "a"])
        g2.insert_edge("a", "b")
        g2.insert_edge("a", "b", 2)
        assert canonical_hash(g1) == canonical_hash(g2)

    def test_changes_on_mutation(self, complex_graph):
        before = canonical_hash(complex_graph)
        complex_graph.erase_edge("c", "c")
        assert canonical_hash(complex_graph) != before

    def test_variant_is_part_of_the_hash(self):
        g1 = Graph(["a"])
        g1.insert_edge("a", "a")
        g2 = Graph(["a"])
        g2.insert_edge("a", "a", 0)
        assert canonical_hash(g1) != canonical_hash(g2)


class TestAgainstModel:
    """Random operation sequences checked against a plain set model."""

    LABELS = list("abcdef")
    WEIGHTS = [None, 1, 2, 3]

    def _expected_edges(self, edges):
        return [
            EdgeValue(s, d, w)
            for s, d, w in sorted(edges, key=lambda t: (t[0], t[1], t[2] is not None, t[2] or 0))
        ]

    @pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
    def test_random_operations(self, seed):
        rng = random.Random(seed)
        g = Graph()
        nodes, edges = set(), set()

        for _ in range(300):
            op = rng.choice(["node", "edge", "edge", "erase_edge", "erase_node",
                             "replace", "merge", "cursor_erase"])
            x, y = rng.choice(self.LABELS), rng.choice(self.LABELS)
            w = rng.choice(self.WEIGHTS)

            if op == "node":
                assert g.insert_node(x) == (x not in nodes)
                nodes.add(x)
            elif op == "edge":
                if x in nodes and y in nodes:
                    assert g.insert_edge(x, y, w) == ((x, y, w) not in edges)
                    edges.add((x, y, w))
                else:
                    with pytest.raises(NodeNotFound):
                        g.insert_edge(x, y, w)
            elif op == "erase_edge":
                if x in nodes and y in nodes:
                    assert g.erase_edge(x, y, w) == ((x, y, w) in edges)
                    edges.discard((x, y, w))
                else:
                    with pytest.raises(NodeNotFound):
                        g.erase_edge(x, y, w)
            elif op == "erase_node":
                assert g.erase_node(x) == (x in nodes)
                nodes.discard(x)
                edges = {e for e in edges if x not in e[:2]}
            elif op == "replace":
                if x not in nodes:
                    with pytest.raises(NodeNotFound):
                        g.replace_node(x, y)
                elif y in nodes:
                    assert not g.replace_node(x, y)
                else:
                    assert g.replace_node(x, y)
                    nodes = (nodes - {x}) | {y}
                    edges = {(y if s == x else s, y if d == x else d, ew) for s, d, ew in edges}
            elif op == "merge":
                if x not in nodes or y not in nodes:
                    with pytest.raises(NodeNotFound):
                        g.merge_replace_node(x, y)
                else:
                    g.merge_replace_node(x, y)
                    if x != y:
                        nodes.discard(x)
                        edges = {(y if s == x else s, y if d == x else d, ew)
                                 for s, d, ew in edges}
            elif op == "cursor_erase" and edges:
                target = rng.choice(self._expected_edges(edges))
                it = g.find(*target)
                following = it.next()
                following = None if following == g.end() else following.value
                it = g.erase_edge(it)
                edges.discard(tuple(target))
                assert (None if it == g.end() else it.value) == following

            validate(g)
            assert g.nodes() == sorted(nodes)
            assert g.edge_list() == self._expected_edges(edges)
            assert list(reversed(g)) == g.edge_list()[::-1]
