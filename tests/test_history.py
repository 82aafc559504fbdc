import json

import polars as pl
import pytest

from dwgraph.core.errors import NodeNotFound
from dwgraph.core.graph import Graph


class TestHistoryLog:
    def test_constructor_is_not_logged(self):
        g = Graph(["a", "b"])
        assert g.history() == []

    def test_mutations_are_recorded_in_order(self):
        g = Graph()
        g.insert_node("a")
        g.insert_node("b")
        g.insert_edge("a", "b", 3)
        g.insert_edge("a", "b", 3)
        ops = [evt["op"] for evt in g.history()]
        assert ops == ["insert_node", "insert_node", "insert_edge", "insert_edge"]
        versions = [evt["version"] for evt in g.history()]
        assert versions == [1, 2, 3, 4]

        evt = g.history()[2]
        assert evt["src"] == "a" and evt["dst"] == "b" and evt["weight"] == 3
        assert evt["result"] is True
        assert g.history()[3]["result"] is False
        assert evt["ts_utc"].endswith("Z")
        assert evt["mono_ns"] >= 0

    def test_failed_calls_are_not_recorded(self):
        g = Graph(["a"])
        with pytest.raises(NodeNotFound):
            g.insert_edge("a", "zz")
        assert g.history() == []

    def test_cursor_arguments_are_positions(self, bundle_graph):
        bundle_graph.clear_history()
        bundle_graph.erase_edge(bundle_graph.begin())
        evt = bundle_graph.history()[-1]
        assert evt["op"] == "erase_edge"
        assert evt["src"] == [0, 0]
        assert evt["result"] == [0, 0]

    def test_cursor_erase_is_logged_once(self, bundle_graph):
        bundle_graph.clear_history()
        bundle_graph.erase_edge_range(bundle_graph.begin(), bundle_graph.end())
        assert [evt["op"] for evt in bundle_graph.history()] == ["erase_edge_range"]

    def test_merge_into_self_is_still_logged(self, simple_graph):
        simple_graph.clear_history()
        simple_graph.merge_replace_node("a", "a")
        assert simple_graph.history()[0]["op"] == "merge_replace_node"

    def test_disable_and_resume(self):
        g = Graph(history=False)
        g.insert_node("a")
        assert g.history() == []
        g.enable_history(True)
        g.insert_node("b")
        assert [evt["op"] for evt in g.history()] == ["insert_node"]

    def test_mark(self):
        g = Graph()
        g.mark("checkpoint")
        evt = g.history()[0]
        assert evt["op"] == "mark"
        assert evt["label"] == "checkpoint"

    def test_clear_keeps_version_counter(self):
        g = Graph()
        g.insert_node("a")
        g.clear_history()
        g.insert_node("b")
        assert g.history()[0]["version"] == 2

    def test_copy_starts_a_fresh_log(self, simple_graph):
        assert simple_graph.history()
        assert simple_graph.copy().history() == []


class TestHistoryFrames:
    def test_as_df(self, simple_graph):
        df = simple_graph.history(as_df=True)
        assert isinstance(df, pl.DataFrame)
        assert df.height == 3
        assert df["op"].to_list() == ["insert_edge"] * 3
        assert json.loads(df["weight"][0]) == 1

    def test_empty_as_df(self):
        df = Graph().history(as_df=True)
        assert df.height == 0
        assert {"version", "ts_utc", "mono_ns", "op"} <= set(df.columns)

    def test_mixed_operations(self, complex_graph):
        complex_graph.erase_node("e")
        complex_graph.mark("done")
        df = complex_graph.history(as_df=True)
        assert df.height == 11
        assert df["op"].to_list()[-2:] == ["erase_node", "mark"]


class TestExportHistory:
    def test_empty_history_writes_nothing(self, tmp_path):
        assert Graph().export_history(tmp_path / "h.json") == 0
        assert not (tmp_path / "h.json").exists()

    def test_ndjson(self, simple_graph, tmp_path):
        out = tmp_path / "h.ndjson"
        assert simple_graph.export_history(out) == 3
        lines = out.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 3
        assert json.loads(lines[0])["op"] == "insert_edge"

    def test_json(self, simple_graph, tmp_path):
        out = tmp_path / "h.json"
        assert simple_graph.export_history(out) == 3
        data = json.loads(out.read_text(encoding="utf-8"))
        assert [evt["version"] for evt in data] == [1, 2, 3]

    def test_csv(self, simple_graph, tmp_path):
        out = tmp_path / "h.csv"
        assert simple_graph.export_history(out) == 3
        assert pl.read_csv(out).height == 3

    def test_parquet_and_unknown_extension(self, simple_graph, tmp_path):
        assert simple_graph.export_history(tmp_path / "h.parquet") == 3
        assert pl.read_parquet(tmp_path / "h.parquet").height == 3
        assert simple_graph.export_history(tmp_path / "h.log") == 3
        assert (tmp_path / "h.log.parquet").exists()
