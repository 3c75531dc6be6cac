"""
Tests for extraction/deep_match.py.

Covers:
  - exact-shape mapping found at any depth, and returned by identity
  - JSON text leaves parsed and searched; non-conforming JSON is skipped
  - sequence order and key-insertion order decide the first hit
  - cycles and shared references terminate
  - max_depth prunes over-deep payloads instead of crashing
"""
from __future__ import annotations

import json

from conftest import make_record
from config import ExtractionConfig
from extraction.deep_match import find
from extraction.types import TargetSchema


class TestExactShape:
    def test_nested_record_found(self):
        inner = {"names": ["Flasche"], "materials": ["Glas"],
                 "material_colors": ["#869D7A"], "description": "x"}
        graph = {"a": {"b": [inner]}}
        assert find(graph) is inner

    def test_top_level_record(self):
        rec = make_record()
        assert find(rec) is rec

    def test_no_recursion_below_a_match(self):
        inner = make_record(names=["inner"])
        outer = make_record(names=["outer"], extra={"nested": inner})
        assert find(outer) is outer

    def test_scalars_never_match(self):
        assert find(42) is None
        assert find(None) is None
        assert find(True) is None
        assert find("just text") is None


class TestJsonLeaves:
    def test_json_text_leaf_parsed(self):
        graph = {"parts": [{"text": json.dumps(make_record())}]}
        assert find(graph) == make_record()

    def test_whitespace_around_json_is_trimmed(self):
        graph = ["\n  " + json.dumps(make_record()) + "  \n"]
        assert find(graph) == make_record()

    def test_record_wrapped_inside_parsed_json(self):
        graph = {"text": json.dumps({"result": make_record()})}
        assert find(graph) == make_record()

    def test_non_conforming_json_is_not_a_match(self):
        graph = {"text": '{"foo": "bar"}'}
        assert find(graph) is None

    def test_non_conforming_json_does_not_stop_the_search(self):
        rec = make_record()
        graph = {"first": "[1, 2, 3]", "second": rec}
        assert find(graph) is rec

    def test_broken_json_skipped(self):
        rec = make_record()
        graph = ['{"names": ["Fla', rec]
        assert find(graph) is rec


class TestOrder:
    def test_first_sequence_element_wins(self):
        a, b = make_record(names=["A"]), make_record(names=["B"])
        assert find([a, b]) is a

    def test_key_insertion_order(self):
        a, b = make_record(names=["A"]), make_record(names=["B"])
        assert find({"z": {"x": a}, "a": b}) is a


class TestCycles:
    def test_self_referential_mapping_terminates(self):
        graph: dict = {"meta": "x"}
        graph["self"] = graph
        assert find(graph) is None

    def test_cycle_with_match_before_reentry(self):
        rec = make_record()
        graph: dict = {"loop": None, "hit": rec}
        graph["loop"] = graph
        assert find(graph) is rec

    def test_shared_reference_visited_once(self):
        shared = ["no", "record", "here"]
        graph = {"a": shared, "b": shared, "c": [shared]}
        assert find(graph) is None

    def test_cyclic_list(self):
        seq: list = []
        seq.append(seq)
        assert find(seq) is None


class TestDepthBound:
    def _nest(self, levels: int, leaf):
        node = leaf
        for _ in range(levels):
            node = {"x": node}
        return node

    def test_record_within_depth_found(self):
        config = ExtractionConfig(max_depth=10)
        assert find(self._nest(5, make_record()), config) == make_record()

    def test_record_beyond_depth_pruned(self):
        config = ExtractionConfig(max_depth=10)
        assert find(self._nest(50, make_record()), config) is None

    def test_pathological_depth_does_not_crash(self):
        assert find(self._nest(5000, "leaf")) is None


class TestRoundTrip:
    def test_wire_shape_recovered_unchanged(self):
        original = TargetSchema(
            names=("Flasche", "Deckel"),
            materials=("Glas", "Metall"),
            material_colors=("#869D7A", "#F9C846"),
            description="Glas in den Container, Deckel in den Gelben Sack.",
        )
        found = find({"candidates": [{"content": original.to_dict()}]})
        assert TargetSchema.from_node(found) == original
