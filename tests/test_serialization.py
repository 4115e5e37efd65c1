"""
Tests for serialization and deserialization of scale families.

These tests ensure lossless JSON/YAML round-trip using the explicit
serialization functions in `scalegraph.serialization`, and check the
request payloads sent to the generative service.
"""

from scalegraph.csv_io import IngestRecord
from scalegraph.examples import build_example_family, build_example_root
from scalegraph.model import RubricSource
from scalegraph.serialization import (
    build_adaptation_request,
    build_structuring_request,
    family_from_dict,
    family_from_json,
    family_from_yaml,
    family_to_dict,
    family_to_json,
    family_to_yaml,
    node_from_dict,
    node_to_dict,
)


def test_node_dict_roundtrip():
    root = build_example_root()
    d = node_to_dict(root)
    assert d["position"] == {"x": 100, "y": 250}
    assert d["dimensions"][0]["items"][0]["rubric_source"] == "inherited-from-parent"
    assert node_from_dict(d) == root


def test_family_dict_keeps_order_and_active():
    store = build_example_family()
    d = family_to_dict(store.nodes, store.active_id)
    assert d["active_id"] == "skala-asli"
    assert [n["id"] for n in d["nodes"]] == ["skala-asli", "skala-asli-branch-1", "skala-asli-branch-2"]

    back = family_from_dict(d)
    assert list(back["nodes"]) == store.ids()


def test_json_roundtrip():
    store = build_example_family()
    s = family_to_json(store.nodes, store.active_id)
    assert "Skala Gen-Z" in s
    back = family_from_json(s)
    assert back["active_id"] == store.active_id
    assert back["nodes"] == dict(store.nodes)


def test_yaml_roundtrip():
    store = build_example_family()
    s = family_to_yaml(store.nodes, store.active_id)
    back = family_from_yaml(s)
    assert back["nodes"] == dict(store.nodes)
    genz = back["nodes"]["skala-asli-branch-1"]
    assert genz.position_locked is True
    assert genz.flatten_items()[0][1].rubric_source == RubricSource.EXTERNALLY_GENERATED


def test_adaptation_request():
    request = build_adaptation_request(build_example_root(), "Untuk remaja Gen-Z")
    assert request["source_scale_name"] == "Skala Asli - Skala Kepercayaan Diri"
    assert request["adaptation_intent"] == "Untuk remaja Gen-Z"
    assert [d["name"] for d in request["source_dimensions"]] == [
        "Kepercayaan Diri", "Regulasi Emosi", "Optimisme",
    ]
    assert request["source_dimensions"][2]["items"][-1] == "Saya merasa memiliki tujuan hidup yang jelas"


def test_structuring_request():
    records = [
        IngestRecord(id="Q1", dimension="Fisik", text="Saya sulit tidur"),
        IngestRecord(id="", dimension=None, text="Saya sering pusing"),
    ]
    request = build_structuring_request(records, "stres.csv")
    assert request["filename"] == "stres.csv"
    assert request["item_count"] == 2
    assert request["items"][0] == {"id": "Q1", "dimension": "Fisik", "text": "Saya sulit tidur"}
    assert request["items"][1]["id"] == 2
