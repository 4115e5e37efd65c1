"""
Tests for the example scale family.
"""

from scalegraph.examples import (
    EXAMPLE_ROOT_ID,
    build_boomer_adaptation,
    build_example_adaptation,
    build_example_family,
    build_example_root,
    build_genz_adaptation,
)
from scalegraph.model import Position
from scalegraph.validation import validate_adaptation


def test_example_root_shape():
    root = build_example_root()
    assert root.id == EXAMPLE_ROOT_ID
    assert root.is_root
    assert root.position == Position(100, 250)
    assert root.dimension_names() == ["Kepercayaan Diri", "Regulasi Emosi", "Optimisme"]
    assert [len(d.items) for d in root.dimensions] == [3, 4, 3]
    assert [item.item_id for _, item in root.flatten_items()] == [str(n) for n in range(1, 11)]


def test_example_root_rubrics():
    root = build_example_root()
    _, first = root.flatten_items()[0]
    assert first.baseline_rubric == (
        "Kepercayaan diri", "Menghadapi tantangan", "Merasa",
        "Konteks: Situasi baru", "Sudut pandang orang pertama",
    )
    assert all(item.current_rubric == item.baseline_rubric for _, item in root.flatten_items())


def test_canned_adaptations_are_valid():
    root = build_example_root()
    for payload in (build_genz_adaptation(), build_boomer_adaptation()):
        check = validate_adaptation(payload, root)
        assert check.warnings == []


def test_build_example_adaptation_mixed_items():
    payload = build_example_adaptation("S", [("D", ["plain", ("tagged", ["a"])])])
    assert payload == {
        "scale_name": "S",
        "dimensions": [{"name": "D", "items": [
            {"text": "plain"},
            {"text": "tagged", "current_rubric": ["a"]},
        ]}],
    }


def test_example_family():
    store = build_example_family()
    assert store.ids() == ["skala-asli", "skala-asli-branch-1", "skala-asli-branch-2"]
    assert store.active_id == "skala-asli"
    genz = store.get("skala-asli-branch-1")
    boomer = store.get("skala-asli-branch-2")
    assert genz.position == Position(650, 46)
    assert boomer.position == Position(650, 454)
    assert boomer.branch_index == 1
