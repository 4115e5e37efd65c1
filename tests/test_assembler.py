"""
Tests for the Scale/Item Assembler and root builders.
"""

from scalegraph.assembler import (
    DEFAULT_ROOT_ID,
    UNKNOWN_ORIGIN,
    assemble,
    branch_node_id,
    build_fallback_root,
    build_root,
    scale_name_from_filename,
)
from scalegraph.csv_io import IngestRecord
from scalegraph.examples import build_boomer_adaptation, build_example_root, build_genz_adaptation
from scalegraph.layout import next_branch_position
from scalegraph.model import Position, RubricSource


class TestAssemble:
    """Branch assembly from an adaptation result."""

    def setup_method(self):
        self.source = build_example_root()
        self.position = next_branch_position(self.source, 0)

    def test_node_fields(self):
        node = assemble(build_genz_adaptation(), self.source, self.position, "skala-asli-branch-1")
        assert node.id == "skala-asli-branch-1"
        assert node.name == "Skala Gen-Z - Skala Kepercayaan Diri"
        assert node.parent_id == "skala-asli"
        assert not node.is_root
        assert node.depth == 1
        assert node.branch_index == 0
        assert node.position == Position(650, 46)
        assert node.position_locked is True

    def test_item_ids_continue_across_dimensions(self):
        node = assemble(build_genz_adaptation(), self.source, self.position, "b")
        ids = [item.item_id for _, item in node.flatten_items()]
        assert ids == [f"b-item-{n}" for n in range(1, 11)]

    def test_positional_lineage(self):
        """The n-th item maps to the n-th source item, regardless of names."""
        node = assemble(build_genz_adaptation(), self.source, self.position, "b")
        origins = [item.origin_item_id for _, item in node.flatten_items()]
        assert origins == [str(n) for n in range(1, 11)]
        assert node.dimension_names()[0] == "Kepercayaan Diri & Keberanian"

    def test_baseline_inherited_from_source(self):
        node = assemble(build_genz_adaptation(), self.source, self.position, "b")
        for (_, item), (_, src) in zip(node.flatten_items(), self.source.flatten_items()):
            assert item.baseline_rubric == src.baseline_rubric

    def test_supplied_rubric_is_external(self):
        node = assemble(build_genz_adaptation(), self.source, self.position, "b")
        _, first = node.flatten_items()[0]
        assert first.current_rubric == (
            "Keberanian", "Mencoba hal baru", "Tanpa keraguan", "Sudut pandang orang pertama",
        )
        assert first.rubric_source == RubricSource.EXTERNALLY_GENERATED

    def test_missing_rubric_falls_back_to_baseline(self):
        node = assemble(build_boomer_adaptation(), self.source, self.position, "b")
        for _, item in node.flatten_items():
            assert item.current_rubric == item.baseline_rubric
            assert item.rubric_source == RubricSource.INHERITED_FROM_PARENT

    def test_empty_rubric_falls_back_to_baseline(self):
        payload = build_genz_adaptation()
        payload["dimensions"][0]["items"][0]["current_rubric"] = []
        node = assemble(payload, self.source, self.position, "b")
        _, first = node.flatten_items()[0]
        assert first.current_rubric == first.baseline_rubric
        assert first.rubric_source == RubricSource.INHERITED_FROM_PARENT

    def test_extra_items_have_unknown_origin(self):
        payload = build_genz_adaptation()
        payload["dimensions"][0]["items"].append({"text": "Extra statement"})
        payload["dimensions"].append({"name": "New", "items": [{"text": "Brand new"}]})
        node = assemble(payload, self.source, self.position, "b")

        extra = node.dimensions[0].items[3]
        assert extra.origin_item_id == UNKNOWN_ORIGIN
        assert extra.baseline_rubric == ()
        assert extra.item_id == "b-item-4"

        brand_new = node.dimensions[3].items[0]
        assert brand_new.origin_item_id == UNKNOWN_ORIGIN
        assert brand_new.item_id == "b-item-12"

    def test_start_counter(self):
        node = assemble(build_genz_adaptation(), self.source, self.position, "b", start_counter=5)
        assert node.flatten_items()[0][1].item_id == "b-item-5"

    def test_deterministic(self):
        a = assemble(build_genz_adaptation(), self.source, self.position, "b")
        b = assemble(build_genz_adaptation(), self.source, self.position, "b")
        assert a == b

    def test_source_untouched(self):
        before = build_example_root()
        assemble(build_genz_adaptation(), self.source, self.position, "b")
        assert self.source == before


def test_branch_node_id():
    assert branch_node_id("skala-asli", 1) == "skala-asli-branch-1"
    assert branch_node_id("skala-asli-branch-2", 3) == "skala-asli-branch-2-branch-3"


def test_scale_name_from_filename():
    assert scale_name_from_filename("skala_kemalasan-v2.csv") == "Skala Kemalasan V2"
    assert scale_name_from_filename("DATA.CSV") == "DATA"
    assert scale_name_from_filename(".csv") == "Skala Impor"


class TestRootBuilders:
    """Import path: structured result or plain records."""

    def test_build_root(self):
        structured = {
            "scale_name": "Skala Stres",
            "dimensions": [
                {"name": "Fisik", "items": [
                    {"item_id": "S1", "text": "Saya sulit tidur", "baseline_rubric": ["Tidur"]},
                    {"text": "Saya sering pusing"},
                ]},
            ],
        }
        root = build_root(structured, "stres.csv")
        assert root.id == DEFAULT_ROOT_ID
        assert root.is_root
        assert root.position == Position(100, 250)
        assert root.name == "Skala Stres"

        first, second = root.dimensions[0].items
        assert first.item_id == "S1"
        assert first.origin_item_id == "S1"
        assert first.current_rubric == first.baseline_rubric == ("Tidur",)
        assert second.item_id == "imported-2"
        assert second.baseline_rubric == ()

    def test_build_fallback_root(self):
        records = [
            IngestRecord(id="1", dimension=None, text="Saya suka belajar"),
            IngestRecord(id="", dimension=None, text="Saya rajin membaca"),
        ]
        root = build_fallback_root(records, "skala_minat.csv")
        assert root.name == "Skala Minat"
        assert root.dimension_names() == ["Item Impor"]
        ids = [item.item_id for _, item in root.flatten_items()]
        assert ids == ["1", "imported-2"]
        assert all(item.baseline_rubric == () for _, item in root.flatten_items())

    def test_fallback_root_explicit_name(self):
        records = [IngestRecord(id="1", dimension=None, text="Saya suka belajar")]
        root = build_fallback_root(records, "x.csv", name="Dari Layanan")
        assert root.name == "Dari Layanan"
