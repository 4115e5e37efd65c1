"""
Tests for the flat CSV adapter.

Ingest normalizes assorted column spellings to IngestRecord. Export writes
the flat lineage rows and is deliberately not parsed back.
"""

import csv
from io import StringIO

import pytest
from scalegraph.csv_io import (
    EXPORT_COLUMNS,
    NODE_EXPORT_COLUMNS,
    IngestRecord,
    detect_delimiter,
    export_csv,
    export_node_rows,
    export_rows,
    infer_item_text,
    parse_ingest_csv,
    parse_ingest_file,
    save_export_file,
)
from scalegraph.errors import IngestError
from scalegraph.examples import build_example_family


class TestDelimiter:

    def test_comma_default(self):
        assert detect_delimiter("id,dimension,text") == ","

    def test_semicolon_only(self):
        assert detect_delimiter("id;dimension;text") == ";"

    def test_mixed_prefers_comma(self):
        assert detect_delimiter("id;dimension,text") == ","


class TestIngest:
    """Column normalization."""

    def test_basic(self):
        text = "id,dimension,text\nQ1,Fisik,Saya sulit tidur\nQ2,Fisik,Saya sering pusing\n"
        records = parse_ingest_csv(text)
        assert records == [
            IngestRecord(id="Q1", dimension="Fisik", text="Saya sulit tidur"),
            IngestRecord(id="Q2", dimension="Fisik", text="Saya sering pusing"),
        ]

    def test_semicolon_file(self):
        text = "ID;Dimension;Text\n1;Sosial;Saya mudah bergaul, kata teman saya\n"
        records = parse_ingest_csv(text)
        assert records[0].text == "Saya mudah bergaul, kata teman saya"
        assert records[0].dimension == "Sosial"

    def test_indonesian_headers(self):
        text = "dimensi,teks\nKognitif,Saya cepat memahami pelajaran\n"
        record = parse_ingest_csv(text)[0]
        assert record.dimension == "Kognitif"
        assert record.text == "Saya cepat memahami pelajaran"

    def test_missing_id_uses_row_number(self):
        text = "text\nSaya suka belajar\n\nSaya rajin membaca\n"
        records = parse_ingest_csv(text)
        assert [r.id for r in records] == ["1", "2"]
        assert records[0].dimension is None

    def test_quoted_multiline_cell(self):
        text = 'id,text\n1,"Saya merasa\ntenang"\n'
        assert parse_ingest_csv(text)[0].text == "Saya merasa\ntenang"

    def test_text_inferred_from_longest_cell(self):
        text = "no,pernyataan\n7,Saya merasa bahagia setiap hari\n"
        record = parse_ingest_csv(text)[0]
        assert record.text == "Saya merasa bahagia setiap hari"
        assert record.id == "1"

    def test_infer_item_text_ignores_short_cells(self):
        assert infer_item_text({"a": "short", "b": "tiny"}) == ""

    def test_empty_input(self):
        with pytest.raises(IngestError):
            parse_ingest_csv("   \n ")

    def test_parse_file(self, tmp_path):
        path = tmp_path / "skala.csv"
        path.write_text("\ufeffid,text\n1,Saya suka belajar\n", encoding="utf-8")
        records = parse_ingest_file(str(path))
        assert records[0].id == "1"

    def test_parse_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            parse_ingest_file(str(tmp_path / "nope.csv"))


class TestExport:
    """Flat lineage rows."""

    def test_header_and_row_count(self):
        store = build_example_family()
        rows = export_rows(store.nodes.values())
        assert rows[0] == EXPORT_COLUMNS
        assert len(rows) == 1 + 30

    def test_branch_row(self):
        store = build_example_family()
        rows = export_rows(store.nodes.values())
        genz_first = rows[11]
        assert genz_first[:7] == [
            "skala-asli-branch-1",
            "Skala Gen-Z - Skala Kepercayaan Diri",
            "skala-asli",
            "Kepercayaan Diri & Keberanian",
            "skala-asli-branch-1-item-1",
            "1",
            "Saya berani mencoba hal baru tanpa ragu",
        ]
        assert genz_first[8] == "Keberanian;Mencoba hal baru;Tanpa keraguan;Sudut pandang orang pertama"

    def test_root_has_empty_parent(self):
        rows = export_rows(build_example_family().nodes.values())
        assert rows[1][2] == ""

    def test_node_rows(self):
        root = build_example_family().root()
        rows = export_node_rows(root)
        assert rows[0] == NODE_EXPORT_COLUMNS
        assert len(rows) == 11

    def test_csv_text_is_quoted(self):
        out = export_csv(build_example_family().nodes.values())
        parsed = list(csv.reader(StringIO(out)))
        assert parsed[0] == EXPORT_COLUMNS
        assert out.startswith('"scale_id"')

    def test_save_export_file(self, tmp_path):
        path = tmp_path / "out.csv"
        save_export_file(build_example_family().nodes.values(), str(path))
        assert path.read_text(encoding="utf-8").count("\n") == 31

    def test_export_is_one_way(self):
        """Re-ingesting an export yields plain records; lineage is lost."""
        out = export_csv(build_example_family().nodes.values())
        records = parse_ingest_csv(out)
        assert len(records) == 30
        assert records[10] == IngestRecord(
            id="skala-asli-branch-1-item-1",
            dimension=None,
            text="Saya berani mencoba hal baru tanpa ragu",
        )
        assert not hasattr(records[10], "origin_item_id")
