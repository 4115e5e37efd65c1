"""
Flat CSV adapter: ingest records in, flat rows out.

Ingest:
    A delimited file (comma or semicolon, detected from the header line)
    is normalized to an ordered list of IngestRecord(id, dimension, text).
    Column names vary between files, so several spellings are accepted and,
    as a last resort, the longest cell of the row is taken as the item text.

Export:
    scale_id, scale_name, parent_scale_id, dimension_name, item_id,
    origin_item_id, item_text, baseline_rubric, current_rubric

    Rubric tags are joined with ";".

NOTE: Export is one-way. Feeding an export file back through
parse_ingest_csv yields plain records (no lineage, no rubrics, no parent
links); a family is only ever rebuilt by structuring through the
generative service.
"""

import csv
from dataclasses import dataclass
from io import StringIO
from typing import Dict, Iterable, List, Optional

from scalegraph.errors import IngestError
from scalegraph.model import ScaleNode


EXPORT_COLUMNS = [
    "scale_id",
    "scale_name",
    "parent_scale_id",
    "dimension_name",
    "item_id",
    "origin_item_id",
    "item_text",
    "baseline_rubric",
    "current_rubric",
]
NODE_EXPORT_COLUMNS = [c for c in EXPORT_COLUMNS if c not in ("scale_name", "parent_scale_id")]
TAG_SEPARATOR = ";"

_ID_COLUMNS = ("item_id", "id", "ID")
_DIMENSION_COLUMNS = ("dimension", "dimensi", "Dimension")
_TEXT_COLUMNS = ("item_text", "text", "teks", "Text")
_MIN_INFERRED_TEXT = 10


@dataclass
class IngestRecord:
    """One normalized row of an ingested file."""
    id: str
    dimension: Optional[str]
    text: str


def detect_delimiter(header_line: str) -> str:
    """Semicolon only when the header has semicolons and no commas."""
    if ";" in header_line and "," not in header_line:
        return ";"
    return ","


def infer_item_text(row: Dict[str, str]) -> str:
    """Longest cell longer than 10 characters, or ''."""
    longest = ""
    for value in row.values():
        if isinstance(value, str) and len(value) > len(longest) and len(value) > _MIN_INFERRED_TEXT:
            longest = value
    return longest


def _first(row: Dict[str, str], columns: Iterable[str]) -> str:
    for col in columns:
        value = row.get(col)
        if value:
            return value
    return ""


def parse_ingest_csv(text: str) -> List[IngestRecord]:
    """
    Parse delimited text into ordered ingest records.

    Blank lines are skipped. Missing ids become the 1-based record number.

    Raises:
        IngestError: If the text has no header line
    """
    stripped = text.strip()
    if not stripped:
        raise IngestError("CSV is empty")

    header_line = stripped.splitlines()[0]
    reader = csv.reader(StringIO(stripped), delimiter=detect_delimiter(header_line))
    header = next(reader)
    columns = [name.strip() or f"column_{i + 1}" for i, name in enumerate(header)]

    records: List[IngestRecord] = []
    for values in reader:
        if not any(v.strip() for v in values):
            continue
        row = {col: (values[i].strip() if i < len(values) else "") for i, col in enumerate(columns)}
        n = len(records) + 1
        records.append(IngestRecord(
            id=_first(row, _ID_COLUMNS) or str(n),
            dimension=_first(row, _DIMENSION_COLUMNS) or None,
            text=_first(row, _TEXT_COLUMNS) or infer_item_text(row),
        ))
    return records


def parse_ingest_file(filepath: str) -> List[IngestRecord]:
    """
    Parse a CSV file into ingest records.

    Raises:
        FileNotFoundError: If file doesn't exist
        IngestError: If parsing fails
    """
    try:
        with open(filepath, "r", encoding="utf-8-sig") as f:
            content = f.read()
    except FileNotFoundError:
        raise FileNotFoundError(f"CSV file not found: {filepath}")
    return parse_ingest_csv(content)


def export_node_rows(node: ScaleNode) -> List[List[str]]:
    """Rows for a single node, header first."""
    rows = [list(NODE_EXPORT_COLUMNS)]
    for dim_name, item in node.flatten_items():
        rows.append([
            node.id,
            dim_name,
            item.item_id,
            item.origin_item_id,
            item.text,
            TAG_SEPARATOR.join(item.baseline_rubric),
            TAG_SEPARATOR.join(item.current_rubric),
        ])
    return rows


def export_rows(nodes: Iterable[ScaleNode]) -> List[List[str]]:
    """Rows for every node of a family, header first."""
    rows = [list(EXPORT_COLUMNS)]
    for node in nodes:
        for dim_name, item in node.flatten_items():
            rows.append([
                node.id,
                node.name,
                node.parent_id or "",
                dim_name,
                item.item_id,
                item.origin_item_id,
                item.text,
                TAG_SEPARATOR.join(item.baseline_rubric),
                TAG_SEPARATOR.join(item.current_rubric),
            ])
    return rows


def rows_to_csv(rows: List[List[str]]) -> str:
    out = StringIO()
    writer = csv.writer(out, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(rows)
    return out.getvalue()


def export_csv(nodes: Iterable[ScaleNode]) -> str:
    return rows_to_csv(export_rows(nodes))


def save_export_file(nodes: Iterable[ScaleNode], filename: str) -> None:
    with open(filename, "w", encoding="utf-8", newline="") as f:
        f.write(export_csv(nodes))


__all__ = [
    "EXPORT_COLUMNS",
    "NODE_EXPORT_COLUMNS",
    "IngestRecord",
    "detect_delimiter",
    "infer_item_text",
    "parse_ingest_csv",
    "parse_ingest_file",
    "export_node_rows",
    "export_rows",
    "rows_to_csv",
    "export_csv",
    "save_export_file",
]
