"""
Scale/Item Assembler: builds complete nodes from validated results.

    assemble: branch node from an adaptation result
    build_root: root node from a structuring result
    build_fallback_root: root node straight from ingest records

IMPORTANT: Assembly is pure. It never reads or writes the store and never
calls the generative service. Identical inputs give identical nodes.

Correspondence between a new node and its source is POSITIONAL: the n-th
item of the n-th dimension of the result maps to the n-th item of the n-th
source dimension, whatever the names say.
"""

from __future__ import annotations

import re
from typing import Any, List, Mapping, Optional, Sequence

from scalegraph.layout import BranchPosition
from scalegraph.model import Dimension, Item, Position, RubricSource, ScaleNode


UNKNOWN_ORIGIN = "unknown"
FALLBACK_DIMENSION = "Item Impor"
FALLBACK_SCALE_NAME = "Skala Impor"
DEFAULT_ROOT_ID = "imported-scale"
DEFAULT_ROOT_POSITION = Position(100, 250)


def branch_node_id(parent_id: str, branch_number: int) -> str:
    """Id for the branch_number-th (1-based) branch of parent_id."""
    return f"{parent_id}-branch-{branch_number}"


def item_node_id(node_id: str, n: int) -> str:
    return f"{node_id}-item-{n}"


def assemble_dimensions(result_dimensions: Sequence[Mapping[str, Any]], new_id: str,
                        source_dimensions: Sequence[Dimension],
                        start_counter: int = 1) -> List[Dimension]:
    """
    Expand result dimensions into full Dimensions with lineage and rubrics.

    The item counter runs across the whole node; it is not reset per dimension.
    """
    counter = start_counter
    dimensions: List[Dimension] = []

    for dim_index, dim in enumerate(result_dimensions):
        source_items = source_dimensions[dim_index].items if dim_index < len(source_dimensions) else []
        items: List[Item] = []

        for item_index, raw in enumerate(dim["items"]):
            source_item = source_items[item_index] if item_index < len(source_items) else None
            baseline = source_item.baseline_rubric if source_item is not None else ()

            supplied = raw.get("current_rubric") or []
            if supplied:
                current, rubric_source = tuple(supplied), RubricSource.EXTERNALLY_GENERATED
            else:
                current, rubric_source = baseline, RubricSource.INHERITED_FROM_PARENT

            items.append(Item(
                item_id=item_node_id(new_id, counter),
                origin_item_id=source_item.item_id if source_item is not None else UNKNOWN_ORIGIN,
                text=raw["text"],
                baseline_rubric=baseline,
                current_rubric=current,
                rubric_source=rubric_source,
            ))
            counter += 1

        dimensions.append(Dimension(name=dim["name"], items=items))

    return dimensions


def assemble(result: Mapping[str, Any], source: ScaleNode, position: BranchPosition,
             new_id: str, start_counter: int = 1) -> ScaleNode:
    """
    Assemble a complete branch node.

    Args:
        result: Validated adaptation result {scale_name, dimensions}
        source: Node the adaptation was made from
        position: Output of next_branch_position for this branch
        new_id: Unique id for the new node
        start_counter: First item number

    Returns:
        ScaleNode ready for ScaleStore.add
    """
    return ScaleNode.branch(
        id=new_id,
        name=result["scale_name"],
        parent_id=source.id,
        position=position.point,
        depth=position.depth,
        branch_index=position.branch_index,
        dimensions=assemble_dimensions(result["dimensions"], new_id, source.dimensions, start_counter),
    )


def scale_name_from_filename(filename: str) -> str:
    """'skala_kemalasan-v2.csv' -> 'Skala Kemalasan V2'."""
    stem = re.sub(r"\.csv$", "", filename, flags=re.IGNORECASE)
    stem = re.sub(r"[_-]", " ", stem).strip()
    name = re.sub(r"\b\w", lambda m: m.group(0).upper(), stem)
    return name or FALLBACK_SCALE_NAME


def build_root(structured: Mapping[str, Any], filename: str, node_id: str = DEFAULT_ROOT_ID,
               position: Position = DEFAULT_ROOT_POSITION) -> ScaleNode:
    """
    Build a root node from an accepted structuring result.

    Root items are their own origin, and their current rubric starts equal
    to the baseline extracted by the service.
    """
    dimensions: List[Dimension] = []
    counter = 1
    for dim in structured["dimensions"]:
        items: List[Item] = []
        for raw in dim["items"]:
            item_id = str(raw.get("item_id") or f"imported-{counter}")
            baseline = tuple(raw.get("baseline_rubric") or ())
            items.append(Item(
                item_id=item_id,
                origin_item_id=item_id,
                text=raw["text"],
                baseline_rubric=baseline,
                current_rubric=baseline,
                rubric_source=RubricSource.INHERITED_FROM_PARENT,
            ))
            counter += 1
        dimensions.append(Dimension(name=dim["name"], items=items))

    name = structured.get("scale_name") or scale_name_from_filename(filename)
    return ScaleNode.root(id=node_id, name=name, position=position, dimensions=dimensions)


def build_fallback_root(records: Sequence[Any], filename: str, node_id: str = DEFAULT_ROOT_ID,
                        position: Position = DEFAULT_ROOT_POSITION,
                        name: Optional[str] = None) -> ScaleNode:
    """
    Build a single-dimension root directly from ingest records.

    Used when no structuring service is available or it returned no
    dimensions. Rubrics are empty until an extraction pass fills them.
    """
    items = []
    for n, record in enumerate(records, start=1):
        item_id = str(record.id) if record.id not in (None, "") else f"imported-{n}"
        items.append(Item(item_id=item_id, origin_item_id=item_id, text=record.text))
    return ScaleNode.root(
        id=node_id,
        name=name or scale_name_from_filename(filename),
        position=position,
        dimensions=[Dimension(name=FALLBACK_DIMENSION, items=items)],
    )


__all__ = [
    "UNKNOWN_ORIGIN",
    "DEFAULT_ROOT_ID",
    "DEFAULT_ROOT_POSITION",
    "branch_node_id",
    "item_node_id",
    "assemble_dimensions",
    "assemble",
    "scale_name_from_filename",
    "build_root",
    "build_fallback_root",
]
