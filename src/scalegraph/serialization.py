"""
Serialization helpers for scale nodes and families.

Provides JSON/YAML round-trip via an intermediate dict representation,
plus the request payloads sent to the generative service.
This module intentionally keeps serialization structure stable and explicit.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from scalegraph.model import (
    Dimension,
    Item,
    Position,
    RubricSource,
    ScaleNode,
)


def position_to_dict(p: Position) -> Dict[str, Any]:
    return {"x": p.x, "y": p.y}


def position_from_dict(d: Mapping[str, Any] | None) -> Position:
    if not d:
        return Position(0, 0)
    return Position(x=d.get("x", 0), y=d.get("y", 0))


def item_to_dict(i: Item) -> Dict[str, Any]:
    return {
        "item_id": i.item_id,
        "origin_item_id": i.origin_item_id,
        "text": i.text,
        "baseline_rubric": list(i.baseline_rubric),
        "current_rubric": list(i.current_rubric),
        "rubric_source": i.rubric_source.value,
    }


def item_from_dict(d: Mapping[str, Any]) -> Item:
    return Item(
        item_id=d["item_id"],
        text=d.get("text", ""),
        origin_item_id=d.get("origin_item_id", "unknown"),
        baseline_rubric=d.get("baseline_rubric") or (),
        current_rubric=d.get("current_rubric") or (),
        rubric_source=RubricSource(d.get("rubric_source", RubricSource.INHERITED_FROM_PARENT.value)),
    )


def dimension_to_dict(dim: Dimension) -> Dict[str, Any]:
    return {"name": dim.name, "items": [item_to_dict(i) for i in dim.items]}


def dimension_from_dict(d: Mapping[str, Any]) -> Dimension:
    return Dimension(name=d.get("name", ""), items=[item_from_dict(i) for i in d.get("items", [])])


def node_to_dict(n: ScaleNode) -> Dict[str, Any]:
    return {
        "id": n.id,
        "name": n.name,
        "parent_id": n.parent_id,
        "is_root": n.is_root,
        "depth": n.depth,
        "branch_index": n.branch_index,
        "position": position_to_dict(n.position),
        "position_locked": n.position_locked,
        "expanded": n.expanded,
        "dimensions": [dimension_to_dict(d) for d in n.dimensions],
    }


def node_from_dict(d: Mapping[str, Any]) -> ScaleNode:
    return ScaleNode(
        id=d["id"],
        name=d.get("name", ""),
        position=position_from_dict(d.get("position")),
        parent_id=d.get("parent_id"),
        is_root=bool(d.get("is_root", False)),
        depth=d.get("depth", 0),
        branch_index=d.get("branch_index"),
        position_locked=bool(d.get("position_locked", False)),
        dimensions=[dimension_from_dict(dim) for dim in d.get("dimensions") or []],
        expanded=bool(d.get("expanded", False)),
    )


def family_to_dict(nodes: Mapping[str, ScaleNode], active_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "active_id": active_id,
        "nodes": [node_to_dict(n) for n in nodes.values()],
    }


def family_from_dict(d: Mapping[str, Any]) -> Dict[str, Any]:
    """Returns {"active_id": ..., "nodes": {id: ScaleNode}} preserving order."""
    nodes = [node_from_dict(n) for n in d.get("nodes", [])]
    return {"active_id": d.get("active_id"), "nodes": {n.id: n for n in nodes}}


def family_to_json(nodes: Mapping[str, ScaleNode], active_id: Optional[str] = None) -> str:
    return json.dumps(family_to_dict(nodes, active_id), sort_keys=True, ensure_ascii=False)


def family_from_json(s: str) -> Dict[str, Any]:
    return family_from_dict(json.loads(s))


def family_to_yaml(nodes: Mapping[str, ScaleNode], active_id: Optional[str] = None) -> str:
    return yaml.safe_dump(family_to_dict(nodes, active_id), allow_unicode=True, sort_keys=False)


def family_from_yaml(s: str) -> Dict[str, Any]:
    return family_from_dict(yaml.safe_load(s))


# =============================================================================
# REQUESTS TO THE GENERATIVE SERVICE
# =============================================================================


def build_adaptation_request(source: ScaleNode, adaptation_intent: str) -> Dict[str, Any]:
    """
    Payload the transport collaborator sends for a branch adaptation.

    Only names and item texts leave the engine: ids, lineage and rubrics
    are injected back by the assembler.
    """
    return {
        "source_scale_name": source.name,
        "source_dimensions": [
            {"name": dim.name, "items": [item.text for item in dim.items]}
            for dim in source.dimensions
        ],
        "adaptation_intent": adaptation_intent,
    }


def build_structuring_request(records: Sequence[Any], filename: str) -> Dict[str, Any]:
    """Payload the transport collaborator sends to structure an ingested file."""
    items: List[Dict[str, Any]] = [
        {"id": r.id if r.id not in (None, "") else n, "dimension": r.dimension, "text": r.text}
        for n, r in enumerate(records, start=1)
    ]
    return {"filename": filename, "item_count": len(items), "items": items}


__all__ = [
    "node_to_dict",
    "node_from_dict",
    "family_to_dict",
    "family_from_dict",
    "family_to_json",
    "family_from_json",
    "family_to_yaml",
    "family_from_yaml",
    "build_adaptation_request",
    "build_structuring_request",
]
