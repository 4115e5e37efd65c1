"""
Validation gates for externally-generated payloads.

The generative service returns unstructured, untrusted JSON. Nothing is
built from it until it has passed one of the gates below.

    validate_adaptation: branch adaptation results
    validate_structuring: ingest structuring results (root import)

Shape violations raise with the exact field path, e.g.
"dimensions[1].items[0].text". Structural drift (different dimension or
item counts than the source node) is only a warning: a person remains the
authority on whether the adaptation is acceptable.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional

from scalegraph.errors import (
    AdaptationValidationError,
    StructuralWarning,
    StructuringValidationError,
)
from scalegraph.model import ScaleNode


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _is_tag_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(tag, str) for tag in value)


# =============================================================================
# ADAPTATION RESULTS
# =============================================================================


@dataclass
class AdaptationCheck:
    """Outcome of a successful adaptation validation."""

    warnings: List[str] = field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


def structural_warnings(payload: Mapping[str, Any], source: ScaleNode) -> List[str]:
    """Count mismatches between a (shape-valid) payload and its source node."""
    found: List[str] = []
    dims = payload["dimensions"]
    if len(dims) != len(source.dimensions):
        found.append(
            f"Dimension count mismatch: expected={len(source.dimensions)}, got={len(dims)}"
        )
    for dim, source_dim in zip(dims, source.dimensions):
        if len(dim["items"]) != len(source_dim.items):
            found.append(
                f'Item count mismatch in dimension "{dim["name"]}": '
                f"expected={len(source_dim.items)}, got={len(dim['items'])}"
            )
    return found


def validate_adaptation(payload: Any, source: Optional[ScaleNode] = None) -> AdaptationCheck:
    """
    Check an adaptation payload against the required shape.

    Required:
        {
          "scale_name": non-empty string,
          "dimensions": [                       # non-empty
            {"name": non-empty string,
             "items": [                         # non-empty
               {"text": non-empty string,
                "current_rubric": [str, ...]}   # optional
             ]}
          ]
        }

    Args:
        payload: Parsed JSON from the generative service
        source: Source node, for structural comparison (optional)

    Returns:
        AdaptationCheck with any non-fatal structural warnings

    Raises:
        AdaptationValidationError: On the first missing or mistyped field
    """
    if not isinstance(payload, Mapping):
        raise AdaptationValidationError("response", "No response object")
    if payload.get("error"):
        raise AdaptationValidationError("error", str(payload["error"]))
    if not _is_text(payload.get("scale_name")):
        raise AdaptationValidationError("scale_name", "Missing scale_name")

    dims = payload.get("dimensions")
    if not isinstance(dims, list) or not dims:
        raise AdaptationValidationError("dimensions", "Missing or empty dimensions")

    for i, dim in enumerate(dims):
        path = f"dimensions[{i}]"
        if not isinstance(dim, Mapping):
            raise AdaptationValidationError(path, f"Dimension {i + 1} is not an object")
        if not _is_text(dim.get("name")):
            raise AdaptationValidationError(f"{path}.name", f"Dimension {i + 1} missing name")
        items = dim.get("items")
        if not isinstance(items, list) or not items:
            raise AdaptationValidationError(f"{path}.items", f'Dimension "{dim["name"]}" has no items')
        for j, item in enumerate(items):
            item_path = f"{path}.items[{j}]"
            if not isinstance(item, Mapping):
                raise AdaptationValidationError(item_path, f'Item {j + 1} in "{dim["name"]}" is not an object')
            if not _is_text(item.get("text")):
                raise AdaptationValidationError(
                    f"{item_path}.text", f'Item {j + 1} in "{dim["name"]}" missing text'
                )
            rubric = item.get("current_rubric")
            if rubric is not None and not _is_tag_list(rubric):
                raise AdaptationValidationError(
                    f"{item_path}.current_rubric", "current_rubric must be a list of strings"
                )

    check = AdaptationCheck()
    if source is not None:
        check.warnings = structural_warnings(payload, source)
        for msg in check.warnings:
            warnings.warn(msg, StructuralWarning, stacklevel=2)
    return check


# =============================================================================
# STRUCTURING RESULTS (ROOT IMPORT)
# =============================================================================


class StructuringStatus(Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass
class StructuringVerdict:
    """
    Tri-state result of the ingest sanity gate.

    ACCEPTED: payload is a scale; build the root from it
    REJECTED: the service says the input is not a scale (rejection_reason)
    (invalid): malformed payload; validate_structuring raises instead
    """

    status: StructuringStatus
    rejection_reason: Optional[str] = None
    has_dimensions: bool = True

    @property
    def accepted(self) -> bool:
        return self.status is StructuringStatus.ACCEPTED


def validate_structuring(payload: Any) -> StructuringVerdict:
    """
    Check a structuring payload from the ingest path.

    A payload with is_valid_scale == False short-circuits the pipeline
    before any structure is checked. Otherwise scale_name and a dimensions
    list are required; an empty dimensions list is allowed (callers fall
    back to a single-dimension root). Each item needs non-empty text, and a
    baseline_rubric, when present, must be a list of strings.
    """
    if not isinstance(payload, Mapping):
        raise StructuringValidationError("response", "No response object")

    if payload.get("is_valid_scale") is False:
        reason = payload.get("rejection_reason") or "Invalid scale data"
        return StructuringVerdict(status=StructuringStatus.REJECTED, rejection_reason=str(reason))

    if not _is_text(payload.get("scale_name")):
        raise StructuringValidationError("scale_name", "Missing scale_name")

    dims = payload.get("dimensions")
    if not isinstance(dims, list):
        raise StructuringValidationError("dimensions", "Missing dimensions array")

    for i, dim in enumerate(dims):
        path = f"dimensions[{i}]"
        if not isinstance(dim, Mapping) or not _is_text(dim.get("name")):
            raise StructuringValidationError(f"{path}.name", f"Dimension {i + 1} missing name")
        items = dim.get("items")
        if not isinstance(items, list):
            raise StructuringValidationError(f"{path}.items", "Missing items array")
        for j, item in enumerate(items):
            item_path = f"{path}.items[{j}]"
            if not isinstance(item, Mapping) or not _is_text(item.get("text")):
                raise StructuringValidationError(f"{item_path}.text", "Missing item text")
            rubric = item.get("baseline_rubric")
            if rubric is not None and not _is_tag_list(rubric):
                raise StructuringValidationError(
                    f"{item_path}.baseline_rubric", "baseline_rubric must be a list of strings"
                )

    return StructuringVerdict(
        status=StructuringStatus.ACCEPTED,
        has_dimensions=payload.get("has_dimensions") is not False,
    )


__all__ = [
    "AdaptationCheck",
    "structural_warnings",
    "validate_adaptation",
    "StructuringStatus",
    "StructuringVerdict",
    "validate_structuring",
]
