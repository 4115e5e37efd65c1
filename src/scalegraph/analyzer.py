"""
Family Analyzer — diagnostics and inventory of a scale family.

This module provides lightweight analysis of a node collection:
    - Node, branch and item counts
    - Roots, orphans and depth
    - Structural invariant checks
    - Rubric integrity (drift) per node
    - Warning flags for review

IMPORTANT: It does NOT modify the family. It only produces read-only reports.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Set

from scalegraph import graph
from scalegraph.model import IntegrityStatus, ScaleNode, integrity_status


@dataclass
class IntegrityCounts:
    """Integrity status tally for one node."""
    stable: int = 0
    mismatch: int = 0
    not_applicable: int = 0

    def add(self, status: IntegrityStatus) -> None:
        if status is IntegrityStatus.STABLE:
            self.stable += 1
        elif status is IntegrityStatus.MISMATCH:
            self.mismatch += 1
        else:
            self.not_applicable += 1


@dataclass
class FamilyReport:
    """Analysis report for a family."""

    total_nodes: int = 0
    total_branches: int = 0
    total_items: int = 0
    max_depth: int = 0

    roots: List[str] = field(default_factory=list)
    orphans: Set[str] = field(default_factory=set)

    # Invariant violations, as "node_id: description"
    violations: List[str] = field(default_factory=list)

    # Rubric drift
    integrity: Dict[str, IntegrityCounts] = field(default_factory=dict)
    drifted_items: int = 0

    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)

    @property
    def is_consistent(self) -> bool:
        return len(self.roots) <= 1 and not self.orphans and not self.violations


def analyze_family(nodes: Mapping[str, ScaleNode]) -> FamilyReport:
    """
    Perform analysis of a node collection.

    Checks for:
    - A single root with no parent and depth 0
    - Branches whose parent is missing (orphans)
    - Branch depth == parent depth + 1 and locked positions
    - Duplicate item ids within a node
    - Items whose current rubric drifted from the baseline

    Returns a FamilyReport with metrics and warnings.
    """
    report = FamilyReport()
    report.total_nodes = len(nodes)
    report.roots = graph.roots(nodes)

    for node_id, node in nodes.items():
        report.total_items += node.item_count()
        report.max_depth = max(report.max_depth, node.depth)

        # =====================================================================
        # 1. STRUCTURE
        # =====================================================================

        if graph.is_root(node):
            if node.depth != 0:
                report.violations.append(f"{node_id}: root depth is {node.depth}, expected 0")
        else:
            report.total_branches += 1
            parent = nodes.get(node.parent_id)
            if parent is None:
                report.orphans.add(node_id)
            elif node.depth != parent.depth + 1:
                report.violations.append(
                    f"{node_id}: depth is {node.depth}, expected {parent.depth + 1}"
                )
            if not node.position_locked:
                report.violations.append(f"{node_id}: branch position is not locked")

        seen: Set[str] = set()
        for _, item in node.flatten_items():
            if item.item_id in seen:
                report.violations.append(f"{node_id}: duplicate item_id {item.item_id}")
            seen.add(item.item_id)

        # =====================================================================
        # 2. INTEGRITY
        # =====================================================================

        counts = IntegrityCounts()
        for _, item in node.flatten_items():
            counts.add(integrity_status(item, node))
        report.integrity[node_id] = counts
        report.drifted_items += counts.mismatch

    # =========================================================================
    # 3. WARNING FLAGS
    # =========================================================================

    if len(report.roots) > 1:
        report.add_warning(f"Multiple roots: {', '.join(report.roots)}")

    if not report.roots and report.total_nodes > 0:
        report.add_warning("Family has no root")

    if report.orphans:
        report.add_warning(f"Orphaned scales: {', '.join(sorted(report.orphans))}")

    for violation in report.violations:
        report.add_warning(f"Invariant violated: {violation}")

    if report.drifted_items:
        report.add_warning(f"Rubric drift: {report.drifted_items} items differ from their baseline")

    return report


__all__ = ["IntegrityCounts", "FamilyReport", "analyze_family"]
