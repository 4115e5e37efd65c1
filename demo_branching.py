#!/usr/bin/env python3
"""
Branching Demo: Root → Adaptations → Analysis → Export

Shows the full workflow against a canned generative service:
1. Load the example "Skala Asli" root
2. Branch it into Gen-Z and Boomer adaptations
3. Delete a branch and branch off the survivor
4. Analyze the family
5. Export flat rows and a YAML snapshot
"""

import asyncio

from scalegraph.analyzer import analyze_family
from scalegraph.csv_io import export_rows
from scalegraph.examples import build_boomer_adaptation, build_example_root, build_genz_adaptation
from scalegraph.orchestrator import ScaleWorkbench
from scalegraph.serialization import family_to_yaml
from scalegraph.store import ScaleStore


CANNED = {
    "Gen-Z": build_genz_adaptation,
    "Boomer": build_boomer_adaptation,
}


async def canned_service(request):
    """Stands in for the generative service: answers by intent keyword."""
    for keyword, build in CANNED.items():
        if keyword in request["adaptation_intent"]:
            return build()
    return build_genz_adaptation()


def describe(outcome):
    node = outcome.node
    return f"{node.id} '{node.name}' at ({node.position.x}, {node.position.y}), depth {node.depth}"


async def run(bench):
    # =========================================================================
    # STEP 2: Branch
    # =========================================================================
    print("\n2. BRANCHING...")
    genz = await bench.branch("skala-asli", "Adaptasi untuk remaja Gen-Z")
    print(f"   ✓ {genz.status.value}: {describe(genz)}")
    boomer = await bench.branch("skala-asli", "Adaptasi untuk generasi Boomer")
    print(f"   ✓ {boomer.status.value}: {describe(boomer)}")

    # =========================================================================
    # STEP 3: Delete and branch again
    # =========================================================================
    print("\n3. DELETING AND RE-BRANCHING...")
    plan = bench.prepare_delete(genz.node.id)
    removed = bench.confirm_delete(plan)
    print(f"   ✓ Removed {removed} scale(s): {sorted(plan.ids)}")
    grandchild = await bench.branch(boomer.node.id, "Gen-Z dari sudut pandang Boomer")
    print(f"   ✓ {grandchild.status.value}: {describe(grandchild)}")


def main():
    print("=" * 80)
    print("BRANCHING DEMO: Root → Adaptations → Analysis → Export")
    print("=" * 80)

    # =========================================================================
    # STEP 1: Root
    # =========================================================================
    print("\n1. LOADING ROOT...")
    store = ScaleStore()
    root = store.add(build_example_root())
    store.set_active(root.id)
    print(f"   ✓ Root: {root.name}")
    print(f"   ✓ Dimensions: {', '.join(root.dimension_names())}")
    print(f"   ✓ Items: {root.item_count()}")

    bench = ScaleWorkbench(store, adaptation_client=canned_service)
    asyncio.run(run(bench))

    # =========================================================================
    # STEP 4: Analyze
    # =========================================================================
    print("\n4. ANALYZING FAMILY...")
    report = analyze_family(store.nodes)
    print(f"   ✓ Scales: {report.total_nodes} ({report.total_branches} branches)")
    print(f"   ✓ Items: {report.total_items}")
    print(f"   ✓ Max depth: {report.max_depth}")
    for node_id, counts in report.integrity.items():
        print(f"     {node_id}: stable={counts.stable} mismatch={counts.mismatch} n/a={counts.not_applicable}")

    if report.warnings:
        print(f"\n   Warnings ({len(report.warnings)}):")
        for warning in report.warnings[:5]:
            print(f"      - {warning}")

    # =========================================================================
    # STEP 5: Export
    # =========================================================================
    print("\n5. EXPORT SAMPLE:")
    print("-" * 80)
    rows = export_rows(store.nodes.values())
    for row in rows[:4]:
        print(f"   {' | '.join(row[:5])}")
    print(f"   ... ({len(rows) - 4} more rows)")

    snapshot = family_to_yaml(store.nodes, store.active_id)
    print(f"\n   YAML snapshot: {len(snapshot.splitlines())} lines")

    print("\n" + "=" * 80)
    print("DEMO COMPLETE!")
    print("=" * 80)


if __name__ == "__main__":
    main()
