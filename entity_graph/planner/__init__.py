"""Planner layer - fetch plans, merge groups and their statements."""

from __future__ import annotations

from entity_graph.planner.grouping import MergeGroup, partition
from entity_graph.planner.paths import PathNode, build_path_tree
from entity_graph.planner.planner import FetchPlan, FetchPlanner
from entity_graph.planner.statements import Contains

__all__ = [
    "FetchPlanner",
    "FetchPlan",
    "Contains",
    "MergeGroup",
    "PathNode",
    "build_path_tree",
    "partition",
]
