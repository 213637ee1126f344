# src/kubesizer/sizing/__init__.py
"""
Capacity sizing: forecast TPS to pods, HPA bounds, nodes and cost
"""

from .calculator import (
    CapacitySizer,
    derive_tps,
    required_pods,
    hpa_bounds,
    resource_footprint,
    nodes_needed,
    recommend_nodes,
    project_transactions,
    estimate_cost,
)
from .assessment import assess_headroom

__all__ = [
    "CapacitySizer",
    "derive_tps",
    "required_pods",
    "hpa_bounds",
    "resource_footprint",
    "nodes_needed",
    "recommend_nodes",
    "project_transactions",
    "estimate_cost",
    "assess_headroom",
]
