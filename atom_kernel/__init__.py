"""
Semantic Atom Kernel v1.0
Deterministic partitioning of a code dependency graph into
size- and token-bounded clusters.
"""

from .domain_types import (
    Entity, DependencyEdge, EdgeType, SignalMaps, WeightParameters,
    ClusterBudget, Cluster, ClusterMetrics, ClusterEdge, ClusteringResult,
    pair_key,
)
from .invariants import (
    ClusteringError,
    InvalidInput,
    EmptyGraphError,
    ConfigurationError,
    PartitionInvariantError,
)
from .graph import WeightedGraph, build_weighted_graph
from .hashing import canonical_cluster_hash
from .diagnostics import compute_quality_summary

__all__ = [
    "Entity",
    "DependencyEdge",
    "EdgeType",
    "SignalMaps",
    "WeightParameters",
    "ClusterBudget",
    "Cluster",
    "ClusterMetrics",
    "ClusterEdge",
    "ClusteringResult",
    "pair_key",
    "ClusteringError",
    "InvalidInput",
    "EmptyGraphError",
    "ConfigurationError",
    "PartitionInvariantError",
    "WeightedGraph",
    "build_weighted_graph",
    "canonical_cluster_hash",
    "compute_quality_summary",
]
