"""
Semantic Atom Kernel - Threshold Constants (Default Values)

All magic numbers live here as module-level defaults.
Per-run configuration is passed explicitly as WeightParameters and
ClusterBudget; nothing here is mutated at runtime.
"""

from .domain_types import EdgeType

# --- Graph Builder ---
# Multiplier applied to a dependency edge's frequency, by edge type.
EDGE_TYPE_FACTORS = {
    EdgeType.CALL: 1.0,
    EdgeType.TYPE_USE: 0.5,
    EdgeType.READ: 0.5,
    EdgeType.WRITE: 0.5,
    EdgeType.OTHER: 0.2,
}

# Edge types whose contribution counts as data flow in ClusterEdge.data.
DATA_EDGE_TYPES = frozenset({EdgeType.READ, EdgeType.WRITE})

# --- Community Detector ---
DEFAULT_MAX_PASSES: int = 25
SPLIT_MAX_PASSES: int = 20

# --- Budget Enforcer ---
DEFAULT_ENTITY_TOKENS: int = 100
MAX_SPLIT_PASSES: int = 64
MAX_MERGE_PASSES: int = 64

# --- Labeler ---
UNNAMED_CLUSTER: str = "unnamed_cluster"

# --- Exporter ---
CLUSTER_LEVEL: str = "0.5"
MEMBERSHIP_CONFIDENCE: float = 1.0
ALGORITHM_NAME: str = "label_propagation"
