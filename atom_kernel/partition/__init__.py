"""
Semantic Atom Partition Layer v1.0

  Community Detector: synchronous label propagation
  Budget Enforcer:    split oversized, merge undersized
  Metrics + Labeler:  cohesion/coupling, cluster edges, names
  Exporter:           clusters.json, cluster_edges.json, cluster_assignments.json
"""

from .budget import WorkingCluster, enforce_budget, entity_token_cost
from .exporter import (
    build_assignments_document,
    build_cluster_edges_document,
    build_clusters_document,
    export_artifacts,
)
from .metrics import compute_cluster_edges, compute_cluster_metrics, compute_global_modularity
from .propagation import detect_communities, propagate_labels
from .semantic_labeler import label_cluster
from .service import ClusteringService, run_clustering

__all__ = [
    # Types
    "WorkingCluster",
    # Services
    "ClusteringService",
    # Functions
    "run_clustering",
    "propagate_labels",
    "detect_communities",
    "enforce_budget",
    "entity_token_cost",
    "compute_cluster_metrics",
    "compute_cluster_edges",
    "compute_global_modularity",
    "label_cluster",
    "build_clusters_document",
    "build_cluster_edges_document",
    "build_assignments_document",
    "export_artifacts",
]
