"""
Semantic Atom Clustering Service v1.0

Orchestrates one batch clustering run:
  Graph Builder      → weighted graph
  Community Detector → raw partition
  Budget Enforcer    → budget-bounded partition
  Metrics + Labeler  → frozen clusters, cluster edges, global modularity

Configuration is checked before any computation. The service holds only
configuration; nothing is cached or carried between runs.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from ..constants import ALGORITHM_NAME, DEFAULT_MAX_PASSES
from ..domain_types import (
    Cluster,
    ClusterBudget,
    ClusteringResult,
    DependencyEdge,
    Entity,
    SignalMaps,
    WeightParameters,
)
from ..graph import build_weighted_graph
from ..hashing import canonical_cluster_hash
from ..invariants import (
    EmptyGraphError,
    PartitionInvariantError,
    validate_budget,
    validate_partition,
    validate_weights,
)
from .budget import WorkingCluster, enforce_budget, entity_token_cost
from .metrics import compute_cluster_edges, compute_cluster_metrics, compute_global_modularity
from .propagation import detect_communities, initial_cluster_id
from .semantic_labeler import label_cluster

logger = logging.getLogger(__name__)


class ClusteringService:
    """
    Reusable clustering configuration.

    Safe to share between threads: run() reads only the frozen
    configuration captured at construction.
    """

    def __init__(
        self,
        weights: WeightParameters | None = None,
        budget: ClusterBudget | None = None,
        max_passes: int = DEFAULT_MAX_PASSES,
    ) -> None:
        self._weights = weights or WeightParameters()
        self._budget = budget or ClusterBudget()
        self._max_passes = max_passes
        validate_weights(self._weights)
        validate_budget(self._budget)

    @property
    def weights(self) -> WeightParameters:
        return self._weights

    @property
    def budget(self) -> ClusterBudget:
        return self._budget

    def run(
        self,
        entities: Sequence[Entity],
        edges: Sequence[DependencyEdge],
        signals: Optional[SignalMaps] = None,
    ) -> ClusteringResult:
        return run_clustering(
            entities,
            edges,
            signals=signals,
            weights=self._weights,
            budget=self._budget,
            max_passes=self._max_passes,
        )


def run_clustering(
    entities: Sequence[Entity],
    edges: Sequence[DependencyEdge],
    signals: Optional[SignalMaps] = None,
    weights: Optional[WeightParameters] = None,
    budget: Optional[ClusterBudget] = None,
    max_passes: int = DEFAULT_MAX_PASSES,
) -> ClusteringResult:
    """
    Partition entities into budget-bounded clusters.

    Pure function of its arguments and the entity order.
    Raises ConfigurationError / InvalidInput before computing anything.
    """
    weights = weights or WeightParameters()
    budget = budget or ClusterBudget()
    validate_weights(weights)
    validate_budget(budget)
    if not entities:
        raise EmptyGraphError("No entities to cluster")

    graph, warnings = build_weighted_graph(entities, edges, signals, weights)
    token_costs = [entity_token_cost(e) for e in graph.entities]

    parts = detect_communities(graph, max_passes)
    working = [
        WorkingCluster(id=initial_cluster_id(i), members=part)
        for i, part in enumerate(parts)
    ]
    logger.info(
        "Detected %d communities over %d entities / %d edges",
        len(working), graph.node_count, graph.edge_count,
    )

    working = enforce_budget(graph, working, budget, token_costs)

    clusters: List[Cluster] = []
    owner: Dict[str, str] = {}
    for wc in working:
        members = [graph.entities[m] for m in wc.members]
        clusters.append(Cluster(
            id=wc.id,
            name=label_cluster(members),
            entity_keys=tuple(sorted(e.key for e in members)),
            metrics=compute_cluster_metrics(graph, wc.members, token_costs),
            warnings=tuple(wc.warnings),
        ))
        for e in members:
            owner[e.key] = wc.id

    _validate(graph.keys, clusters)

    cluster_edges = compute_cluster_edges(graph, owner)
    modularity_global = compute_global_modularity([c.metrics for c in clusters])
    cluster_hash = canonical_cluster_hash(clusters)

    logger.info(
        "Clustering complete: %d clusters, %d cluster edges, "
        "modularity_global=%.4f, %d flagged",
        len(clusters), len(cluster_edges), modularity_global,
        sum(1 for c in clusters if c.warnings),
    )

    return ClusteringResult(
        clusters=tuple(clusters),
        cluster_edges=tuple(cluster_edges),
        modularity_global=modularity_global,
        assignments=dict(sorted(owner.items())),
        warnings=tuple(warnings),
        cluster_hash=cluster_hash,
        algorithm=ALGORITHM_NAME,
    )


def _validate(entity_keys: Sequence[str], clusters: List[Cluster]) -> None:
    """Partition covers every entity exactly once with unique ids."""
    ids = [c.id for c in clusters]
    if len(ids) != len(set(ids)):
        raise PartitionInvariantError("duplicate_id", f"Cluster ids are not unique: {ids}")
    validate_partition(entity_keys, {c.id: c.entity_keys for c in clusters})
