"""
Semantic Atom Kernel - Diagnostics v1.0

Summarise the quality of a finished clustering run.
"""

from __future__ import annotations

from .domain_types import ClusteringResult


def compute_quality_summary(result: ClusteringResult) -> dict:
    """
    Return a diagnostic dict summarising partition health.
    Averages are over all clusters; 0.0 when there are none.
    """
    clusters = result.clusters
    count = len(clusters)
    avg_cohesion = sum(c.metrics.cohesion for c in clusters) / count if count else 0.0
    avg_coupling = sum(c.metrics.coupling for c in clusters) / count if count else 0.0

    warnings: list[str] = list(result.warnings)
    for c in clusters:
        for w in c.warnings:
            warnings.append(f"{c.id}: {w}")

    singletons = sorted(c.id for c in clusters if len(c.entity_keys) == 1)
    if count and len(singletons) == count:
        warnings.append(
            f"All {count} cluster(s) are singletons; dependency graph has no usable edges"
        )

    return {
        "algorithm": result.algorithm,
        "cluster_count": count,
        "entity_count": len(result.assignments),
        "avg_cohesion": avg_cohesion,
        "avg_coupling": avg_coupling,
        "modularity_global": result.modularity_global,
        "cluster_edge_count": len(result.cluster_edges),
        "flagged_cluster_count": sum(1 for c in clusters if c.warnings),
        "singleton_clusters": singletons,
        "warnings": warnings,
    }
