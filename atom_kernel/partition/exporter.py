"""
JSON Artifact Exporter.

Pure serialization of a ClusteringResult into three documents:
  clusters.json             - clusters sorted by centrality (desc)
  cluster_edges.json        - cluster edges sorted by control weight (desc)
  cluster_assignments.json  - one hard assignment per entity

No computation beyond ordering. Never fails on a valid result.
"""

from __future__ import annotations

import json
import pathlib
from typing import Any, Dict

from ..constants import CLUSTER_LEVEL, MEMBERSHIP_CONFIDENCE
from ..domain_types import ClusteringResult

CLUSTERS_FILE = "clusters.json"
CLUSTER_EDGES_FILE = "cluster_edges.json"
ASSIGNMENTS_FILE = "cluster_assignments.json"


def build_clusters_document(result: ClusteringResult) -> Dict[str, Any]:
    clusters = sorted(result.clusters, key=lambda c: (-c.metrics.centrality, c.id))
    return {
        "level": CLUSTER_LEVEL,
        "modularity_global": result.modularity_global,
        "clusters": [
            {
                "cluster_id": c.id,
                "cluster_name": c.name,
                "contains": sorted(c.entity_keys),
                "metrics": {
                    "cohesion": c.metrics.cohesion,
                    "coupling": c.metrics.coupling,
                    "modularity_local": c.metrics.modularity_local,
                    "token_estimate": c.metrics.token_estimate,
                    "blast_radius": c.metrics.blast_radius,
                    "centrality": c.metrics.centrality,
                },
                "warnings": list(c.warnings),
            }
            for c in clusters
        ],
    }


def build_cluster_edges_document(result: ClusteringResult) -> Dict[str, Any]:
    edges = sorted(
        result.cluster_edges,
        key=lambda e: (-e.control, e.from_cluster, e.to_cluster),
    )
    return {
        "level": CLUSTER_LEVEL,
        "edges": [
            {
                "from_cluster": e.from_cluster,
                "to_cluster": e.to_cluster,
                "weights": {
                    "control": e.control,
                    "data": e.data,
                    "temporal": e.temporal,
                },
                "boundary_crossings": e.boundary_crossings,
            }
            for e in edges
        ],
    }


def build_assignments_document(result: ClusteringResult) -> Dict[str, Any]:
    return {
        "assignments": [
            {
                "entity_key": key,
                "cluster_id": cluster_id,
                "membership_confidence": MEMBERSHIP_CONFIDENCE,
            }
            for key, cluster_id in sorted(result.assignments.items())
        ],
    }


def export_artifacts(
    result: ClusteringResult,
    directory: str | pathlib.Path,
) -> Dict[str, pathlib.Path]:
    """
    Write the three artifacts into directory (created if missing).

    Returns file name -> written path.
    """
    out_dir = pathlib.Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)

    documents = {
        CLUSTERS_FILE: build_clusters_document(result),
        CLUSTER_EDGES_FILE: build_cluster_edges_document(result),
        ASSIGNMENTS_FILE: build_assignments_document(result),
    }
    written: Dict[str, pathlib.Path] = {}
    for name, doc in documents.items():
        path = out_dir / name
        with open(path, "w", encoding="utf-8") as f:
            json.dump(doc, f, ensure_ascii=True, indent=2)
            f.write("\n")
        written[name] = path
    return written
