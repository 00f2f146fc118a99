"""
Semantic Atom Kernel - Canonical Cluster Hashing v1.0

Deterministic canonical serialization + SHA-256 hashing of a partition.
Identical inputs, parameters and entity order produce identical hashes.

Rules:
  - Clusters sorted by id
  - Member keys sorted
  - Metrics in fixed field order
  - UTF-8 JSON, no whitespace, no platform newline
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Dict, List, Sequence

from .domain_types import Cluster


def canonical_cluster_serialize(clusters: Sequence[Cluster]) -> bytes:
    canonical: List[Dict[str, Any]] = []
    for c in sorted(clusters, key=lambda c: c.id):
        canonical.append({
            "id": c.id,
            "name": c.name,
            "entity_keys": sorted(c.entity_keys),
            "metrics": [
                c.metrics.cohesion,
                c.metrics.coupling,
                c.metrics.modularity_local,
                c.metrics.token_estimate,
                c.metrics.blast_radius,
                c.metrics.centrality,
            ],
        })
    return json.dumps(
        canonical, ensure_ascii=True, separators=(",", ":"), sort_keys=False,
    ).encode("utf-8")


def canonical_cluster_hash(clusters: Sequence[Cluster]) -> str:
    """SHA-256 of canonical cluster serialization. Lowercase hex string."""
    return hashlib.sha256(canonical_cluster_serialize(clusters)).hexdigest()
