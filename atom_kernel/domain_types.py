"""
Semantic Atom Kernel - Core Domain Types v1.0

Pure data. No behaviour beyond construction-time normalisation.
Inputs are produced upstream and treated as read-only here.

────────────────────────────────────────────────
DOMAIN GLOSSARY
────────────────────────────────────────────────

Entity:
    A unit of code (function, type, module) identified by a unique key.

Signal:
    An auxiliary affinity in [0, 1] between two entities, independent of
    direct dependency edges (temporal co-change, data affinity, semantic
    similarity).

Token estimate:
    Approximate context-window cost of a cluster.

────────────────────────────────────────────────
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional, Tuple


Pair = Tuple[str, str]


def pair_key(a: str, b: str) -> Pair:
    """Unordered pair as a sorted tuple."""
    return (a, b) if a <= b else (b, a)


# ── Inputs ────────────────────────────────────────────────────

class EdgeType(str, Enum):
    """Closed set of dependency kinds emitted by the extractor."""

    CALL = "call"
    TYPE_USE = "type_use"
    READ = "read"
    WRITE = "write"
    OTHER = "other"


@dataclass(frozen=True)
class Entity:
    """A single code entity - the unit being clustered."""

    key: str
    language: str
    file_path: str
    name: str
    lines_of_code: Optional[int] = None
    signature_tokens: Optional[int] = None


@dataclass(frozen=True)
class DependencyEdge:
    """Directed dependency between two entities."""

    from_key: str
    to_key: str
    edge_type: EdgeType = EdgeType.CALL
    frequency: float = 1.0


@dataclass(frozen=True)
class SignalMaps:
    """
    Auxiliary pairwise signals, keyed by unordered entity pair.

    Use SignalMaps.from_raw() to normalise caller-supplied mappings;
    direct construction expects keys already in pair_key() form.
    """

    temporal: Dict[Pair, float] = field(default_factory=dict)
    data: Dict[Pair, float] = field(default_factory=dict)
    semantic: Dict[Pair, float] = field(default_factory=dict)

    @classmethod
    def from_raw(
        cls,
        temporal: Optional[Mapping[Pair, float]] = None,
        data: Optional[Mapping[Pair, float]] = None,
        semantic: Optional[Mapping[Pair, float]] = None,
    ) -> "SignalMaps":
        from .invariants import validate_signal_value

        def _normalise(name: str, raw: Optional[Mapping[Pair, float]]) -> Dict[Pair, float]:
            out: Dict[Pair, float] = {}
            for (a, b), value in (raw or {}).items():
                value = float(value)
                validate_signal_value(name, a, b, value)
                if a == b:
                    continue
                key = pair_key(a, b)
                out[key] = max(out.get(key, 0.0), value)
            return dict(sorted(out.items()))

        return cls(
            temporal=_normalise("temporal", temporal),
            data=_normalise("data", data),
            semantic=_normalise("semantic", semantic),
        )

    def is_empty(self) -> bool:
        return not (self.temporal or self.data or self.semantic)


# ── Configuration ─────────────────────────────────────────────

@dataclass(frozen=True)
class WeightParameters:
    """Multipliers for the four edge-weight signals, plus a per-edge cap."""

    alpha_dep: float = 1.0
    beta_data: float = 0.8
    gamma_temp: float = 0.6
    delta_sem: float = 0.4
    max_edge_weight: float = 10.0


@dataclass(frozen=True)
class ClusterBudget:
    """Size and token bounds every cluster should satisfy."""

    min_fun: int = 3
    max_fun: int = 20
    min_tokens: int = 200
    max_tokens: int = 4000


# ── Outputs ───────────────────────────────────────────────────

@dataclass(frozen=True)
class ClusterMetrics:
    """
    Quality metrics for one cluster.

    cohesion + coupling == 1.0 whenever the cluster has incident weight,
    otherwise both are 0.0.
    """

    cohesion: float
    coupling: float
    modularity_local: float
    token_estimate: int
    blast_radius: int
    centrality: float


@dataclass(frozen=True)
class Cluster:
    """Final, frozen cluster. entity_keys are sorted."""

    id: str
    name: str
    entity_keys: Tuple[str, ...]
    metrics: ClusterMetrics
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ClusterEdge:
    """Aggregated coupling between two distinct clusters (from < to)."""

    from_cluster: str
    to_cluster: str
    control: float
    data: float
    temporal: float
    boundary_crossings: int


@dataclass(frozen=True)
class ClusteringResult:
    """Complete output of one clustering run."""

    clusters: Tuple[Cluster, ...]
    cluster_edges: Tuple[ClusterEdge, ...]
    modularity_global: float
    assignments: Dict[str, str]
    warnings: Tuple[str, ...]
    cluster_hash: str
    algorithm: str = "label_propagation"
