"""
Semantic Atom Kernel - Errors and Input Validation v1.0

Hard-fail validation. Every check runs before any computation starts and
raises a ClusteringError subclass on failure. Non-fatal anomalies (dangling
edges, unsplittable clusters) are never raised; they become warnings.
"""

from __future__ import annotations

import math
from typing import Dict, List, Sequence

from .domain_types import (
    ClusterBudget,
    DependencyEdge,
    EdgeType,
    Entity,
    WeightParameters,
)


# ══════════════════════════════════════════════════════════════
# Exception Hierarchy
# ══════════════════════════════════════════════════════════════

class ClusteringError(Exception):
    """Base exception for all clustering failures."""


class InvalidInput(ClusteringError):
    """Raised when upstream entities, edges or signals are malformed."""


class EmptyGraphError(InvalidInput):
    """Raised when there are no entities to cluster."""


class ConfigurationError(ClusteringError):
    """Raised when budget bounds or weight parameters are unusable."""


class PartitionInvariantError(ClusteringError):
    """Raised when a computed partition does not cover the entity set exactly."""

    def __init__(self, rule: str, detail: str) -> None:
        self.rule = rule
        self.detail = detail
        super().__init__(f"[PARTITION:{rule}] {detail}")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

def validate_budget(budget: ClusterBudget) -> None:
    if budget.min_fun < 1:
        raise ConfigurationError(f"min_fun must be >= 1, got {budget.min_fun}")
    if budget.max_fun < 1:
        raise ConfigurationError(f"max_fun must be >= 1, got {budget.max_fun}")
    if budget.min_fun > budget.max_fun:
        raise ConfigurationError(
            f"min_fun ({budget.min_fun}) exceeds max_fun ({budget.max_fun})"
        )
    if budget.min_tokens < 0:
        raise ConfigurationError(
            f"min_tokens must be >= 0, got {budget.min_tokens}"
        )
    if budget.max_tokens <= 0:
        raise ConfigurationError(
            f"max_tokens must be > 0, got {budget.max_tokens}"
        )
    if budget.min_tokens > budget.max_tokens:
        raise ConfigurationError(
            f"min_tokens ({budget.min_tokens}) exceeds max_tokens ({budget.max_tokens})"
        )


def validate_weights(params: WeightParameters) -> None:
    for name in ("alpha_dep", "beta_data", "gamma_temp", "delta_sem"):
        value = getattr(params, name)
        if not math.isfinite(value) or value < 0:
            raise ConfigurationError(
                f"{name} must be a finite non-negative number, got {value}"
            )
    if not math.isfinite(params.max_edge_weight) or params.max_edge_weight <= 0:
        raise ConfigurationError(
            f"max_edge_weight must be > 0, got {params.max_edge_weight}"
        )


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

def parse_edge_type(raw: object) -> EdgeType:
    """Map a raw string to EdgeType. Unknown kinds are rejected."""
    if isinstance(raw, EdgeType):
        return raw
    try:
        return EdgeType(raw)
    except ValueError:
        valid = sorted(t.value for t in EdgeType)
        raise InvalidInput(
            f"Unknown edge_type {raw!r}. Valid types: {valid}"
        ) from None


def index_entities(entities: Sequence[Entity]) -> Dict[str, int]:
    """Map entity key -> node index. Duplicate keys and negative sizes are fatal."""
    index: Dict[str, int] = {}
    duplicates: List[str] = []
    for position, entity in enumerate(entities):
        for field_name in ("signature_tokens", "lines_of_code"):
            value = getattr(entity, field_name)
            if value is not None and value < 0:
                raise InvalidInput(
                    f"Entity {entity.key!r} has negative {field_name} {value}"
                )
        if entity.key in index:
            duplicates.append(entity.key)
            continue
        index[entity.key] = position
    if duplicates:
        raise InvalidInput(
            f"Duplicate entity keys: {', '.join(sorted(set(duplicates)))}"
        )
    return index


def validate_edge(edge: DependencyEdge) -> None:
    parse_edge_type(edge.edge_type)
    if not math.isfinite(edge.frequency) or edge.frequency < 0:
        raise InvalidInput(
            f"Edge {edge.from_key!r} -> {edge.to_key!r} has invalid "
            f"frequency {edge.frequency}"
        )


def validate_signal_value(name: str, a: str, b: str, value: float) -> None:
    """Signal strengths live in [0, 1]."""
    if math.isnan(value) or value < 0.0 or value > 1.0:
        raise InvalidInput(
            f"{name} signal for ({a!r}, {b!r}) is {value}, "
            f"expected a value in [0, 1]"
        )


# ---------------------------------------------------------------------------
# Partition post-condition
# ---------------------------------------------------------------------------

def validate_partition(
    entity_keys: Sequence[str],
    members_by_cluster: Dict[str, Sequence[str]],
) -> None:
    """Every entity in exactly one non-empty cluster."""
    seen: Dict[str, str] = {}
    for cluster_id, members in members_by_cluster.items():
        if not members:
            raise PartitionInvariantError(
                "empty_cluster", f"Cluster {cluster_id!r} has no members"
            )
        for key in members:
            if key in seen:
                raise PartitionInvariantError(
                    "overlap",
                    f"Entity {key!r} is in both {seen[key]!r} and {cluster_id!r}",
                )
            seen[key] = cluster_id

    expected = set(entity_keys)
    missing = expected - set(seen)
    if missing:
        raise PartitionInvariantError(
            "coverage", f"Unassigned entities: {', '.join(sorted(missing))}"
        )
    extra = set(seen) - expected
    if extra:
        raise PartitionInvariantError(
            "coverage", f"Unknown entities in clusters: {', '.join(sorted(extra))}"
        )
