"""
Semantic Atom Kernel - Weighted Graph Builder v1.0

Turns entities, dependency edges and optional signal maps into one
weighted undirected graph. Pure dict-based, no external dependencies.

Edge weight for an unordered pair {a, b}:

    min(cap, alpha * dep + beta * data + gamma * temporal + delta * semantic)

where dep sums frequency * type factor over every directed dependency
edge between a and b (both directions). Pairs with weight <= 0 get no edge.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from .constants import EDGE_TYPE_FACTORS
from .domain_types import (
    DependencyEdge,
    EdgeType,
    Entity,
    Pair,
    SignalMaps,
    WeightParameters,
    pair_key,
)
from .invariants import (
    index_entities,
    parse_edge_type,
    validate_edge,
    validate_signal_value,
    validate_weights,
)

logger = logging.getLogger(__name__)


def edge_type_factor(edge_type: EdgeType) -> float:
    """Weight multiplier for a dependency kind."""
    return EDGE_TYPE_FACTORS[parse_edge_type(edge_type)]


class WeightedGraph:
    """
    Immutable weighted undirected graph over entity indices.

    Node i corresponds to entities[i]. adjacency[i] maps neighbour index
    to edge weight; every edge appears in both endpoints' maps.
    """

    def __init__(
        self,
        entities: Sequence[Entity],
        adjacency: Sequence[Dict[int, float]],
        dependency_edges: Sequence[DependencyEdge] = (),
        signals: Optional[SignalMaps] = None,
    ) -> None:
        self._entities: Tuple[Entity, ...] = tuple(entities)
        self._keys: Tuple[str, ...] = tuple(e.key for e in self._entities)
        self._adjacency: Tuple[Dict[int, float], ...] = tuple(
            dict(sorted(nbrs.items())) for nbrs in adjacency
        )
        self._strength: Tuple[float, ...] = tuple(
            sum(nbrs.values()) for nbrs in self._adjacency
        )
        self._dependency_edges = tuple(dependency_edges)
        self._signals = signals or SignalMaps()

    # ── Accessors ──────────────────────────────────────────────

    @property
    def node_count(self) -> int:
        return len(self._keys)

    @property
    def keys(self) -> Tuple[str, ...]:
        return self._keys

    @property
    def entities(self) -> Tuple[Entity, ...]:
        return self._entities

    @property
    def dependency_edges(self) -> Tuple[DependencyEdge, ...]:
        """Accepted dependency edges (no dangling endpoints, no self-loops)."""
        return self._dependency_edges

    @property
    def signals(self) -> SignalMaps:
        return self._signals

    def neighbors(self, node: int) -> Dict[int, float]:
        return self._adjacency[node]

    def weight(self, a: int, b: int) -> float:
        return self._adjacency[a].get(b, 0.0)

    def strength(self, node: int) -> float:
        """Total incident edge weight of a node."""
        return self._strength[node]

    @property
    def edge_count(self) -> int:
        return sum(len(nbrs) for nbrs in self._adjacency) // 2


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

def build_weighted_graph(
    entities: Sequence[Entity],
    edges: Sequence[DependencyEdge],
    signals: Optional[SignalMaps] = None,
    params: Optional[WeightParameters] = None,
) -> Tuple[WeightedGraph, List[str]]:
    """
    Build the weighted graph for one clustering run.

    Returns (graph, warnings). Dangling edges and signal pairs are dropped
    with a warning each. Raises InvalidInput on duplicate entity keys, a
    malformed entity, edge or signal value, and ConfigurationError on
    unusable weight parameters.
    """
    params = params or WeightParameters()
    signals = signals or SignalMaps()
    validate_weights(params)
    index = index_entities(entities)

    warnings: List[str] = []
    dep_sum: Dict[Pair, float] = {}
    accepted: List[DependencyEdge] = []

    for edge in edges:
        validate_edge(edge)
        missing = [k for k in (edge.from_key, edge.to_key) if k not in index]
        if missing:
            msg = (
                f"Dropped dangling {parse_edge_type(edge.edge_type).value} edge "
                f"{edge.from_key!r} -> {edge.to_key!r}: unknown "
                f"{', '.join(repr(m) for m in missing)}"
            )
            logger.warning(msg)
            warnings.append(msg)
            continue
        if edge.from_key == edge.to_key:
            continue
        accepted.append(edge)
        key = pair_key(edge.from_key, edge.to_key)
        dep_sum[key] = dep_sum.get(key, 0.0) + edge.frequency * edge_type_factor(edge.edge_type)

    kept_signals = SignalMaps(
        temporal=_known_pairs("temporal", signals.temporal, index, warnings),
        data=_known_pairs("data", signals.data, index, warnings),
        semantic=_known_pairs("semantic", signals.semantic, index, warnings),
    )

    pairs = set(dep_sum)
    pairs.update(kept_signals.temporal)
    pairs.update(kept_signals.data)
    pairs.update(kept_signals.semantic)

    adjacency: List[Dict[int, float]] = [{} for _ in entities]
    for a, b in sorted(pairs):
        raw = (
            params.alpha_dep * dep_sum.get((a, b), 0.0)
            + params.beta_data * kept_signals.data.get((a, b), 0.0)
            + params.gamma_temp * kept_signals.temporal.get((a, b), 0.0)
            + params.delta_sem * kept_signals.semantic.get((a, b), 0.0)
        )
        weight = min(params.max_edge_weight, raw)
        if weight <= 0.0:
            continue
        ia, ib = index[a], index[b]
        adjacency[ia][ib] = weight
        adjacency[ib][ia] = weight

    graph = WeightedGraph(entities, adjacency, accepted, kept_signals)
    logger.debug(
        "Built graph: %d nodes, %d edges, %d dropped",
        graph.node_count, graph.edge_count, len(warnings),
    )
    return graph, warnings


def induced_subgraph(graph: WeightedGraph, nodes: Sequence[int]) -> Tuple[WeightedGraph, List[int]]:
    """
    Subgraph on the given nodes, re-indexed in ascending global order.

    Returns (subgraph, local_to_global).
    """
    local_to_global = sorted(nodes)
    global_to_local = {g: i for i, g in enumerate(local_to_global)}
    adjacency: List[Dict[int, float]] = []
    for g in local_to_global:
        adjacency.append({
            global_to_local[nbr]: w
            for nbr, w in graph.neighbors(g).items()
            if nbr in global_to_local
        })
    entities = [graph.entities[g] for g in local_to_global]
    return WeightedGraph(entities, adjacency), local_to_global


def _known_pairs(
    name: str,
    signal: Dict[Pair, float],
    index: Dict[str, int],
    warnings: List[str],
) -> Dict[Pair, float]:
    kept: Dict[Pair, float] = {}
    for (a, b), value in signal.items():
        validate_signal_value(name, a, b, value)
        if a not in index or b not in index:
            msg = f"Dropped {name} signal for unknown pair ({a!r}, {b!r})"
            logger.warning(msg)
            warnings.append(msg)
            continue
        if a == b or value == 0.0:
            continue
        key = pair_key(a, b)
        kept[key] = max(kept.get(key, 0.0), value)
    return kept
