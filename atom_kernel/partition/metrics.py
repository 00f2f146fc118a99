from __future__ import annotations

from typing import Dict, List, Sequence, Set, Tuple

from ..constants import DATA_EDGE_TYPES
from ..domain_types import ClusterEdge, ClusterMetrics, EdgeType, Pair, pair_key
from ..graph import WeightedGraph, edge_type_factor
from ..invariants import parse_edge_type
from .budget import token_estimate


def compute_cluster_metrics(
    graph: WeightedGraph,
    members: Sequence[int],
    token_costs: Sequence[int],
) -> ClusterMetrics:
    """
    Per-cluster quality metrics.

      internal   = sum of edge weights with both endpoints inside (once each)
      external   = sum of edge weights with exactly one endpoint inside
      cohesion   = internal / (internal + external), 0 if both are 0
      coupling   = 1 - cohesion, 0 if the cluster has no incident weight
      modularity_local = cohesion - coupling   (heuristic, range -1..1)
      blast_radius     = distinct entities outside directly connected
      centrality       = mean member strength
    """
    inside: Set[int] = set(members)
    internal = 0.0
    external = 0.0
    outside_neighbours: Set[int] = set()

    for m in members:
        for nbr, w in graph.neighbors(m).items():
            if nbr in inside:
                if m < nbr:
                    internal += w
            else:
                external += w
                outside_neighbours.add(nbr)

    incident = internal + external
    if incident > 0.0:
        cohesion = internal / incident
        coupling = 1.0 - cohesion
    else:
        cohesion = 0.0
        coupling = 0.0

    centrality = (
        sum(graph.strength(m) for m in members) / len(members) if members else 0.0
    )

    return ClusterMetrics(
        cohesion=cohesion,
        coupling=coupling,
        modularity_local=cohesion - coupling,
        token_estimate=token_estimate(members, token_costs),
        blast_radius=len(outside_neighbours),
        centrality=centrality,
    )


def compute_global_modularity(metrics: Sequence[ClusterMetrics]) -> float:
    """
    Mean modularity_local over clusters that have incident weight.
    Returns 0.0 if no cluster has any.
    """
    scored = [
        m.modularity_local for m in metrics
        if m.cohesion > 0.0 or m.coupling > 0.0
    ]
    if not scored:
        return 0.0
    return sum(scored) / len(scored)


def compute_cluster_edges(
    graph: WeightedGraph,
    owner: Dict[str, str],
) -> List[ClusterEdge]:
    """
    Collapse entity-level dependencies into cluster-level edges.

    One ClusterEdge per unordered pair of distinct clusters joined by at
    least one accepted dependency edge. Signal contributions are only
    added to pairs that already have such an edge.
    Returns edges sorted by (from_cluster, to_cluster).
    """
    control: Dict[Pair, float] = {}
    data: Dict[Pair, float] = {}
    crossings: Dict[Pair, int] = {}

    for edge in graph.dependency_edges:
        a = owner[edge.from_key]
        b = owner[edge.to_key]
        if a == b:
            continue
        key = pair_key(a, b)
        edge_type = parse_edge_type(edge.edge_type)
        contribution = edge.frequency * edge_type_factor(edge_type)
        crossings[key] = crossings.get(key, 0) + 1
        control.setdefault(key, 0.0)
        data.setdefault(key, 0.0)
        if edge_type is EdgeType.CALL:
            control[key] += contribution
        elif edge_type in DATA_EDGE_TYPES:
            data[key] += contribution

    temporal: Dict[Pair, float] = {}
    for (a, b), value in graph.signals.data.items():
        key = _crossing_key(owner, a, b)
        if key in crossings:
            data[key] += value
    for (a, b), value in graph.signals.temporal.items():
        key = _crossing_key(owner, a, b)
        if key in crossings:
            temporal[key] = temporal.get(key, 0.0) + value

    return [
        ClusterEdge(
            from_cluster=key[0],
            to_cluster=key[1],
            control=control[key],
            data=data[key],
            temporal=temporal.get(key, 0.0),
            boundary_crossings=crossings[key],
        )
        for key in sorted(crossings)
    ]


def _crossing_key(owner: Dict[str, str], a: str, b: str) -> Tuple[str, str] | None:
    ca, cb = owner[a], owner[b]
    if ca == cb:
        return None
    return pair_key(ca, cb)
