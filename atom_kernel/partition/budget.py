"""
Budget Enforcer v1.0 - Split / Merge to Size and Token Bounds

Runs after community detection. Two strictly ordered phases:

  Split (to fixpoint):
    - Oversized = members > max_fun or tokens > max_tokens.
    - Re-run label propagation on the cluster's induced subgraph.
    - If that yields a single part, bisect by member strength rank.
    - Children get derived ids "<parent>.<k>".

  Merge (to fixpoint, only after split):
    - Undersized = members < min_fun or tokens < min_tokens.
    - Absorb into the neighbouring cluster with the largest boundary
      weight that stays within max_fun / max_tokens.
      Ties -> smaller cluster id. The target keeps its id.

Both phases are bounded by explicit pass caps. Clusters still outside the
budget afterwards carry a warning; nothing here raises.

Invariant after every step: each node belongs to exactly one cluster and
cluster ids are unique.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..constants import (
    DEFAULT_ENTITY_TOKENS,
    MAX_MERGE_PASSES,
    MAX_SPLIT_PASSES,
    SPLIT_MAX_PASSES,
)
from ..domain_types import ClusterBudget, Entity
from ..graph import WeightedGraph, induced_subgraph
from .propagation import detect_communities

logger = logging.getLogger(__name__)


@dataclass
class WorkingCluster:
    """Mutable cluster used while splitting and merging."""

    id: str
    members: List[int]                       # ascending node indices
    warnings: List[str] = field(default_factory=list)


def entity_token_cost(entity: Entity) -> int:
    """Signature token count if known, else the fixed default."""
    if entity.signature_tokens is not None:
        return entity.signature_tokens
    return DEFAULT_ENTITY_TOKENS


def token_estimate(members: Sequence[int], token_costs: Sequence[int]) -> int:
    return sum(token_costs[m] for m in members)


# ── Public API ────────────────────────────────────────────────

def enforce_budget(
    graph: WeightedGraph,
    clusters: List[WorkingCluster],
    budget: ClusterBudget,
    token_costs: Optional[Sequence[int]] = None,
) -> List[WorkingCluster]:
    """
    Split oversized clusters, then merge undersized ones.

    Returns clusters sorted by id, each annotated with warnings if it is
    still outside the budget.
    """
    if token_costs is None:
        token_costs = [entity_token_cost(e) for e in graph.entities]

    clusters = split_oversized(graph, clusters, budget, token_costs)
    clusters = merge_undersized(graph, clusters, budget, token_costs)

    for cluster in clusters:
        cluster.warnings = _budget_warnings(cluster, budget, token_costs)

    clusters.sort(key=lambda c: c.id)
    return clusters


def split_oversized(
    graph: WeightedGraph,
    clusters: List[WorkingCluster],
    budget: ClusterBudget,
    token_costs: Sequence[int],
) -> List[WorkingCluster]:
    for pass_no in range(1, MAX_SPLIT_PASSES + 1):
        changed = False
        result: List[WorkingCluster] = []
        for cluster in clusters:
            if len(cluster.members) < 2 or not _is_oversized(cluster, budget, token_costs):
                result.append(cluster)
                continue
            parts = _split(graph, cluster.members)
            logger.debug(
                "Split %s (%d members) into %d part(s)",
                cluster.id, len(cluster.members), len(parts),
            )
            for k, part in enumerate(parts):
                result.append(WorkingCluster(id=f"{cluster.id}.{k}", members=part))
            changed = True
        clusters = result
        if not changed:
            logger.debug("Split phase reached fixpoint after %d pass(es)", pass_no)
            break
    else:
        logger.warning("Split phase stopped at pass cap %d", MAX_SPLIT_PASSES)
    return clusters


def merge_undersized(
    graph: WeightedGraph,
    clusters: List[WorkingCluster],
    budget: ClusterBudget,
    token_costs: Sequence[int],
) -> List[WorkingCluster]:
    by_id: Dict[str, WorkingCluster] = {c.id: c for c in clusters}
    owner: Dict[int, str] = {m: c.id for c in clusters for m in c.members}

    for pass_no in range(1, MAX_MERGE_PASSES + 1):
        candidates = sorted(
            cid for cid, c in by_id.items()
            if _is_undersized(c, budget, token_costs)
        )
        if not candidates:
            break

        merged = 0
        for cid in candidates:
            source = by_id.get(cid)
            if source is None or not _is_undersized(source, budget, token_costs):
                continue
            target_id = select_merge_target(
                graph, source, by_id, owner, budget, token_costs,
            )
            if target_id is None:
                continue
            target = by_id[target_id]
            target.members = sorted(target.members + source.members)
            for m in source.members:
                owner[m] = target_id
            del by_id[cid]
            merged += 1
            logger.debug("Merged %s into %s", cid, target_id)

        if merged == 0:
            logger.debug("Merge phase reached fixpoint after %d pass(es)", pass_no)
            break
    else:
        logger.warning("Merge phase stopped at pass cap %d", MAX_MERGE_PASSES)

    return list(by_id.values())


def select_merge_target(
    graph: WeightedGraph,
    source: WorkingCluster,
    by_id: Dict[str, WorkingCluster],
    owner: Dict[int, str],
    budget: ClusterBudget,
    token_costs: Sequence[int],
) -> Optional[str]:
    """
    Neighbouring cluster with the largest boundary weight to source.

    Only targets that keep the merged cluster within max_fun and
    max_tokens are eligible. Ties -> smaller id. None if no target.
    """
    boundary: Dict[str, float] = {}
    for m in source.members:
        for nbr, w in graph.neighbors(m).items():
            other = owner[nbr]
            if other != source.id:
                boundary[other] = boundary.get(other, 0.0) + w

    source_tokens = token_estimate(source.members, token_costs)
    eligible = [
        cid for cid, w in boundary.items()
        if w > 0.0
        and len(by_id[cid].members) + len(source.members) <= budget.max_fun
        and token_estimate(by_id[cid].members, token_costs) + source_tokens <= budget.max_tokens
    ]
    if not eligible:
        return None
    return min(eligible, key=lambda cid: (-boundary[cid], cid))


# ── Internals ─────────────────────────────────────────────────

def _is_oversized(
    cluster: WorkingCluster, budget: ClusterBudget, token_costs: Sequence[int],
) -> bool:
    return (
        len(cluster.members) > budget.max_fun
        or token_estimate(cluster.members, token_costs) > budget.max_tokens
    )


def _is_undersized(
    cluster: WorkingCluster, budget: ClusterBudget, token_costs: Sequence[int],
) -> bool:
    return (
        len(cluster.members) < budget.min_fun
        or token_estimate(cluster.members, token_costs) < budget.min_tokens
    )


def _split(graph: WeightedGraph, members: List[int]) -> List[List[int]]:
    """Re-cluster an induced subgraph; bisect when that finds one part."""
    sub, local_to_global = induced_subgraph(graph, members)
    parts = detect_communities(sub, SPLIT_MAX_PASSES)
    if len(parts) < 2:
        parts = _bisect(sub)
    return [sorted(local_to_global[i] for i in part) for part in parts]


def _bisect(sub: WeightedGraph) -> List[List[int]]:
    """Rank by strength descending (ties by index); first ceil(n/2) vs rest."""
    ranked = sorted(range(sub.node_count), key=lambda i: (-sub.strength(i), i))
    half = (len(ranked) + 1) // 2
    return [sorted(ranked[:half]), sorted(ranked[half:])]


def _budget_warnings(
    cluster: WorkingCluster, budget: ClusterBudget, token_costs: Sequence[int],
) -> List[str]:
    size = len(cluster.members)
    tokens = token_estimate(cluster.members, token_costs)
    warnings: List[str] = []

    if _is_oversized(cluster, budget, token_costs):
        if size < 2:
            reason = "single entity cannot be split"
        else:
            reason = "split pass cap reached"
        warnings.append(
            f"unsplittable: {size} member(s), {tokens} tokens exceeds "
            f"max_fun={budget.max_fun}/max_tokens={budget.max_tokens} ({reason})"
        )
    if _is_undersized(cluster, budget, token_costs):
        warnings.append(
            f"unmergeable: {size} member(s), {tokens} tokens below "
            f"min_fun={budget.min_fun}/min_tokens={budget.min_tokens} "
            f"(no eligible merge target)"
        )
    for w in warnings:
        logger.warning("Cluster %s %s", cluster.id, w)
    return warnings
