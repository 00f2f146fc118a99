"""
Community Detector v1.0 - Synchronous Label Propagation

Deterministic community detection over a WeightedGraph.
No randomness. No in-place updates within a pass.

Algorithm:
  1. Every node starts with its own index as label.
  2. Each pass visits nodes in ascending index order and computes the
     label with the largest summed incident weight among neighbours,
     using only the previous pass's labels (Jacobi update).
     The node's own previous label gets a self-vote equal to its
     strongest incident edge.
     Ties -> smaller label.
  3. Stop when a pass changes nothing or max_passes is reached.
  4. Labels are relabelled densely by first appearance.

Isolated nodes keep their singleton label.
"""

from __future__ import annotations

import logging
from typing import Dict, List

from ..constants import DEFAULT_MAX_PASSES
from ..graph import WeightedGraph

logger = logging.getLogger(__name__)


# ── Public API ────────────────────────────────────────────────

def propagate_labels(
    graph: WeightedGraph,
    max_passes: int = DEFAULT_MAX_PASSES,
) -> List[int]:
    """
    Run synchronous label propagation. Returns the raw label per node.

    Pure function of the graph and max_passes.
    """
    labels = list(range(graph.node_count))
    for pass_no in range(1, max_passes + 1):
        updated = [_vote(node, labels, graph) for node in range(graph.node_count)]
        if updated == labels:
            logger.debug("Label propagation converged after %d pass(es)", pass_no)
            return labels
        labels = updated
    logger.debug("Label propagation stopped at pass cap %d", max_passes)
    return labels


def detect_communities(
    graph: WeightedGraph,
    max_passes: int = DEFAULT_MAX_PASSES,
) -> List[List[int]]:
    """
    Partition the graph's nodes into communities.

    Parts are ordered by first appearance of their label in node order;
    members inside a part are in ascending node index. Every node appears
    in exactly one part.
    """
    return dense_parts(propagate_labels(graph, max_passes))


def dense_parts(labels: List[int]) -> List[List[int]]:
    """Group node indices by label, in first-appearance order."""
    slot: Dict[int, int] = {}
    parts: List[List[int]] = []
    for node, label in enumerate(labels):
        if label not in slot:
            slot[label] = len(parts)
            parts.append([])
        parts[slot[label]].append(node)
    return parts


def initial_cluster_id(position: int) -> str:
    """Dense identifier for the n-th detected community."""
    return f"cluster_{position:03d}"


# ── Voting ────────────────────────────────────────────────────

def _vote(node: int, labels: List[int], graph: WeightedGraph) -> int:
    neighbours = graph.neighbors(node)
    if not neighbours:
        return labels[node]

    votes: Dict[int, float] = {labels[node]: max(neighbours.values())}
    for nbr, weight in neighbours.items():
        label = labels[nbr]
        votes[label] = votes.get(label, 0.0) + weight

    # Max weight, ties broken toward the smaller label
    return min(votes, key=lambda lbl: (-votes[lbl], lbl))
