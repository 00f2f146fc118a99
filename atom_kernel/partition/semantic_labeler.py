"""
Semantic Labeler - Post-Cluster Name Assignment

Runs AFTER the budget enforcer has fixed the partition.
Never influences partitioning. Never raises.

Name = "{dominant_token}_{common_prefix}":
  dominant_token: most frequent word-like token across member names
                  (split on non-alphanumeric, lowercased, must contain a
                  letter). Ties -> lexicographic first.
  common_prefix:  longest common prefix of member file-name stems,
                  trailing separators stripped.
Falls back to the dominant token alone, then to UNNAMED_CLUSTER.
"""

from __future__ import annotations

import os
import re
from collections import Counter
from typing import List, Optional, Sequence

from ..constants import UNNAMED_CLUSTER
from ..domain_types import Entity

_TOKEN_SPLIT = re.compile(r"[^0-9A-Za-z]+")
_PREFIX_TRIM = "_-."


def label_cluster(members: Sequence[Entity]) -> str:
    """Human-readable name for a cluster."""
    dominant = dominant_token(members)
    if dominant is None:
        return UNNAMED_CLUSTER
    prefix = common_stem_prefix(members)
    if prefix:
        return f"{dominant}_{prefix}"
    return dominant


def dominant_token(members: Sequence[Entity]) -> Optional[str]:
    counts: Counter = Counter()
    for entity in members:
        counts.update(_name_tokens(entity.name))
    if not counts:
        return None
    return max(sorted(counts), key=lambda tok: counts[tok])


def common_stem_prefix(members: Sequence[Entity]) -> str:
    stems = [_file_stem(e.file_path) for e in members]
    if not stems:
        return ""
    prefix = os.path.commonprefix(stems)
    return prefix.rstrip(_PREFIX_TRIM)


def _name_tokens(name: str) -> List[str]:
    return [
        tok.lower() for tok in _TOKEN_SPLIT.split(name)
        if tok and any(ch.isalpha() for ch in tok)
    ]


def _file_stem(path: str) -> str:
    base = path.replace("\\", "/").rsplit("/", 1)[-1]
    stem, _ = os.path.splitext(base)
    return stem
